from __future__ import annotations

import logging
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import ValidationError

from core.config import DATA_DIR, Settings
from core.errors import ContactParseError, StorageError
from core.models.common import contact_id_seq, format_contact_id, now, today
from core.models.contact import DEFAULT_CATEGORY, Contact, first_error
from core.models.reports import DirectoryStats, ExportReport, LoadReport, OperationResult
from core.models.validators import (
    clean_phone, format_phone, is_valid_email, is_valid_name, is_valid_phone,
)
from core.services.export_service import export_contacts_csv
from core.storage.repo import LineRepository

logger = logging.getLogger(__name__)

CONTACTS_DAT = DATA_DIR / "contacts.dat"
DEFAULT_EXPORT_FILE = "contacts_export.csv"
DEFAULT_REMINDER_DAYS = 30

UPDATABLE_FIELDS = ("name", "phone", "email", "category")


class SortKey(str, Enum):
    NAME = "name"
    CATEGORY = "category"
    RECENT = "recent"

    @classmethod
    def parse(cls, value: Union["SortKey", str, None]) -> Optional["SortKey"]:
        if isinstance(value, SortKey):
            return value
        try:
            return cls((value or "").strip().lower())
        except ValueError:
            return None


# clé de tri -> (fonction de clé, ordre décroissant)
_SORTERS: Dict[SortKey, Tuple[Callable[[Contact], Any], bool]] = {
    SortKey.NAME: (lambda c: c.name.casefold(), False),
    SortKey.CATEGORY: (lambda c: c.category, False),
    SortKey.RECENT: (lambda c: c.added_on, True),
}


class ContactDirectory:
    """
    Répertoire de contacts en mémoire, persisté ligne à ligne.
    - Ordre d'insertion conservé
    - Chaque mutation réussie réécrit tout le fichier (write-through)
    - Échec d'écriture: signalé, l'état mémoire est conservé
    - Ids 'C0001'... issus d'un compteur propre au répertoire (max des ids chargés + 1)
    """

    def __init__(
        self,
        path: Union[str, Path] = CONTACTS_DAT,
        *,
        repo: Optional[LineRepository] = None,
        export_file: Union[str, Path] = DEFAULT_EXPORT_FILE,
        clock: Callable[[], date] = today,
        now_fn: Callable[[], datetime] = now,
        reminder_days: int = DEFAULT_REMINDER_DAYS,
        autoload: bool = True,
    ) -> None:
        self.repo = repo or LineRepository(path)
        self.export_file = Path(export_file)
        self._clock = clock
        self._now = now_fn
        self.reminder_days = max(0, int(reminder_days))
        self._contacts: List[Contact] = []
        self._next_seq = 1
        self.last_load = LoadReport()
        if autoload:
            self.load()

    @classmethod
    def from_settings(cls, settings: Settings, **kw: Any) -> "ContactDirectory":
        repo = LineRepository(
            settings.data_path,
            backup_enabled=settings.backup_enabled,
            backup_keep=settings.backup_keep,
        )
        kw.setdefault("reminder_days", settings.reminder_days)
        return cls(repo=repo, export_file=settings.export_file, **kw)

    # ---------------- Accès ---------------- #

    @property
    def contacts(self) -> List[Contact]:
        return list(self._contacts)

    @property
    def next_id(self) -> str:
        return format_contact_id(self._next_seq)

    def __len__(self) -> int:
        return len(self._contacts)

    def __iter__(self) -> Iterator[Contact]:
        return iter(list(self._contacts))

    # ---------------- Persistance ---------------- #

    def load(self) -> LoadReport:
        """Recharge depuis le fichier ; les lignes invalides sont ignorées avec un warning."""
        report = LoadReport()
        self._contacts = []
        try:
            lines = self.repo.read_lines()
        except StorageError as e:
            logger.warning("Could not load contacts: %s", e)
            report.error = str(e)
            lines = []
        for skipped in self.repo.last_skipped:
            report.warnings.append(f"Skipping unreadable {skipped}")

        seen_ids = set()
        seen_phones = set()
        for line in lines:
            try:
                c = Contact.from_line(line)
            except ContactParseError as e:
                report.warnings.append(f"Skipping malformed line {line!r}: {e}")
                logger.warning("Skipping malformed line %r: %s", line, e)
                continue
            key_id = (c.id or "").upper()
            key_phone = clean_phone(c.phone)
            if key_id in seen_ids or key_phone in seen_phones:
                report.warnings.append(f"Skipping duplicate contact {line!r}")
                logger.warning("Skipping duplicate contact %r", line)
                continue
            seen_ids.add(key_id)
            seen_phones.add(key_phone)
            self._contacts.append(c)

        seqs = [s for s in (contact_id_seq(c.id or "") for c in self._contacts) if s is not None]
        self._next_seq = max(seqs, default=0) + 1
        report.loaded = len(self._contacts)
        if report.loaded:
            logger.info("Loaded %d contacts from %s", report.loaded, self.repo.filepath)
        self.last_load = report
        return report

    def save(self) -> Optional[str]:
        """Réécrit tout le fichier. Retourne le message d'erreur, ou None si OK."""
        try:
            self.repo.write_lines(c.to_line() for c in self._contacts)
        except StorageError as e:
            logger.warning("Error saving contacts: %s", e)
            return str(e)
        return None

    def _committed(self, contact: Optional[Contact]) -> OperationResult:
        err = self.save()
        if err:
            return OperationResult.success(contact, persisted=False, warning=err)
        return OperationResult.success(contact)

    # ---------------- CRUD ---------------- #

    def _phone_taken(self, phone: str, exclude_id: Optional[str] = None) -> bool:
        key = clean_phone(phone)
        for c in self._contacts:
            if exclude_id and (c.id or "").upper() == exclude_id.upper():
                continue
            if clean_phone(c.phone) == key:
                return True
        return False

    def create(
        self,
        name: str,
        phone: str,
        email: Optional[str] = None,
        birthday: Optional[date] = None,
        category: Optional[str] = None,
    ) -> OperationResult:
        """Nouveau contact: id suivant + date d'ajout maintenant, puis add()."""
        try:
            contact = Contact(
                id=self.next_id,
                name=name,
                phone=phone,
                email=email,
                birthday=birthday,
                category=category,
                added_on=self._now(),
            )
        except ValidationError as e:
            return OperationResult.failure(first_error(e))
        return self.add(contact)

    def add(self, contact: Contact) -> OperationResult:
        if self._phone_taken(contact.phone):
            return OperationResult.failure("Phone number already exists")
        if contact.id is None:
            contact = contact.model_copy(update={"id": self.next_id})
        elif self.find_by_id(contact.id) is not None:
            return OperationResult.failure(f"Contact id {contact.id} already exists")

        seq = contact_id_seq(contact.id or "")
        if seq is not None and seq >= self._next_seq:
            self._next_seq = seq + 1
        self._contacts.append(contact)
        return self._committed(contact)

    def delete(self, contact_id: str) -> OperationResult:
        contact = self.find_by_id(contact_id)
        if contact is None:
            return OperationResult.failure("Contact not found")
        self._contacts = [c for c in self._contacts if c is not contact]
        return self._committed(contact)

    def update(self, contact_id: str, field: str, value: Optional[str]) -> OperationResult:
        """
        Met à jour un seul champ (name, phone, email, category) après validation.
        Rien n'est modifié si la nouvelle valeur est refusée.
        """
        contact = self.find_by_id(contact_id)
        if contact is None:
            return OperationResult.failure("Contact not found")

        key = (field or "").strip().lower()
        value = value if value is not None else ""
        if key == "name":
            if not is_valid_name(value):
                return OperationResult.failure("Invalid name: at least 2 characters required")
        elif key == "phone":
            if not is_valid_phone(value):
                return OperationResult.failure("Invalid phone: 10 to 12 digits required")
            value = format_phone(value)
            if self._phone_taken(value, exclude_id=contact.id):
                return OperationResult.failure("Phone number already exists")
        elif key == "email":
            value = value.strip()
            if not is_valid_email(value):
                return OperationResult.failure("Invalid email format")
            value = value or None
        elif key == "category":
            value = value.strip() or DEFAULT_CATEGORY
        else:
            return OperationResult.failure(
                f"Unknown field {field!r} (expected one of {', '.join(UPDATABLE_FIELDS)})"
            )

        try:
            setattr(contact, key, value)
        except ValidationError as e:
            return OperationResult.failure(first_error(e))
        return self._committed(contact)

    # ---------------- Recherches ---------------- #

    def find_by_id(self, contact_id: str) -> Optional[Contact]:
        wanted = (contact_id or "").strip().upper()
        for c in self._contacts:
            if (c.id or "").upper() == wanted:
                return c
        return None

    def search_by_name(self, query: str) -> List[Contact]:
        q = (query or "").strip().lower()
        return [c for c in self._contacts if q in c.name.lower()]

    def search_by_phone(self, query: str) -> List[Contact]:
        q = (query or "").strip()
        return [c for c in self._contacts if q in c.phone]

    def search_by_email(self, query: str) -> List[Contact]:
        q = (query or "").strip().lower()
        return [c for c in self._contacts if c.email and q in c.email.lower()]

    def search_all(self, query: str) -> List[Contact]:
        """Nom, téléphone ou email ; dédoublonné par id, ordre d'insertion."""
        matched = {
            c.id
            for group in (self.search_by_name(query), self.search_by_phone(query), self.search_by_email(query))
            for c in group
        }
        return [c for c in self._contacts if c.id in matched]

    def filter_by_category(self, category: str) -> List[Contact]:
        wanted = (category or "").strip().lower()
        return [c for c in self._contacts if c.category.lower() == wanted]

    # ---------------- Anniversaires ---------------- #

    def upcoming_birthdays(self, within_days: int) -> List[Contact]:
        """Anniversaires dans les `within_days` prochains jours, le plus proche d'abord."""
        t = self._clock()
        hits = [(c.days_until_birthday(t), c) for c in self._contacts if c.birthday is not None]
        hits = [(d, c) for d, c in hits if d <= within_days]
        # tri stable: à égalité, ordre d'insertion
        hits.sort(key=lambda dc: dc[0])
        return [c for _, c in hits]

    def days_until_birthday(self, contact: Contact) -> int:
        return contact.days_until_birthday(self._clock())

    def age(self, contact: Contact) -> int:
        return contact.age(self._clock())

    @property
    def today(self) -> date:
        return self._clock()

    # ---------------- Tri / stats / export ---------------- #

    def list_sorted(self, sort_key: Union[SortKey, str, None] = None) -> List[Contact]:
        key = SortKey.parse(sort_key)
        if key is None:
            return list(self._contacts)
        fn, reverse = _SORTERS[key]
        return sorted(self._contacts, key=fn, reverse=reverse)

    def statistics(self) -> DirectoryStats:
        by_category: Dict[str, int] = {}
        for c in self._contacts:
            by_category[c.category] = by_category.get(c.category, 0) + 1
        return DirectoryStats(
            total=len(self._contacts),
            with_email=sum(1 for c in self._contacts if c.email),
            with_birthday=sum(1 for c in self._contacts if c.birthday is not None),
            by_category=by_category,
            upcoming_birthdays=len(self.upcoming_birthdays(self.reminder_days)),
            birthday_window=self.reminder_days,
        )

    def export_csv(self, destination: Union[str, Path, None] = None) -> ExportReport:
        dest = Path(destination) if destination else self.export_file
        try:
            return export_contacts_csv(self._contacts, dest)
        except StorageError as e:
            logger.warning("Export failed: %s", e)
            return ExportReport(ok=False, path=str(dest), reason=str(e))
