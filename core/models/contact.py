from __future__ import annotations
from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from core.errors import ContactParseError
from .common import now, today as _today
from .validators import format_phone, is_valid_email, is_valid_name, is_valid_phone

DEFAULT_CATEGORY = "Other"
FIELD_SEPARATOR = "|"
FIELD_COUNT = 7
NO_BIRTHDAY = -1


def _check_storable(value: str, what: str) -> str:
    # le séparateur ou un saut de ligne casserait le fichier .dat
    if FIELD_SEPARATOR in value or "\n" in value or "\r" in value:
        raise ValueError(f"{what} cannot contain '{FIELD_SEPARATOR}' or line breaks")
    return value


def _anniversary(birthday: date, year: int) -> date:
    try:
        return birthday.replace(year=year)
    except ValueError:
        # 29 février hors année bissextile
        return date(year, 2, 28)


class Contact(BaseModel):
    model_config = ConfigDict(validate_assignment=True, extra="ignore")

    id: Optional[str] = Field(default=None, frozen=True)
    name: str
    phone: str
    email: Optional[str] = None
    birthday: Optional[date] = None
    category: str = DEFAULT_CATEGORY
    added_on: datetime = Field(default_factory=now, frozen=True)

    # ---------------- Validation ---------------- #

    @field_validator("id")
    @classmethod
    def _v_id(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        v = v.strip()
        if not v:
            raise ValueError("id cannot be blank")
        return _check_storable(v, "id")

    @field_validator("name")
    @classmethod
    def _v_name(cls, v: str) -> str:
        if not is_valid_name(v):
            raise ValueError("name must be at least 2 characters")
        return _check_storable(v.strip(), "name")

    @field_validator("phone")
    @classmethod
    def _v_phone(cls, v: str) -> str:
        if not is_valid_phone(v):
            raise ValueError("phone must contain 10 to 12 digits")
        return format_phone(v)

    @field_validator("email", mode="before")
    @classmethod
    def _v_email(cls, v: Optional[str]) -> Optional[str]:
        if v is None or not str(v).strip():
            return None
        v = str(v).strip()
        if not is_valid_email(v):
            raise ValueError("invalid email format")
        return v

    @field_validator("category", mode="before")
    @classmethod
    def _v_category(cls, v: Optional[str]) -> str:
        if v is None or not str(v).strip():
            return DEFAULT_CATEGORY
        return _check_storable(str(v).strip(), "category")

    # ---------------- Champs dérivés ---------------- #

    def age(self, today: Optional[date] = None) -> int:
        """Âge en années révolues, -1 sans date de naissance (0 si la date est dans le futur)."""
        if self.birthday is None:
            return NO_BIRTHDAY
        t = today or _today()
        b = self.birthday
        if b > t:
            return 0
        return t.year - b.year - ((t.month, t.day) < (b.month, b.day))

    def next_birthday(self, today: Optional[date] = None) -> Optional[date]:
        if self.birthday is None:
            return None
        t = today or _today()
        nxt = _anniversary(self.birthday, t.year)
        if nxt < t:
            nxt = _anniversary(self.birthday, t.year + 1)
        return nxt

    def days_until_birthday(self, today: Optional[date] = None) -> int:
        """
        Jours avant le prochain anniversaire:
          - 0 le jour même
          - sinon l'occurrence de cette année si elle est à venir, celle de l'an prochain sinon
          - -1 sans date de naissance
        """
        t = today or _today()
        nxt = self.next_birthday(t)
        if nxt is None:
            return NO_BIRTHDAY
        return (nxt - t).days

    # ---------------- Format .dat ---------------- #

    def to_line(self) -> str:
        return FIELD_SEPARATOR.join([
            self.id or "",
            self.name,
            self.phone,
            self.email or "",
            self.birthday.isoformat() if self.birthday else "",
            self.category,
            self.added_on.isoformat(),
        ])

    @classmethod
    def from_line(cls, line: str) -> "Contact":
        raw = line.rstrip("\r\n")
        parts = raw.split(FIELD_SEPARATOR)
        if len(parts) < FIELD_COUNT:
            raise ContactParseError(
                f"expected {FIELD_COUNT} fields, got {len(parts)}", line=raw
            )
        try:
            birthday = date.fromisoformat(parts[4]) if parts[4] else None
            added_on = datetime.fromisoformat(parts[6])
        except ValueError as e:
            raise ContactParseError(f"bad date: {e}", line=raw) from e
        try:
            return cls(
                id=parts[0],
                name=parts[1],
                phone=parts[2],
                email=parts[3] or None,
                birthday=birthday,
                category=parts[5],
                added_on=added_on,
            )
        except ValidationError as e:
            raise ContactParseError(first_error(e), line=raw) from e


def first_error(exc: ValidationError) -> str:
    """Message lisible de la première erreur pydantic ('Value error, ...' -> '...')."""
    errors = exc.errors()
    if not errors:
        return str(exc)
    err = errors[0]
    msg = str(err.get("msg", "invalid value"))
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    loc = ".".join(str(p) for p in err.get("loc", ()))
    return f"{loc}: {msg}" if loc else msg
