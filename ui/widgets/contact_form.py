from __future__ import annotations
from datetime import date, datetime
from typing import Any, Callable, Dict, Optional

from core.models.contact import DEFAULT_CATEGORY
from core.models.validators import format_phone, is_valid_email, is_valid_name, is_valid_phone

BIRTHDAY_INPUT_FORMAT = "%d/%m/%Y"
CATEGORIES_HINT = "Catégories : Family | Friend | Work | Other"

InputFn = Callable[[str], str]
OutputFn = Callable[[str], None]


class Console:
    """Entrée/sortie de la console ; injectable pour les tests."""

    def __init__(self, input_fn: InputFn = input, output_fn: OutputFn = print):
        self._input = input_fn
        self._output = output_fn

    def ask(self, prompt: str) -> str:
        return self._input(prompt).strip()

    def ask_int(self, prompt: str, default: int = -1) -> int:
        raw = self.ask(prompt)
        try:
            return int(raw)
        except ValueError:
            return default

    def say(self, text: str = "") -> None:
        self._output(text)


def parse_birthday(raw: str) -> Optional[date]:
    """'jj/mm/aaaa' -> date ; ValueError si la saisie est invalide."""
    return datetime.strptime(raw.strip(), BIRTHDAY_INPUT_FORMAT).date()


class ContactForm:
    """Saisie guidée d'un nouveau contact (redemande tant que la valeur est invalide)."""

    def __init__(self, console: Console):
        self.console = console

    def _ask_until(self, prompt: str, ok: Callable[[str], bool], error: str) -> str:
        while True:
            value = self.console.ask(prompt)
            if ok(value):
                return value
            self.console.say(error)

    def get_contact_fields(self) -> Dict[str, Any]:
        name = self._ask_until(
            "Nom complet : ", is_valid_name, "❌ Le nom doit faire au moins 2 caractères"
        )
        phone = self._ask_until(
            "Téléphone : ", is_valid_phone, "❌ Téléphone invalide (10 à 12 chiffres)"
        )
        email = self._ask_until(
            "Email (optionnel, Entrée pour passer) : ", is_valid_email, "❌ Format d'email invalide"
        )

        birthday = None
        raw = self.console.ask("Anniversaire (jj/mm/aaaa, optionnel, Entrée pour passer) : ")
        if raw:
            try:
                birthday = parse_birthday(raw)
            except ValueError:
                self.console.say("⚠️  Date invalide, anniversaire ignoré")

        self.console.say(CATEGORIES_HINT)
        category = self.console.ask("Catégorie : ") or DEFAULT_CATEGORY

        return {
            "name": name,
            "phone": format_phone(phone),
            "email": email or None,
            "birthday": birthday,
            "category": category,
        }
