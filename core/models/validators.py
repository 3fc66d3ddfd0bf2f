from __future__ import annotations
import re
from typing import Optional

# séparateurs tolérés à la saisie: espaces, tirets, parenthèses, '+'
_PHONE_SEPARATORS = re.compile(r"[\s\-()+]")
_PHONE_DIGITS = re.compile(r"[0-9]{10,12}")
_EMAIL = re.compile(r"[a-zA-Z0-9._%+\-]+@[a-zA-Z0-9.\-]+\.[a-zA-Z]{2,}")


def clean_phone(phone: Optional[str]) -> str:
    """Numéro sans séparateurs (forme normalisée, sert aux comparaisons)."""
    return _PHONE_SEPARATORS.sub("", phone or "")


def is_valid_phone(phone: Optional[str]) -> bool:
    if phone is None or not phone.strip():
        return False
    return _PHONE_DIGITS.fullmatch(clean_phone(phone)) is not None


def is_valid_email(email: Optional[str]) -> bool:
    # champ optionnel: vide == valide
    if email is None or not email.strip():
        return True
    return _EMAIL.fullmatch(email) is not None


def is_valid_name(name: Optional[str]) -> bool:
    return name is not None and len(name.strip()) >= 2


def format_phone(phone: Optional[str]) -> str:
    """
    10 chiffres -> 'NNNNN-NNNNN', sinon les chiffres nettoyés tels quels.
    """
    cleaned = clean_phone(phone)
    if len(cleaned) == 10:
        return f"{cleaned[:5]}-{cleaned[5:]}"
    return cleaned
