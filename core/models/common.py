from __future__ import annotations
from datetime import date, datetime
from typing import Optional
import re

ID_PREFIX = "C"
_ID_RE = re.compile(rf"^{ID_PREFIX}(\d+)$", re.IGNORECASE)


def format_contact_id(seq: int) -> str:
    return f"{ID_PREFIX}{seq:04d}"


def contact_id_seq(contact_id: str) -> Optional[int]:
    """Numéro de séquence d'un id 'C0042' -> 42 ; None si l'id n'a pas cette forme."""
    m = _ID_RE.match((contact_id or "").strip())
    return int(m.group(1)) if m else None


def today() -> date:
    return date.today()


def now() -> datetime:
    return datetime.now()
