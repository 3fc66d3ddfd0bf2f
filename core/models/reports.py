from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Dict, List, Optional

from .contact import Contact


class OperationResult(BaseModel):
    """
    Retour des opérations du répertoire.
    - ok=False + reason : tentative refusée, rien n'a changé
    - ok=True + persisted=False : changement appliqué en mémoire mais pas écrit sur disque
    """
    ok: bool
    reason: Optional[str] = None
    contact: Optional[Contact] = None
    persisted: bool = True
    warning: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, contact: Optional[Contact] = None, **kw) -> "OperationResult":
        return cls(ok=True, contact=contact, **kw)

    @classmethod
    def failure(cls, reason: str) -> "OperationResult":
        return cls(ok=False, reason=reason, persisted=False)


class LoadReport(BaseModel):
    loaded: int = 0
    warnings: List[str] = Field(default_factory=list)
    error: Optional[str] = None  # fichier illisible


class ExportReport(BaseModel):
    ok: bool = True
    path: str
    rows: int = 0
    reason: Optional[str] = None

    def __bool__(self) -> bool:
        return self.ok


class DirectoryStats(BaseModel):
    total: int = 0
    with_email: int = 0
    with_birthday: int = 0
    by_category: Dict[str, int] = Field(default_factory=dict)
    upcoming_birthdays: int = 0
    birthday_window: int = 30
