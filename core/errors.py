from __future__ import annotations


class DirectoryError(Exception):
    """Base de toutes les erreurs du carnet de contacts."""


class ContactParseError(DirectoryError, ValueError):
    """Ligne de stockage illisible (champ manquant, date invalide...)."""

    def __init__(self, message: str, line: str = ""):
        super().__init__(message)
        self.line = line


class StorageError(DirectoryError, OSError):
    """Lecture / écriture impossible sur le fichier de données ou d'export."""
