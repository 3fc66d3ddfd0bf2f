from __future__ import annotations

import glob
import logging
import shutil
from datetime import datetime
from pathlib import Path
from typing import Iterable, List, Union

from core.errors import StorageError

logger = logging.getLogger(__name__)


class LineRepository:
    """
    Fichier texte, un enregistrement par ligne.
    - Réécriture complète à chaque sauvegarde (pas d'ajout incrémental)
    - Fichier absent == collection vide
    - N'écrit pas si le contenu ne change pas
    - Rotation de backups optionnelle (backup_enabled, backup_keep)
    """

    def __init__(
        self,
        filepath: Union[str, Path],
        *,
        backup_enabled: bool = False,
        backup_keep: int = 5,
        encoding: str = "utf-8",
    ) -> None:
        self.filepath = Path(filepath)
        self.backup_enabled = backup_enabled
        self.backup_keep = max(0, int(backup_keep))
        self.encoding = encoding
        self.last_skipped: List[str] = []

    # ---------------- Lecture ---------------- #

    def read_lines(self) -> List[str]:
        """
        Lignes non vides du fichier ; [] si le fichier n'existe pas.
        Chaque ligne est décodée séparément: une ligne illisible est ignorée
        (et notée dans last_skipped), les autres sont conservées.
        """
        self.last_skipped = []
        try:
            raw = self.filepath.read_bytes()
        except FileNotFoundError:
            return []
        except OSError as e:
            raise StorageError(f"cannot read {self.filepath}: {e}") from e

        lines: List[str] = []
        for n, chunk in enumerate(raw.splitlines(), start=1):
            try:
                text = chunk.decode(self.encoding)
            except UnicodeDecodeError as e:
                self.last_skipped.append(f"line {n}: {e}")
                logger.warning("Skipping undecodable line %d of %s: %s", n, self.filepath, e)
                continue
            if text.strip():
                lines.append(text)
        return lines

    # ---------------- Backups ---------------- #

    def _backup_pattern(self) -> str:
        return str(self.filepath.with_name(f"{self.filepath.stem}.*.bak{self.filepath.suffix}"))

    def _rotate_backups(self) -> None:
        if self.backup_keep <= 0:
            return
        files = sorted(glob.glob(self._backup_pattern()))
        # garde les plus récents
        for old in files[: max(0, len(files) - self.backup_keep)]:
            try:
                Path(old).unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not remove old backup %s: %s", old, e)

    def _backup(self) -> None:
        ts = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
        backup = self.filepath.with_name(f"{self.filepath.stem}.{ts}.bak{self.filepath.suffix}")
        try:
            shutil.copy2(self.filepath, backup)
        except OSError as e:
            logger.warning("Backup of %s failed: %s", self.filepath, e)
            return
        self._rotate_backups()

    # ---------------- Écriture ---------------- #

    def write_lines(self, lines: Iterable[str]) -> bool:
        """
        Remplace tout le contenu du fichier.
        Retourne False si rien n'a été écrit (contenu identique).
        """
        content = "".join(f"{ln}\n" for ln in lines)
        try:
            if self.filepath.exists():
                if self.filepath.read_bytes() == content.encode(self.encoding):
                    return False
                if self.backup_enabled:
                    self._backup()
            self.filepath.parent.mkdir(parents=True, exist_ok=True)
            with self.filepath.open("w", encoding=self.encoding, newline="\n") as f:
                f.write(content)
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"cannot write {self.filepath}: {e}") from e
        return True
