from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, ValidationError, field_validator

logger = logging.getLogger(__name__)

# --- Chemins de base ---
ROOT_DIR = Path(__file__).resolve().parents[1]
DATA_DIR = ROOT_DIR / "data"
SETTINGS_FILENAME = "settings.json"

ENV_DATA_DIR = "CONTACTS_DATA_DIR"
ENV_LOG_LEVEL = "CONTACTS_LOG_LEVEL"


class Settings(BaseModel):
    data_dir: Path = DATA_DIR
    data_file: str = "contacts.dat"
    export_file: str = "contacts_export.csv"
    backup_enabled: bool = False
    backup_keep: int = 5
    seed_sample_data: bool = True
    reminder_days: int = 30
    log_level: str = "WARNING"

    @field_validator("log_level")
    @classmethod
    def _v_level(cls, v: str) -> str:
        v = (v or "").strip().upper()
        if v not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level {v!r}")
        return v

    @field_validator("backup_keep", "reminder_days")
    @classmethod
    def _v_positive(cls, v: int) -> int:
        return max(0, int(v))

    @property
    def data_path(self) -> Path:
        return Path(self.data_dir) / self.data_file


def _load_json(path: Path) -> Optional[Dict[str, Any]]:
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Ignoring unreadable settings file %s: %s", path, e)
        return None
    if not isinstance(data, dict):
        logger.warning("Ignoring settings file %s: expected a JSON object", path)
        return None
    return data


def load_settings(data_dir: Optional[str | Path] = None, **overrides: Any) -> Settings:
    """
    Ordre de priorité: overrides > variables d'environnement > settings.json > défauts.
    settings.json est cherché dans le dossier de données retenu.
    """
    base = Path(data_dir or os.environ.get(ENV_DATA_DIR) or DATA_DIR)
    payload: Dict[str, Any] = dict(_load_json(base / SETTINGS_FILENAME) or {})
    payload["data_dir"] = base

    env_level = os.environ.get(ENV_LOG_LEVEL)
    if env_level:
        payload["log_level"] = env_level
    payload.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return Settings(**payload)
    except ValidationError as e:
        logger.warning("Invalid settings (%s), falling back to defaults", e.error_count())
        return Settings(data_dir=base)
