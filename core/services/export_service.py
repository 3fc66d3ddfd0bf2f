from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import Iterable, List, Union

from core.errors import StorageError
from core.models.contact import Contact
from core.models.reports import ExportReport

logger = logging.getLogger(__name__)

CSV_HEADER = ["ID", "Name", "Phone", "Email", "Birthday", "Category"]
CSV_DATE_FORMAT = "%d/%m/%Y"


def contact_row(c: Contact) -> List[str]:
    return [
        c.id or "",
        c.name,
        c.phone,
        c.email or "",
        c.birthday.strftime(CSV_DATE_FORMAT) if c.birthday else "",
        c.category,
    ]


def export_contacts_csv(contacts: Iterable[Contact], destination: Union[str, Path]) -> ExportReport:
    """
    Export CSV trié par nom (insensible à la casse).
    Projection pure: les contacts ne sont pas modifiés.
    """
    rows = sorted(contacts, key=lambda c: c.name.casefold())
    out_path = Path(destination)
    try:
        if out_path.parent and not out_path.parent.exists():
            out_path.parent.mkdir(parents=True, exist_ok=True)
        with out_path.open("w", encoding="utf-8", newline="") as f:
            writer = csv.writer(f, lineterminator="\n")
            writer.writerow(CSV_HEADER)
            for c in rows:
                writer.writerow(contact_row(c))
    except OSError as e:
        raise StorageError(f"export to {out_path} failed: {e}") from e

    logger.info("Exported %d contacts to %s", len(rows), out_path)
    return ExportReport(path=str(out_path), rows=len(rows))
