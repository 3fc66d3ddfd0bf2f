from __future__ import annotations
import calendar
import logging
from datetime import date
from typing import List, Optional

from core.models.contact import Contact
from core.services.directory_service import ContactDirectory

logger = logging.getLogger(__name__)


def sample_contacts(today: date) -> List[dict]:
    """Jeu de démo ; deux anniversaires proches pour que les rappels aient quelque chose à montrer."""
    last_day = calendar.monthrange(today.year, today.month)[1]
    # 29/02 pour l'année 1988 (bissextile) reste valide
    soon = date(1988, today.month, min(today.day + 3, last_day))
    try:
        birthday_today = today.replace(year=today.year - 28)
    except ValueError:
        birthday_today = date(today.year - 28, 2, 28)
    return [
        dict(name="Alice Johnson", phone="98765-43210", email="alice@example.com",
             birthday=date(1995, 3, 15), category="Friend"),
        dict(name="Bob Smith", phone="87654-32109", email="bob@work.com",
             birthday=soon, category="Work"),
        dict(name="Charlie Brown", phone="76543-21098", email=None,
             birthday=date(2000, 12, 25), category="Family"),
        dict(name="Diana Prince", phone="65432-10987", email="diana@email.com",
             birthday=birthday_today, category="Friend"),
    ]


def seed_sample_contacts(directory: ContactDirectory, today: Optional[date] = None) -> List[Contact]:
    """Ajoute le jeu de démo si le répertoire est vide. Retourne les contacts ajoutés."""
    if len(directory):
        return []
    added: List[Contact] = []
    for payload in sample_contacts(today or directory.today):
        res = directory.create(**payload)
        if res.ok and res.contact is not None:
            added.append(res.contact)
        else:
            logger.warning("Sample contact %s rejected: %s", payload["name"], res.reason)
    logger.info("Loaded %d sample contacts", len(added))
    return added
