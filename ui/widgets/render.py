from __future__ import annotations
from datetime import date, datetime
from pathlib import Path
from typing import Iterable, List, Optional

from jinja2 import Environment, FileSystemLoader

from core.models.contact import Contact
from core.models.reports import DirectoryStats

TEMPLATES_DIR = Path(__file__).resolve().parents[1] / "templates" / "console"


def clip(s: Optional[str], max_len: int) -> str:
    s = s or ""
    return s[: max_len - 2] + ".." if len(s) > max_len else s


def _fmt_dt(value: Optional[date | datetime], fmt: str) -> str:
    return value.strftime(fmt) if value else ""


_env = Environment(
    loader=FileSystemLoader(str(TEMPLATES_DIR)),
    autoescape=False,  # sortie console, pas de HTML
    trim_blocks=True,
    lstrip_blocks=True,
)
_env.filters["clip"] = clip
_env.filters["dt"] = _fmt_dt


def _render(name: str, **ctx) -> str:
    return _env.get_template(name).render(**ctx)


# ---------- Messages dérivés ---------- #

def birthday_countdown(days: int) -> str:
    if days < 0:
        return ""
    if days == 0:
        return "🎉 Anniversaire AUJOURD'HUI !"
    if days == 1:
        return "🎁 Anniversaire DEMAIN !"
    return f"🎂 Anniversaire dans {days} jours"


def reminder_message(days: int) -> str:
    if days == 0:
        return "🎉 AUJOURD'HUI !"
    if days == 1:
        return "🎁 Demain"
    return f"Dans {days} jours"


def birth_summary(c: Contact, today: date) -> str:
    if c.birthday is None:
        return "Non renseigné"
    return f"{c.birthday.strftime('%d/%m/%Y')} (Âge: {c.age(today)})"


# ---------- Vues ---------- #

def contact_card(c: Contact, today: date) -> str:
    return _render(
        "card.txt",
        c=c,
        birth=birth_summary(c, today),
        countdown=birthday_countdown(c.days_until_birthday(today)),
    )


def contact_table(contacts: List[Contact], total: Optional[int] = None) -> str:
    if not contacts:
        return "\n📭 Aucun contact !"
    return _render("table.txt", contacts=contacts, total=len(contacts) if total is None else total)


def results_list(contacts: List[Contact], title: str = "Résultats") -> str:
    return _render("results.txt", contacts=contacts, title=title)


def statistics_report(stats: DirectoryStats) -> str:
    return _render("stats.txt", s=stats)


def birthday_reminders(contacts: Iterable[Contact], days: int, today: date) -> str:
    rows = []
    for c in contacts:
        left = c.days_until_birthday(today)
        rows.append({
            "name": c.name,
            "date": c.birthday.strftime("%d/%m") if c.birthday else "",
            # âge qu'il/elle aura ce jour-là
            "turning": c.age(today) + (0 if left == 0 else 1),
            "message": reminder_message(left),
        })
    return _render("reminders.txt", rows=rows, days=days)
