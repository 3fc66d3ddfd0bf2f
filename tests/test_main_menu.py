from __future__ import annotations

from datetime import date

import pytest

from core.services.sample_data import seed_sample_contacts
from ui.main_menu import MainMenu
from ui.widgets import render
from ui.widgets.contact_form import Console, parse_birthday

from conftest import FIXED_TODAY


class ScriptedConsole(Console):
    """Console alimentée par une liste de réponses ; EOF quand elle est épuisée."""

    def __init__(self, answers):
        self.answers = list(answers)
        self.output = []
        super().__init__(input_fn=self._next, output_fn=self.output.append)

    def _next(self, prompt):
        if not self.answers:
            raise EOFError
        return self.answers.pop(0)

    @property
    def text(self):
        return "\n".join(self.output)


def _run(directory, answers):
    console = ScriptedConsole(answers)
    MainMenu(directory, console, pause=False).run()
    return console


def test_add_contact_reprompts_until_valid(directory):
    console = _run(directory, ["1", "Zoe Zed", "bad", "98765 43210", "nope", "", "31/02/2000", "", "9"])
    assert len(directory) == 1
    c = directory.find_by_id("C0001")
    assert c.phone == "98765-43210"
    assert c.email is None
    assert c.birthday is None
    assert c.category == "Other"
    assert "❌ Téléphone invalide (10 à 12 chiffres)" in console.text
    assert "⚠️  Date invalide, anniversaire ignoré" in console.text
    assert "✅ Contact ajouté !" in console.text
    assert "Au revoir" in console.text


def test_add_duplicate_phone_is_reported(populated):
    console = _run(populated, ["1", "Other Alice", "9876543210", "", "", "Work", "9"])
    assert "❌ Phone number already exists" in console.text
    assert len(populated) == 3


def test_update_invalid_email_is_reported(populated):
    console = _run(populated, ["4", "c0001", "3", "not-an-email", "9"])
    assert "❌ Invalid email format" in console.text
    assert populated.find_by_id("C0001").email == "alice@example.com"


def test_update_category(populated):
    console = _run(populated, ["4", "C0002", "4", "Family", "9"])
    assert "✅ Contact mis à jour !" in console.text
    assert populated.find_by_id("C0002").category == "Family"


def test_delete_needs_confirmation(populated):
    _run(populated, ["5", "C0002", "non", "9"])
    assert len(populated) == 3
    console = _run(populated, ["5", "C0002", "oui", "9"])
    assert len(populated) == 2
    assert "✅ Contact supprimé" in console.text


def test_view_and_search(populated):
    console = _run(populated, ["2", "1", "C0003", "3", "1", "smith", "", "9"])
    assert "Total contacts" in console.text
    assert "Charlie Brown" in console.text
    assert "[C0002] bob smith" in console.text


def test_birthdays_statistics_and_export(populated, tmp_path):
    out = tmp_path / "menu.csv"
    console = _run(populated, ["6", "2", "8", "7", str(out), "9"])
    assert "🎉 AUJOURD'HUI !" in console.text
    assert "Dans 5 jours" in console.text
    assert "STATISTIQUES CONTACTS" in console.text
    assert out.exists()
    assert "3 contacts exportés" in console.text


def test_invalid_choice_and_eof(directory):
    console = _run(directory, ["42", "abc"])
    assert console.text.count("❌ Choix invalide !") == 2
    assert "Au revoir" in console.text


# ---------- Rendu ---------- #

def test_card_shows_birthday_countdown(populated):
    card = render.contact_card(populated.find_by_id("C0003"), FIXED_TODAY)
    assert "Charlie Brown" in card
    assert "15/06/2000 (Âge: 24)" in card
    assert "AUJOURD'HUI" in card


def test_card_without_optional_fields(populated):
    card = render.contact_card(populated.find_by_id("C0002"), FIXED_TODAY)
    assert "Non renseigné" in card
    assert "Anniversaire" not in card


def test_reminders_show_age_they_will_turn(populated):
    text = render.birthday_reminders(populated.upcoming_birthdays(30), 30, FIXED_TODAY)
    lines = [ln for ln in text.splitlines() if "│" in ln]
    assert "Charlie Brown" in lines[0] and "Âge: 24" in lines[0]
    assert "Alice Johnson" in lines[1] and "Âge: 29" in lines[1]


def test_empty_views():
    assert "Aucun contact" in render.contact_table([])
    assert "Aucun résultat" in render.results_list([])


@pytest.mark.parametrize("days,msg", [(-1, ""), (0, "🎉 Anniversaire AUJOURD'HUI !"), (1, "🎁 Anniversaire DEMAIN !"), (9, "🎂 Anniversaire dans 9 jours")])
def test_birthday_countdown(days, msg):
    assert render.birthday_countdown(days) == msg


def test_clip():
    assert render.clip("abcdefghij", 6) == "abcd.."
    assert render.clip("abc", 6) == "abc"
    assert render.clip(None, 6) == ""


def test_parse_birthday():
    assert parse_birthday("05/11/1990") == date(1990, 11, 5)
    with pytest.raises(ValueError):
        parse_birthday("1990-11-05")


# ---------- Données de démo ---------- #

def test_seed_sample_contacts(directory):
    added = seed_sample_contacts(directory)
    assert [c.name for c in added] == ["Alice Johnson", "Bob Smith", "Charlie Brown", "Diana Prince"]
    assert [c.name for c in directory.upcoming_birthdays(7)] == ["Diana Prince", "Bob Smith"]
    assert seed_sample_contacts(directory) == []


def test_default_reminder_window_follows_directory_setting(make_directory):
    d = make_directory(reminder_days=3)
    d.create("Alice Johnson", "9876543210", birthday=date(1995, 6, 17))
    d.create("Bob Smith", "8765432109", birthday=date(1990, 6, 25))
    console = _run(d, ["6", "2", "9"])
    assert "2. 3 prochains jours" in console.text
    assert "Alice Johnson" in console.text
    assert "Dans 10 jours" not in console.text
