from __future__ import annotations

import itertools
from datetime import date, datetime, timedelta

import pytest

from core.services.directory_service import ContactDirectory

FIXED_TODAY = date(2024, 6, 15)


def ticking_clock(start: datetime = datetime(2024, 1, 1, 9, 0, 0)):
    """Horloge qui avance d'une minute à chaque appel (dates d'ajout distinctes)."""
    counter = itertools.count()
    return lambda: start + timedelta(minutes=next(counter))


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "contacts.dat"


@pytest.fixture
def make_directory(tmp_path, data_file):
    def _make(path=None, **kw):
        kw.setdefault("clock", lambda: FIXED_TODAY)
        kw.setdefault("now_fn", ticking_clock())
        kw.setdefault("export_file", tmp_path / "contacts_export.csv")
        return ContactDirectory(path or data_file, **kw)
    return _make


@pytest.fixture
def directory(make_directory):
    return make_directory()


@pytest.fixture
def populated(directory):
    """Trois contacts: Alice (anniv. dans 5 j), bob (aucun), Charlie (anniv. aujourd'hui)."""
    directory.create("Alice Johnson", "98765-43210", "alice@example.com", date(1995, 6, 20), "Friend")
    directory.create("bob smith", "87654 32109", None, None, "Work")
    directory.create("Charlie Brown", "(765) 432-1098", "charlie@mail.org", date(2000, 6, 15), "friend")
    return directory
