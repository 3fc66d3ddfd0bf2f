from __future__ import annotations
import argparse
import logging
import sys
from typing import List, Optional

from core.config import load_settings
from core.services.directory_service import ContactDirectory
from core.services.sample_data import seed_sample_contacts
from ui.main_menu import MainMenu


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="contact-directory",
        description="Carnet de contacts en console (fichier texte local).",
    )
    parser.add_argument("--data-dir", help="Dossier des données (contacts.dat, settings.json).")
    parser.add_argument("--no-sample", action="store_true", help="Ne pas créer les contacts de démo.")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR.")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = load_settings(args.data_dir, log_level=args.log_level)
    logging.basicConfig(
        level=getattr(logging, settings.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    directory = ContactDirectory.from_settings(settings)
    for warning in directory.last_load.warnings:
        print(f"⚠️  {warning}")
    if directory.last_load.loaded:
        print(f"✅ {directory.last_load.loaded} contacts chargés")
    if settings.seed_sample_data and not args.no_sample and not len(directory):
        print("📥 Chargement des contacts de démo...")
        seed_sample_contacts(directory)

    MainMenu(directory).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
