from __future__ import annotations
import calendar
from typing import Callable, Dict, List, Optional

from core.models.contact import Contact
from core.services.directory_service import ContactDirectory, SortKey
from ui.widgets.contact_form import Console, ContactForm
from ui.widgets import render


MENU = """
╔══════════════════════════════════════════════╗
║                 MENU PRINCIPAL               ║
╠══════════════════════════════════════════════╣
║  1. ➕ Ajouter un contact                    ║
║  2. 📋 Voir les contacts                     ║
║  3. 🔍 Rechercher                            ║
║  4. ✏️  Modifier un contact                   ║
║  5. 🗑️  Supprimer un contact                  ║
║  6. 🎂 Rappels d'anniversaires               ║
║  7. 📤 Exporter (CSV)                        ║
║  8. 📊 Statistiques                          ║
║  9. 🚪 Quitter                               ║
╚══════════════════════════════════════════════╝"""

EXIT_CHOICE = 9
UPDATE_FIELDS = {1: "name", 2: "phone", 3: "email", 4: "category"}
SORT_CHOICES = {1: SortKey.NAME, 2: SortKey.CATEGORY, 3: SortKey.RECENT}


class MainMenu:
    """Boucle console: lit un choix, appelle le répertoire, affiche le résultat."""

    def __init__(self, directory: ContactDirectory, console: Optional[Console] = None, *, pause: bool = True):
        self.directory = directory
        self.console = console or Console()
        self.form = ContactForm(self.console)
        self.pause = pause
        self._handlers: Dict[int, Callable[[], None]] = {
            1: self._contact_add,
            2: self._contacts_view,
            3: self._contacts_search,
            4: self._contact_update,
            5: self._contact_delete,
            6: self._birthdays,
            7: self._export,
            8: self._statistics,
        }

    # ==================== BOUCLE ====================
    def run(self) -> None:
        self.console.say("\n📇 CARNET DE CONTACTS")
        try:
            while True:
                self.console.say(MENU)
                choice = self.console.ask_int("Votre choix : ")
                if choice == EXIT_CHOICE:
                    break
                handler = self._handlers.get(choice)
                if handler is None:
                    self.console.say("❌ Choix invalide !")
                else:
                    handler()
                if self.pause:
                    self.console.ask("\nEntrée pour continuer...")
        except (EOFError, KeyboardInterrupt):
            self.console.say("")
        self.console.say("\n👋 Au revoir ! Contacts enregistrés.")

    # ==================== HELPERS ====================
    def _show_card(self, c: Contact) -> None:
        self.console.say(render.contact_card(c, self.directory.today))

    def _report(self, res, ok_msg: str) -> bool:
        if not res.ok:
            self.console.say(f"❌ {res.reason}")
            return False
        self.console.say(ok_msg)
        if not res.persisted:
            self.console.say(f"⚠️  Non enregistré sur disque : {res.warning}")
        return True

    def _offer_details(self, prompt: str) -> None:
        contact_id = self.console.ask(prompt)
        if not contact_id:
            return
        c = self.directory.find_by_id(contact_id)
        if c is None:
            self.console.say("❌ Contact introuvable")
        else:
            self._show_card(c)

    # ==================== ACTIONS ====================
    def _contact_add(self) -> None:
        self.console.say("\n=== NOUVEAU CONTACT ===")
        fields = self.form.get_contact_fields()
        res = self.directory.create(**fields)
        if self._report(res, "✅ Contact ajouté !") and res.contact is not None:
            self._show_card(res.contact)

    def _contacts_view(self) -> None:
        self.console.say("\n=== CONTACTS ===")
        self.console.say("Trier par : 1.Nom  2.Catégorie  3.Ajout récent")
        key = SORT_CHOICES.get(self.console.ask_int("Tri : "), SortKey.NAME)
        contacts = self.directory.list_sorted(key)
        self.console.say(render.contact_table(contacts))
        if contacts:
            self._offer_details("\nID du contact à afficher (Entrée pour passer) : ")

    def _contacts_search(self) -> None:
        self.console.say("\n=== RECHERCHE ===")
        self.console.say("1. Par nom\n2. Par téléphone\n3. Par email\n4. Tous les champs\n5. Par catégorie")
        choice = self.console.ask_int("Choix : ")
        query = self.console.ask("Terme recherché : ")
        searches: Dict[int, Callable[[str], List[Contact]]] = {
            1: self.directory.search_by_name,
            2: self.directory.search_by_phone,
            3: self.directory.search_by_email,
            5: self.directory.filter_by_category,
        }
        results = searches.get(choice, self.directory.search_all)(query)
        self.console.say(render.results_list(results, "Résultats"))
        if results:
            self._offer_details("\nID pour le détail (Entrée pour passer) : ")

    def _contact_update(self) -> None:
        self.console.say("\n=== MODIFIER UN CONTACT ===")
        contact_id = self.console.ask("ID du contact : ")
        c = self.directory.find_by_id(contact_id)
        if c is None:
            self.console.say("❌ Contact introuvable")
            return
        self._show_card(c)
        self.console.say("\nChamp à modifier ?\n1. Nom   2. Téléphone   3. Email   4. Catégorie")
        field = UPDATE_FIELDS.get(self.console.ask_int("Champ : "))
        if field is None:
            self.console.say("❌ Champ invalide")
            return
        value = self.console.ask(f"Nouvelle valeur ({field}) : ")
        res = self.directory.update(contact_id, field, value)
        if self._report(res, "✅ Contact mis à jour !") and res.contact is not None:
            self._show_card(res.contact)

    def _contact_delete(self) -> None:
        self.console.say("\n=== SUPPRIMER UN CONTACT ===")
        contact_id = self.console.ask("ID du contact à supprimer : ")
        c = self.directory.find_by_id(contact_id)
        if c is None:
            self.console.say("❌ Contact introuvable")
            return
        self._show_card(c)
        confirm = self.console.ask(f"⚠️  Supprimer {c.name} ? (oui/non) : ")
        if confirm.lower() not in ("oui", "o", "yes", "y"):
            self.console.say("❌ Suppression annulée")
            return
        self._report(self.directory.delete(contact_id), "✅ Contact supprimé")

    def _birthdays(self) -> None:
        self.console.say("\n=== RAPPELS D'ANNIVERSAIRES ===")
        self.console.say(f"1. 7 prochains jours\n2. {self.directory.reminder_days} prochains jours\n3. Ce mois-ci")
        choice = self.console.ask_int("Choix : ")
        today = self.directory.today
        if choice == 1:
            days = 7
        elif choice == 3:
            days = calendar.monthrange(today.year, today.month)[1] - today.day
        else:
            days = self.directory.reminder_days
        upcoming = self.directory.upcoming_birthdays(days)
        self.console.say(render.birthday_reminders(upcoming, days, today))

    def _export(self) -> None:
        self.console.say("\n=== EXPORT CSV ===")
        filename = self.console.ask(f"Nom du fichier (défaut : {self.directory.export_file}) : ")
        rep = self.directory.export_csv(filename or None)
        if rep.ok:
            self.console.say(f"✅ {rep.rows} contacts exportés vers {rep.path}")
        else:
            self.console.say(f"❌ Échec de l'export : {rep.reason}")

    def _statistics(self) -> None:
        self.console.say(render.statistics_report(self.directory.statistics()))
