# src/trainingplanner/main.py

import logging
from datetime import date
from typing import Callable, Optional

from .config import load_config
from .data import Database
from .export_utils import DEFAULT_TIME_LABEL, export_weeks_pdf, format_date_nl, modality_label, period_label
from .holidays import NAGER_API_BASE, HolidayCache, NagerDateHolidaySource
from .merge import MergeResult, ValidationError, merge_fields, validate_update
from .models import FieldUpdate, Modality, ProgramMeta, Template
from .session import ScheduleSession
from .storage import FallbackStore, JsonScheduleStore

HELP = """Commando's:
  genereer JJJJ-MM-DD      nieuwe kalender (snapt naar eerste maandag)
  klik JJJJ-MM-DD          dag aan/uit
  shift JJJJ-MM-DD         bereik vanaf laatste klik (vervangt selectie)
  shift+ctrl JJJJ-MM-DD    bereik toevoegen aan selectie
  bewerk                   velden voor geselecteerde dagen invullen
  sjablonen                templates tonen
  sjabloon NAAM            template toepassen op selectie
  bewaar-sjabloon NAAM     nieuwe template opslaan
  toon                     weken tonen
  opslaan                  plan opslaan
  pdf BESTAND              exporteer PDF (een week per pagina)
  stop                     afsluiten"""


def build_session(cfg: dict) -> ScheduleSession:
    source = None
    if cfg.get('holidays_enabled', True):
        source = NagerDateHolidaySource(
            country_code=cfg.get('holiday_country', 'NL'),
            base_url=cfg.get('holiday_api_base') or NAGER_API_BASE,
            timeout=cfg.get('holiday_timeout', 10),
        )
    store = FallbackStore(Database(cfg.get('db_path')), JsonScheduleStore(cfg.get('json_fallback_path')))
    return ScheduleSession(holidays=HolidayCache(source), store=store)


def input_meta(ask: Callable[[str], str] = input) -> ProgramMeta:
    print("\n📋 Programma:")
    return ProgramMeta(
        title=ask("  Titel: ").strip(),
        trainee=ask("  Trainee: ").strip(),
        talent_manager=ask("  Talent manager: ").strip(),
        cohort=ask("  Cohort/Batch: ").strip(),
        remarks=ask("  Opmerkingen (optioneel): ").strip() or None,
    )


def input_field_update(ask: Callable[[str], str] = input) -> FieldUpdate:
    """Leere Eingabe = Feld nicht ändern, '-' = Feld leeren."""
    print("\n✏️  Velden (leeg = ongewijzigd, '-' = leegmaken):")
    modalities = ', '.join(m.value for m in Modality if m.value)

    def read(prompt):
        raw = ask(prompt).strip()
        if raw == '':
            return None
        return '' if raw == '-' else raw

    values = {
        'subject': read("  Onderwerp (max 20): "),
        'modality': read(f"  Modus ({modalities}): "),
        'trainer': read("  Trainer (max 60): "),
        'short_description': read("  Korte beschrijving (max 280): "),
        'notes': read("  Notities (max 500): "),
    }
    if values['modality'] == Modality.CUSTOM.value:
        values['custom_location'] = read("  Locatie (max 100): ")
    return FieldUpdate.from_dict(values)


def print_weeks(session: ScheduleSession):
    if not session.days:
        print("Nog geen kalender.")
        return
    print(f"\n🗓️  {period_label(session.snapshot())}  ({DEFAULT_TIME_LABEL})")
    for idx, week in enumerate(session.weeks):
        print(f"\nWeek {idx + 1}")
        for day in week:
            mark = '*' if session.selection.is_selected(day.id) else ' '
            subject = day.fields.subject if day.fields else ''
            print(f" {mark} {day.id} {format_date_nl(day.date, short=True):9} {modality_label(day):14} {subject}")


def _parse_date(text: str) -> Optional[date]:
    try:
        return date.fromisoformat(text.strip())
    except ValueError:
        print(f"Ongeldige datum: {text!r}")
        return None


def _resolve_gate(session: ScheduleSession, result: MergeResult, ask: Callable[[str], str]):
    if result.committed:
        print("Toegepast.")
        return
    if ask("Bestaande gegevens overschrijven? (j/n) ").strip().lower() == 'j':
        session.confirm_pending()
        print("Toegepast.")
    else:
        session.cancel_pending()
        print("Geannuleerd.")


def handle_command(session: ScheduleSession, line: str, ask: Callable[[str], str] = input,
                   templates: Optional[Database] = None) -> bool:
    """Führe ein Kommando aus; False beendet die Schleife."""
    cmd, _, arg = line.strip().partition(' ')
    cmd = cmd.lower()
    arg = arg.strip()
    if cmd in ('stop', 'q'):
        return False
    if cmd == 'genereer':
        ref = _parse_date(arg)
        if ref and session.generate(ref):
            print(f"✅ {len(session.days)} dagen, {len(session.weeks)} weken.")
    elif cmd in ('klik', 'ctrl', 'shift', 'shift+ctrl'):
        selected = session.toggle(arg, with_range=cmd.startswith('shift'), multi=cmd.endswith('ctrl'))
        print(f"{len(selected)} dag(en) geselecteerd")
    elif cmd in ('bewerk', 'sjabloon'):
        if not session.selected_count:
            print("Selecteer eerst een of meer dagen.")
            return True
        if cmd == 'sjabloon':
            tpl = next((t for t in (templates.load_templates() if templates else []) if t.name == arg), None)
            if tpl is None:
                print(f"Onbekende template: {arg!r}")
                return True
            update = tpl.to_update()
        else:
            update = input_field_update(ask)
        try:
            result = session.apply(update)
        except ValidationError as e:
            for name, msg in e.errors.items():
                print(f"  {name}: {msg}")
            return True
        _resolve_gate(session, result, ask)
    elif cmd == 'sjablonen':
        for tpl in (templates.load_templates() if templates else []):
            f = tpl.fields
            print(f"  {tpl.name}: {f.subject or '—'} • {f.modality.value or '—'} • {f.trainer or '—'}")
    elif cmd == 'bewaar-sjabloon':
        if templates is None or not arg:
            print("Geef een naam op.")
            return True
        update = input_field_update(ask)
        try:
            validate_update(update)
        except ValidationError as e:
            for name, msg in e.errors.items():
                print(f"  {name}: {msg}")
            return True
        templates.save_template(Template(arg, merge_fields(None, update)))
        print(f"Template {arg!r} opgeslagen.")
    elif cmd == 'toon':
        print_weeks(session)
    elif cmd == 'opslaan':
        print("Opgeslagen." if session.save() else "Opslaan mislukt.")
    elif cmd == 'pdf':
        fn = arg or 'trainingsprogramma.pdf'
        try:
            export_weeks_pdf(session.snapshot(), fn)
        except OSError as e:
            logging.error(f"PDF export failed: {e}")
            print(f"❌ PDF kon niet worden opgeslagen: {e}")
            return True
        print(f"PDF opgeslagen: {fn}")
    else:
        print(HELP)
    return True


def run_wizard(ask: Callable[[str], str] = input, cfg: Optional[dict] = None):
    cfg = cfg if cfg is not None else load_config()
    logging.basicConfig(level=getattr(logging, str(cfg.get('log_level', 'INFO')).upper(), logging.INFO))
    print("🎯 Trainingsprogramma planner 🎯")
    session = build_session(cfg)
    db = session.store.primary

    try:
        trainee = ask("Trainee laden (leeg = nieuw): ").strip()
        if not (trainee and session.load(trainee)):
            session.meta = input_meta(ask)
            start = ask("Startdatum (JJJJ-MM-DD) [leeg=vandaag]: ").strip()
            ref = _parse_date(start) if start else date.today()
            session.generate(ref or date.today())
        print_weeks(session)
        print(HELP)

        while True:
            try:
                line = ask("\n> ")
            except EOFError:
                break
            if not handle_command(session, line, ask=ask, templates=db):
                break

        if ask("\nPlan opslaan? (j/n) ").lower() == "j":
            print("Opgeslagen." if session.save() else "Opslaan mislukt.")
    finally:
        # Feiertage gelten nur für diese Sitzung
        session.holidays.clear()
        db.close()

if __name__ == "__main__":
    run_wizard()
