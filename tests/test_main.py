from datetime import date
import pytest

from trainingplanner.data import Database
from trainingplanner.holidays import HolidayCache, StaticHolidaySource
from trainingplanner.main import HELP, build_session, handle_command, input_field_update, run_wizard
from trainingplanner.models import DayFields, FieldState, Modality, Template
from trainingplanner.session import ScheduleSession
from trainingplanner.storage import FallbackStore


def scripted(*answers):
    it = iter(answers)
    return lambda prompt='': next(it)


@pytest.fixture
def session():
    s = ScheduleSession()
    s.generate(date(2024, 3, 15))
    return s


@pytest.fixture
def db():
    d = Database(':memory:')
    yield d
    d.close()


def test_input_field_update_semantics():
    upd = input_field_update(scripted('Git', 'Custom', '-', '', 'notitie', 'Utrecht'))
    assert upd.subject.value == 'Git'
    assert upd.trainer.state is FieldState.CLEARED
    assert not upd.short_description.is_provided
    assert upd.custom_location.value == 'Utrecht'


def test_click_and_edit(session, capsys):
    assert handle_command(session, 'klik 2024-03-05')
    assert handle_command(session, 'bewerk', ask=scripted('Git', 'Online', 'Jan', '', ''))
    day = next(d for d in session.days if d.id == '2024-03-05')
    assert day.fields == DayFields(subject='Git', modality=Modality.ONLINE, trainer='Jan')
    assert 'Toegepast.' in capsys.readouterr().out


def test_edit_requires_selection(session, capsys):
    handle_command(session, 'bewerk', ask=scripted())
    assert 'Selecteer eerst' in capsys.readouterr().out


def test_overwrite_prompt_declined(session):
    handle_command(session, 'klik 2024-03-05')
    handle_command(session, 'bewerk', ask=scripted('Git', '', '', '', ''))
    handle_command(session, 'klik 2024-03-05')
    handle_command(session, 'bewerk', ask=scripted('Java', '', '', '', '', 'n'))
    day = next(d for d in session.days if d.id == '2024-03-05')
    assert day.fields.subject == 'Git'
    assert session.pending is None


def test_overwrite_prompt_confirmed(session):
    handle_command(session, 'klik 2024-03-05')
    handle_command(session, 'bewerk', ask=scripted('Git', '', '', '', ''))
    handle_command(session, 'klik 2024-03-05')
    handle_command(session, 'bewerk', ask=scripted('Java', '', '', '', '', 'j'))
    day = next(d for d in session.days if d.id == '2024-03-05')
    assert day.fields.subject == 'Java'


def test_validation_errors_are_printed(session, capsys):
    handle_command(session, 'klik 2024-03-05')
    handle_command(session, 'bewerk', ask=scripted('x' * 25, '', '', '', ''))
    assert 'Max 20 tekens' in capsys.readouterr().out
    assert session.selected_count == 1


def test_range_commands(session):
    handle_command(session, 'klik 2024-03-04')
    handle_command(session, 'shift 2024-03-08')
    assert session.selected_count == 5
    handle_command(session, 'klik 2024-03-18')
    handle_command(session, 'shift+ctrl 2024-03-19')
    assert session.selected_count == 7


def test_templates(session, db, capsys):
    handle_command(session, 'bewaar-sjabloon Git', ask=scripted('Git', 'Op locatie', 'Jan', '', ''), templates=db)
    assert [t.name for t in db.load_templates()] == ['Git']
    handle_command(session, 'sjablonen', templates=db)
    assert 'Git: Git • Op locatie • Jan' in capsys.readouterr().out
    handle_command(session, 'klik 2024-03-06')
    handle_command(session, 'sjabloon Git', templates=db)
    day = next(d for d in session.days if d.id == '2024-03-06')
    assert day.fields.trainer == 'Jan'
    handle_command(session, 'klik 2024-03-07')
    handle_command(session, 'sjabloon Onbekend', templates=db)
    assert 'Onbekende template' in capsys.readouterr().out


def test_generate_toon_pdf_and_stop(session, tmp_path, capsys):
    assert handle_command(session, 'genereer 2024-06-12')
    assert session.start_date == date(2024, 6, 3)
    handle_command(session, 'toon')
    out = capsys.readouterr().out
    assert 'Week 1' in out and 'ma 03-06' in out
    fn = tmp_path / 'plan.pdf'
    handle_command(session, f'pdf {fn}')
    assert fn.exists()
    handle_command(session, 'genereer gisteren')
    assert 'Ongeldige datum' in capsys.readouterr().out
    assert not handle_command(session, 'stop')


def test_unknown_command_prints_help(session, capsys):
    assert handle_command(session, 'help')
    assert HELP in capsys.readouterr().out


def test_build_session_from_config(tmp_path):
    cfg = {
        'holidays_enabled': False,
        'db_path': str(tmp_path / 'plan.db'),
        'json_fallback_path': str(tmp_path / 'plan.json'),
    }
    session = build_session(cfg)
    assert isinstance(session.store, FallbackStore)
    assert session.holidays.source is None
    session.meta.trainee = 'piet'
    session.generate(date(2024, 3, 15))
    assert session.save()
    assert (tmp_path / 'plan.json').exists()
    session.store.primary.close()


def test_pdf_to_unwritable_path_keeps_running(session, capsys):
    assert handle_command(session, 'pdf /invalid/path/plan.pdf')
    assert 'PDF kon niet worden opgeslagen' in capsys.readouterr().out


@pytest.fixture
def wizard(tmp_path, monkeypatch):
    cfg = {
        'holidays_enabled': False,
        'db_path': str(tmp_path / 'plan.db'),
        'json_fallback_path': str(tmp_path / 'plan.json'),
    }
    sessions = []
    real_build = build_session

    def tracking_build(c):
        s = real_build(c)
        s.holidays = HolidayCache(StaticHolidaySource.from_mapping({'2024-04-01': 'Tweede paasdag'}))
        sessions.append(s)
        return s

    monkeypatch.setattr('trainingplanner.main.build_session', tracking_build)
    return cfg, sessions


def test_wizard_session_lifecycle(wizard, capsys):
    cfg, sessions = wizard
    answers = scripted(
        '',                                            # neuer Trainee
        'Java', 'piet', 'Anna', '2024-A', '',          # Programma
        '2024-03-15',
        'pdf /invalid/path/plan.pdf',
        'stop',
        'j',
    )
    run_wizard(ask=answers, cfg=cfg)
    out = capsys.readouterr().out
    assert 'PDF kon niet worden opgeslagen' in out
    assert 'Opgeslagen.' in out
    session = sessions[0]
    assert session.days[0].id == '2024-03-04'
    # Verbindung zu, Feiertags-Cache geleert
    assert session.store.primary.conn is None
    assert session.holidays.cached_years() == []
    db = Database(cfg['db_path'])
    assert db.load_schedule('piet').meta.title == 'Java'
    db.close()


def test_wizard_closes_database_on_error(wizard):
    cfg, sessions = wizard

    def broken(prompt=''):
        raise RuntimeError("terminal weg")

    with pytest.raises(RuntimeError):
        run_wizard(ask=broken, cfg=cfg)
    assert sessions[0].store.primary.conn is None
