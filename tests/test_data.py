import os
import tempfile
from datetime import date
import pytest

from trainingplanner.calendar_logic import build_days
from trainingplanner.data import Database
from trainingplanner.models import DayFields, Modality, ProgramMeta, ScheduleState, Template

@pytest.fixture
def temp_db():
    fd, path = tempfile.mkstemp()
    os.close(fd)
    db = Database(db_path=path)
    try:
        yield db
    finally:
        # Erst die DB‐Verbindung schließen, dann die Datei löschen
        db.conn.close()
        os.remove(path)

def make_state(trainee='piet@example.nl', title='Java'):
    days = build_days(date(2024, 3, 15))
    days[0].fields = DayFields(subject='Git', modality=Modality.CUSTOM, trainer='Jan', custom_location='Utrecht')
    days[1].fields = DayFields(subject='', trainer='', notes='')
    return ScheduleState(
        meta=ProgramMeta(title=title, trainee=trainee, talent_manager='Anna', cohort='2024-A'),
        days=days,
        selected_ids=['2024-03-06'],
    )

def test_save_and_load_schedule(temp_db):
    db = temp_db
    state = make_state()
    assert db.save_schedule(state)
    loaded = db.load_schedule('piet@example.nl')
    assert loaded.meta.title == 'Java'
    assert loaded.meta.start_date == '2024-03-04'
    assert loaded.meta.end_date == '2024-05-03'
    assert loaded.days == state.days
    # Auswahl ist Sitzungszustand
    assert loaded.selected_ids == []

def test_cleared_fields_differ_from_never_edited(temp_db):
    db = temp_db
    db.save_schedule(make_state())
    days = db.load_schedule('piet@example.nl').days
    assert days[1].fields == DayFields(notes='')
    assert days[2].fields is None

def test_save_replaces_days(temp_db):
    db = temp_db
    db.save_schedule(make_state())
    state = make_state()
    state.days = build_days(date(2024, 9, 2))
    assert db.save_schedule(state)
    loaded = db.load_schedule('piet@example.nl')
    assert loaded.days[0].id == '2024-09-02'
    assert all(d.fields is None for d in loaded.days)
    assert len(db.list_programs()) == 1

def test_load_latest_without_trainee(temp_db):
    db = temp_db
    assert db.load_schedule() is None
    db.save_schedule(make_state('a', 'Eerste'))
    db.save_schedule(make_state('b', 'Tweede'))
    assert db.load_schedule().meta.trainee == 'b'
    assert [p.trainee for p in db.list_programs()] == ['b', 'a']

def test_save_without_trainee_fails(temp_db):
    assert not temp_db.save_schedule(make_state(trainee=''))

def test_delete_program_cascades(temp_db):
    db = temp_db
    db.save_schedule(make_state())
    assert db.delete_program('piet@example.nl')
    assert db.load_schedule('piet@example.nl') is None
    cnt = db.conn.execute("SELECT COUNT(*) FROM training_days").fetchone()[0]
    assert cnt == 0
    assert not db.delete_program('piet@example.nl')

def test_templates(temp_db):
    db = temp_db
    tpl = Template('Git dag', DayFields(subject='Git', modality=Modality.ONLINE, trainer='Jan'))
    db.save_template(tpl)
    assert tpl.id is not None
    tpl.fields.trainer = 'Kees'
    db.save_template(tpl)
    loaded = db.load_templates()
    assert len(loaded) == 1
    assert loaded[0].fields == DayFields(subject='Git', modality=Modality.ONLINE, trainer='Kees')
    db.delete_template(tpl.id)
    assert db.load_templates() == []

def test_in_memory_database():
    db = Database(':memory:')
    assert db.save(make_state())
    assert db.load().meta.trainee == 'piet@example.nl'
    db.close()
    assert db.conn is None
