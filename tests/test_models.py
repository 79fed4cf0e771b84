import pytest

from trainingplanner.models import (
    Day, DayFields, FieldState, FieldUpdate, FieldValue, Modality, ProgramMeta, ScheduleState, Template,
)


def test_field_value_tags():
    assert FieldValue.of(None).state is FieldState.UNSET
    assert FieldValue.of('').state is FieldState.CLEARED
    assert FieldValue.of('Git').state is FieldState.SET
    assert FieldValue.unset().resolve('alt') == 'alt'
    assert FieldValue.cleared().resolve('alt') == ''
    assert FieldValue.of('neu').resolve('alt') == 'neu'


def test_update_from_dict_accepts_camel_case_and_none():
    upd = FieldUpdate.from_dict({'subject': 'Git', 'trainer': None, 'customLocation': '', 'modality': Modality.ONLINE})
    assert upd.subject.value == 'Git'
    assert not upd.trainer.is_provided
    assert upd.custom_location.state is FieldState.CLEARED
    assert upd.modality.value == 'Online'
    assert set(upd.provided()) == {'subject', 'custom_location', 'modality'}
    assert FieldUpdate().is_empty()


def test_non_working_day_cannot_have_fields():
    with pytest.raises(ValueError):
        Day('2024-03-09', is_non_working=True, fields=DayFields(subject='x'))


def test_day_properties():
    sat = Day('2024-03-09', is_non_working=True)
    hol = Day('2024-04-01', is_non_working=True, non_working_label='Tweede paasdag')
    assert sat.is_weekend and not sat.is_holiday
    assert hol.is_holiday and not hol.is_weekend


def test_day_fields_flags():
    assert not DayFields().has_core_data
    assert DayFields(modality=Modality.ONLINE).has_core_data
    assert not DayFields(notes='n').has_core_data
    assert DayFields(subject='Git').is_complete
    assert not DayFields(subject='Git', modality=Modality.CUSTOM).is_complete
    assert not DayFields(trainer='Jan').is_complete


def test_state_dict_round_trip():
    state = ScheduleState(
        meta=ProgramMeta(title='Java', trainee='piet@example.nl', talent_manager='Anna', cohort='2024-A'),
        days=[
            Day('2024-03-04', fields=DayFields(subject='Git', modality=Modality.CUSTOM, custom_location='Utrecht')),
            Day('2024-03-09', is_non_working=True),
        ],
        selected_ids=['2024-03-04'],
    )
    data = state.to_dict()
    assert data['days'][0]['fields']['customLocation'] == 'Utrecht'
    assert data['days'][1]['isNonWorking'] is True
    assert ScheduleState.from_dict(data) == state


def test_day_from_legacy_dict():
    d = Day.from_dict({'id': '2024-04-27', 'date': '2024-04-27', 'isWeekend': True, 'holidayName': 'Koningsdag'})
    assert d.is_non_working and d.non_working_label == 'Koningsdag'


def test_template_to_update_sets_non_empty_fields():
    tpl = Template('Git dag', DayFields(subject='Git', modality=Modality.ONLINE, trainer=''))
    upd = tpl.to_update()
    assert set(upd.provided()) == {'subject', 'modality'}
