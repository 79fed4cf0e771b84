# src/trainingplanner/models.py
from dataclasses import dataclass, field, fields as dc_fields
from datetime import date
from enum import Enum
from typing import Any, Dict, List, Optional


class Modality(str, Enum):
    """Wie ein Trainingstag stattfindet."""
    UNSET = ""
    ON_SITE = "Op locatie"
    ONLINE = "Online"
    CUSTOM = "Custom"


class FieldState(Enum):
    UNSET = "unset"      # Feld nicht mitgeschickt -> alter Wert bleibt
    CLEARED = "cleared"  # explizit leer -> überschreibt mit ""
    SET = "set"


@dataclass(frozen=True)
class FieldValue:
    """Ein Feld einer Teil-Aktualisierung: Unset, Cleared oder Set(value)."""
    state: FieldState = FieldState.UNSET
    value: str = ""

    @classmethod
    def unset(cls) -> "FieldValue":
        return cls(FieldState.UNSET, "")

    @classmethod
    def cleared(cls) -> "FieldValue":
        return cls(FieldState.CLEARED, "")

    @classmethod
    def of(cls, value: Optional[str]) -> "FieldValue":
        if value is None:
            return cls.unset()
        if value == "":
            return cls.cleared()
        return cls(FieldState.SET, value)

    @property
    def is_provided(self) -> bool:
        return self.state is not FieldState.UNSET

    def resolve(self, previous: Optional[str]) -> Optional[str]:
        """Neuer Wert nach dem Merge; bei Unset bleibt `previous`."""
        if self.state is FieldState.UNSET:
            return previous
        return self.value


@dataclass
class DayFields:
    """Inhalt eines bearbeiteten Arbeitstags."""
    subject: str = ""                       # max 20
    modality: Modality = Modality.UNSET
    trainer: str = ""                       # max 60
    short_description: Optional[str] = None  # max 280
    notes: Optional[str] = None             # max 500
    custom_location: Optional[str] = None   # nur bei Custom, max 100

    @property
    def has_core_data(self) -> bool:
        return bool(self.subject or self.trainer) or self.modality is not Modality.UNSET

    @property
    def is_complete(self) -> bool:
        if not self.subject:
            return False
        if self.modality is Modality.CUSTOM and not self.custom_location:
            return False
        return True

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            'subject': self.subject,
            'modality': self.modality.value,
            'trainer': self.trainer,
        }
        if self.short_description is not None:
            out['shortDescription'] = self.short_description
        if self.notes is not None:
            out['notes'] = self.notes
        if self.custom_location is not None:
            out['customLocation'] = self.custom_location
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DayFields':
        return cls(
            subject=data.get('subject') or '',
            modality=Modality(data.get('modality') or ''),
            trainer=data.get('trainer') or '',
            short_description=data.get('shortDescription'),
            notes=data.get('notes'),
            custom_location=data.get('customLocation'),
        )


# Reihenfolge und Namen der Felder einer Aktualisierung
UPDATE_FIELDS = ('subject', 'modality', 'trainer', 'short_description', 'notes', 'custom_location')

_CAMEL = {
    'short_description': 'shortDescription',
    'custom_location': 'customLocation',
}


@dataclass(frozen=True)
class FieldUpdate:
    """Teil-Aktualisierung für die Bulk-Bearbeitung (Partial<DayFields>)."""
    subject: FieldValue = field(default_factory=FieldValue.unset)
    modality: FieldValue = field(default_factory=FieldValue.unset)
    trainer: FieldValue = field(default_factory=FieldValue.unset)
    short_description: FieldValue = field(default_factory=FieldValue.unset)
    notes: FieldValue = field(default_factory=FieldValue.unset)
    custom_location: FieldValue = field(default_factory=FieldValue.unset)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'FieldUpdate':
        """Fehlender Schlüssel oder None = Unset, jeder String (auch "") = gesetzt.

        Akzeptiert snake_case und die camelCase-Namen des Web-Payloads.
        """
        kwargs = {}
        for name in UPDATE_FIELDS:
            raw = data.get(name, data.get(_CAMEL.get(name, name)))
            if isinstance(raw, Modality):
                raw = raw.value
            kwargs[name] = FieldValue.of(raw)
        return cls(**kwargs)

    @classmethod
    def from_fields(cls, day_fields: DayFields) -> 'FieldUpdate':
        """Setzt alle nicht-leeren Felder (z.B. aus einer Vorlage)."""
        values = {
            'subject': day_fields.subject,
            'modality': day_fields.modality.value,
            'trainer': day_fields.trainer,
            'short_description': day_fields.short_description,
            'notes': day_fields.notes,
            'custom_location': day_fields.custom_location,
        }
        return cls(**{k: FieldValue.of(v) if v else FieldValue.unset() for k, v in values.items()})

    def provided(self) -> Dict[str, FieldValue]:
        return {f.name: getattr(self, f.name) for f in dc_fields(self) if getattr(self, f.name).is_provided}

    def is_empty(self) -> bool:
        return not self.provided()


@dataclass
class Day:
    """Ein Kalendertag; id ist das ISO-Datum (yyyy-mm-dd)."""
    id: str
    is_non_working: bool = False
    non_working_label: Optional[str] = None   # Feiertagsname, bei Wochenende leer
    fields: Optional[DayFields] = None         # nur für bearbeitete Arbeitstage

    def __post_init__(self):
        if self.is_non_working and self.fields is not None:
            raise ValueError(f"Non-working day {self.id} cannot carry fields")

    @property
    def date(self) -> date:
        return date.fromisoformat(self.id)

    @property
    def is_weekend(self) -> bool:
        return self.date.weekday() >= 5

    @property
    def is_holiday(self) -> bool:
        return self.is_non_working and self.non_working_label is not None

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {'id': self.id, 'date': self.id, 'isNonWorking': self.is_non_working}
        if self.non_working_label is not None:
            out['nonWorkingLabel'] = self.non_working_label
        if self.fields is not None:
            out['fields'] = self.fields.to_dict()
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Day':
        raw_fields = data.get('fields')
        # ältere Dumps kennen nur isWeekend / holidayName
        non_working = data.get('isNonWorking', data.get('isWeekend', False))
        return cls(
            id=data.get('id') or data['date'],
            is_non_working=bool(non_working),
            non_working_label=data.get('nonWorkingLabel', data.get('holidayName')),
            fields=DayFields.from_dict(raw_fields) if raw_fields and not non_working else None,
        )


@dataclass
class ProgramMeta:
    title: str = ""
    trainee: str = ""          # Identität des Trainees, Schlüssel für die Persistenz
    talent_manager: str = ""
    cohort: str = ""
    remarks: Optional[str] = None
    start_date: str = ""       # ISO, abgeleitet aus days
    end_date: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            'title': self.title,
            'trainee': self.trainee,
            'talentManager': self.talent_manager,
            'cohort': self.cohort,
            'remarks': self.remarks,
            'startDate': self.start_date,
            'endDate': self.end_date,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ProgramMeta':
        return cls(
            title=data.get('title', ''),
            trainee=data.get('trainee', data.get('traineeName', '')),
            talent_manager=data.get('talentManager', ''),
            cohort=data.get('cohort') or '',
            remarks=data.get('remarks'),
            start_date=data.get('startDate', ''),
            end_date=data.get('endDate', ''),
        )


@dataclass
class ScheduleState:
    """Persistierbare Einheit: Metadaten, alle Tage, aktuelle Auswahl."""
    meta: ProgramMeta = field(default_factory=ProgramMeta)
    days: List[Day] = field(default_factory=list)
    selected_ids: List[str] = field(default_factory=list)

    @property
    def start_date(self) -> Optional[date]:
        return self.days[0].date if self.days else None

    @property
    def end_date(self) -> Optional[date]:
        return self.days[-1].date if self.days else None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'meta': self.meta.to_dict(),
            'days': [d.to_dict() for d in self.days],
            'selectedIds': list(self.selected_ids),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ScheduleState':
        return cls(
            meta=ProgramMeta.from_dict(data.get('meta') or {}),
            days=[Day.from_dict(d) for d in data.get('days') or []],
            selected_ids=list(data.get('selectedIds') or []),
        )


@dataclass
class Template:
    """Wiederverwendbare Vorlage für Tagesfelder."""
    name: str
    fields: DayFields = field(default_factory=DayFields)
    id: Optional[int] = field(default=None)    # db-Primärschlüssel

    def to_update(self) -> FieldUpdate:
        return FieldUpdate.from_fields(self.fields)
