from dataclasses import dataclass, replace
from typing import Dict, Iterable, List, Optional

from .models import Day, DayFields, FieldState, FieldUpdate, Modality

MAX_LENGTHS = {
    'subject': 20,
    'trainer': 60,
    'short_description': 280,
    'notes': 500,
    'custom_location': 100,
}


class ValidationError(Exception):
    """Eine Aktualisierung verletzt Feldregeln; es wird nichts angewendet."""

    def __init__(self, errors: Dict[str, str]):
        super().__init__("; ".join(f"{k}: {v}" for k, v in errors.items()))
        self.errors = errors


@dataclass
class MergeResult:
    days: List[Day]
    requires_confirmation: bool
    committed: bool


def validate_update(update: FieldUpdate) -> None:
    errors: Dict[str, str] = {}
    for name, limit in MAX_LENGTHS.items():
        value = getattr(update, name)
        if value.state is FieldState.SET and len(value.value) > limit:
            errors[name] = f"Max {limit} tekens"

    if update.modality.state is FieldState.SET:
        try:
            modality = Modality(update.modality.value)
        except ValueError:
            errors['modality'] = f"Onbekende modus: {update.modality.value}"
        else:
            if modality is Modality.CUSTOM and update.custom_location.state is not FieldState.SET:
                errors.setdefault('custom_location', "Locatie is verplicht bij Custom")
    if errors:
        raise ValidationError(errors)


def merge_fields(previous: Optional[DayFields], update: FieldUpdate) -> DayFields:
    """Feldweiser Merge: gelieferte Felder überschreiben, fehlende bleiben erhalten."""
    prev = previous or DayFields()
    modality = Modality(update.modality.resolve(prev.modality.value) or '')
    custom_location = update.custom_location.resolve(prev.custom_location)
    if modality is not Modality.CUSTOM:
        custom_location = None
    return DayFields(
        subject=update.subject.resolve(prev.subject) or '',
        modality=modality,
        trainer=update.trainer.resolve(prev.trainer) or '',
        short_description=update.short_description.resolve(prev.short_description),
        notes=update.notes.resolve(prev.notes),
        custom_location=custom_location,
    )


def needs_confirmation(days: List[Day], selected_ids: Iterable[str]) -> bool:
    """True, wenn ein ausgewählter Arbeitstag schon Onderwerp, Modus oder Trainer hat."""
    # TODO: notes/shortDescription/customLocation zählen hier bisher nicht als Daten
    selected = set(selected_ids)
    return any(
        d.id in selected and not d.is_non_working and d.fields is not None and d.fields.has_core_data
        for d in days
    )


def apply_update(days: List[Day], selected_ids: Iterable[str], update: FieldUpdate,
                 confirmed: bool = False) -> MergeResult:
    """
    Wende `update` auf alle ausgewählten Arbeitstage an.

    Würden bereits befüllte Tage überschrieben und ist `confirmed` nicht gesetzt,
    bleibt alles unverändert und `requires_confirmation` ist True.
    Wirft ValidationError, bevor irgendetwas geändert wird, auch wenn erst das
    Ergebnis eines Tages ungültig wäre (Custom ohne Locatie).
    """
    validate_update(update)
    selected = set(selected_ids)

    out: List[Day] = []
    for d in days:
        if d.id not in selected or d.is_non_working:
            out.append(d)
            continue
        merged = merge_fields(d.fields, update)
        if merged.modality is Modality.CUSTOM and not merged.custom_location:
            raise ValidationError({'custom_location': f"Locatie is verplicht bij Custom ({d.id})"})
        out.append(replace(d, fields=merged))

    gate = needs_confirmation(days, selected)
    if gate and not confirmed:
        return MergeResult(days=list(days), requires_confirmation=True, committed=False)
    return MergeResult(days=out, requires_confirmation=gate, committed=True)
