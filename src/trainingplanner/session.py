import copy
import logging
from datetime import date
from typing import List, Optional

from .calendar_logic import build_days, partition_weeks
from .holidays import HolidayCache
from .merge import MergeResult, apply_update
from .models import Day, FieldUpdate, ProgramMeta, ScheduleState, Template
from .selection import SelectionModel


class ScheduleSession:
    """
    Alleiniger Besitzer eines Trainingsplans während einer Sitzung.

    Alle Änderungen laufen synchron über diese Klasse; eine neue Generierung
    ersetzt Tage und Auswahl in einem Schritt.
    """

    def __init__(self, holidays: Optional[HolidayCache] = None, store=None,
                 meta: Optional[ProgramMeta] = None):
        self.holidays = holidays if holidays is not None else HolidayCache()
        self.store = store
        self.meta = meta or ProgramMeta()
        self.days: List[Day] = []
        self.selection = SelectionModel()
        self.pending: Optional[FieldUpdate] = None
        self._generating = False

    # Ansichten
    @property
    def weeks(self) -> List[List[Day]]:
        return partition_weeks(self.days)

    @property
    def start_date(self) -> Optional[date]:
        return self.days[0].date if self.days else None

    @property
    def end_date(self) -> Optional[date]:
        return self.days[-1].date if self.days else None

    @property
    def selected_count(self) -> int:
        return len(self.selection)

    @property
    def is_generating(self) -> bool:
        return self._generating

    # Generierung
    def begin_generation(self) -> bool:
        if self._generating:
            logging.info("Generation already in progress, request ignored.")
            return False
        self._generating = True
        return True

    def finish_generation(self, days: List[Day]) -> None:
        self.days = list(days)
        self.selection.clear()
        self.pending = None
        self._generating = False
        self._sync_meta_dates()
        logging.info(f"Generated {len(self.days)} days from {self.meta.start_date} to {self.meta.end_date}")

    def abort_generation(self) -> None:
        self._generating = False

    def generate(self, reference_date: date) -> bool:
        if not self.begin_generation():
            return False
        try:
            days = build_days(reference_date, self.holidays)
        except Exception:
            self.abort_generation()
            raise
        self.finish_generation(days)
        return True

    # Auswahl
    def toggle(self, day_id: str, with_range: bool = False, multi: bool = False):
        return self.selection.toggle(day_id, self.days, with_range=with_range, multi=multi)

    def clear_selection(self) -> None:
        self.selection.clear()

    # Bulk-Bearbeitung
    def apply(self, update: FieldUpdate, confirmed: bool = False) -> MergeResult:
        result = apply_update(self.days, self.selection.selected, update, confirmed=confirmed)
        if result.committed:
            self._commit(result)
        else:
            self.pending = update
        return result

    def apply_template(self, template: Template, confirmed: bool = False) -> MergeResult:
        return self.apply(template.to_update(), confirmed=confirmed)

    def confirm_pending(self) -> Optional[MergeResult]:
        if self.pending is None:
            return None
        result = apply_update(self.days, self.selection.selected, self.pending, confirmed=True)
        self._commit(result)
        return result

    def cancel_pending(self) -> None:
        self.pending = None

    def _commit(self, result: MergeResult) -> None:
        self.days = result.days
        self.pending = None
        self.selection.clear()

    # Schnappschuss
    def _sync_meta_dates(self) -> None:
        self.meta.start_date = self.start_date.isoformat() if self.days else ""
        self.meta.end_date = self.end_date.isoformat() if self.days else ""

    def snapshot(self) -> ScheduleState:
        self._sync_meta_dates()
        return ScheduleState(
            meta=copy.deepcopy(self.meta),
            days=copy.deepcopy(self.days),
            selected_ids=self.selection.selected_ids,
        )

    def restore(self, state: ScheduleState) -> None:
        ids = [d.id for d in state.days]
        if ids != sorted(set(ids)):
            raise ValueError("Days must be unique and in ascending date order")
        self.days = copy.deepcopy(state.days)
        self.meta = copy.deepcopy(state.meta)
        self.selection = SelectionModel(state.selected_ids)
        self.selection.prune(self.days)
        self.pending = None
        self._sync_meta_dates()

    # Persistenz
    def save(self) -> bool:
        if self.store is None:
            return False
        try:
            return bool(self.store.save(self.snapshot()))
        except Exception as e:
            logging.error(f"Saving schedule failed: {e}")
            return False

    def load(self, trainee: Optional[str] = None) -> bool:
        if self.store is None:
            return False
        try:
            state = self.store.load(trainee)
        except Exception as e:
            logging.error(f"Loading schedule failed: {e}")
            return False
        if state is None:
            return False
        try:
            self.restore(state)
        except ValueError as e:
            logging.error(f"Ignoring invalid stored schedule: {e}")
            return False
        return True
