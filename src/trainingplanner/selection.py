from typing import FrozenSet, Iterable, List, Optional, Set

from .models import Day


class SelectionModel:
    """
    Auswahl von Arbeitstagen per Klick, Shift-Klick (Bereich) und Strg/Cmd (Mehrfach).

    Zustand: die ausgewählten Tages-ids und der Anker (zuletzt einfach
    angeklickter Tag), von dem aus Bereiche aufgezogen werden.
    """

    def __init__(self, selected: Iterable[str] = (), anchor: Optional[str] = None):
        self.selected: Set[str] = set(selected)
        self.anchor: Optional[str] = anchor

    @property
    def selected_ids(self) -> List[str]:
        return sorted(self.selected)

    def is_selected(self, day_id: str) -> bool:
        return day_id in self.selected

    def __len__(self):
        return len(self.selected)

    def toggle(self, day_id: str, days: List[Day], with_range: bool = False,
               multi: bool = False) -> FrozenSet[str]:
        index = {d.id: i for i, d in enumerate(days)}
        target = index.get(day_id)
        # unbekannte oder arbeitsfreie Tage sind nie auswählbar
        if target is None or days[target].is_non_working:
            return frozenset(self.selected)

        anchor = index.get(self.anchor) if self.anchor is not None else None
        if with_range and anchor is not None:
            lo, hi = min(anchor, target), max(anchor, target)
            span = {d.id for d in days[lo:hi + 1] if not d.is_non_working}
            self.selected = (self.selected | span) if multi else span
        else:
            if day_id in self.selected:
                self.selected.discard(day_id)
            else:
                self.selected.add(day_id)
            self.anchor = day_id
        return frozenset(self.selected)

    def clear(self) -> None:
        self.selected = set()
        self.anchor = None

    def prune(self, days: List[Day]) -> None:
        """Beschränke die Auswahl auf Arbeitstage, die in `days` vorkommen."""
        working = {d.id for d in days if not d.is_non_working}
        self.selected &= working
        if self.anchor not in working:
            self.anchor = None
