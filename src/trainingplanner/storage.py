"""Lokaler JSON-Speicher als Fallback für die Datenbank."""

import json
import logging
import os
from typing import Optional

from .models import ScheduleState


class JsonScheduleStore:
    """Ein einzelner Plan als JSON-Dokument."""

    def __init__(self, path: str = None):
        self.path = path or os.path.join(os.path.expanduser('~'), '.trainingplanner', 'schedule.json')

    def load(self, trainee: Optional[str] = None) -> Optional[ScheduleState]:
        if not os.path.exists(self.path):
            return None
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                state = ScheduleState.from_dict(json.load(f))
        except (OSError, ValueError, KeyError, TypeError) as e:
            logging.warning(f"Ignoring unreadable schedule file {self.path}: {e}")
            return None
        if trainee and state.meta.trainee != trainee:
            return None
        return state

    def save(self, state: ScheduleState) -> bool:
        try:
            os.makedirs(os.path.dirname(os.path.abspath(self.path)), exist_ok=True)
            with open(self.path, 'w', encoding='utf-8') as f:
                json.dump(state.to_dict(), f, ensure_ascii=False, indent=2)
            return True
        except OSError as e:
            logging.error(f"Error writing schedule file {self.path}: {e}")
            return False


class FallbackStore:
    """Primärer Speicher mit lokalem Fallback (Laden und Spiegeln beim Speichern)."""

    def __init__(self, primary, fallback):
        self.primary = primary
        self.fallback = fallback

    def load(self, trainee: Optional[str] = None) -> Optional[ScheduleState]:
        try:
            state = self.primary.load(trainee)
        except Exception as e:
            logging.warning(f"Primary store load failed, trying fallback: {e}")
            state = None
        if state is None:
            state = self.fallback.load(trainee)
        return state

    def save(self, state: ScheduleState) -> bool:
        try:
            ok_primary = bool(self.primary.save(state))
        except Exception as e:
            logging.error(f"Primary store save failed: {e}")
            ok_primary = False
        ok_fallback = bool(self.fallback.save(state))
        return ok_primary or ok_fallback
