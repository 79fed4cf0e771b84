import logging
from datetime import date
from typing import Optional

from PySide6.QtCore import QObject, QThread, Signal, Slot

from trainingplanner.calendar_logic import build_days
from trainingplanner.export_utils import export_weeks_pdf
from trainingplanner.holidays import HolidayCache


class GenerateWorker(QObject):
    finished = Signal(object)   # List[Day]
    error = Signal(str)

    def __init__(self, reference_date: date, holidays: Optional[HolidayCache] = None):
        super().__init__()
        self.reference_date = reference_date
        self.holidays = holidays
        self._stopped = False

    def stop(self):
        self._stopped = True

    def run(self):
        if self._stopped:
            return
        try:
            days = build_days(self.reference_date, self.holidays)
            if not self._stopped:
                self.finished.emit(days)
        except Exception as e:
            logging.error(f"GenerateWorker error: {e}")
            if not self._stopped:
                self.error.emit(str(e))


class ExportWorker(QObject):
    finished = Signal(str)
    error = Signal(str)

    def __init__(self, state, filename):
        super().__init__()
        self.state = state
        self.filename = filename

    def run(self):
        logging.info(f"ExportWorker.run gestartet: {self.filename}")
        try:
            export_weeks_pdf(self.state, self.filename)
            self.finished.emit(self.filename)
        except OSError as e:
            logging.error(f"ExportWorker OSError: {e}")
            self.error.emit(f"Bestandsfout: {e}")
        except Exception as e:
            logging.error(f"ExportWorker error: {e}")
            self.error.emit(str(e))


class GenerationController(QObject):
    """
    Startet die Kalendergenerierung im Hintergrund-Thread.

    Während eine Generierung läuft, werden weitere Anfragen ignoriert; das
    Ergebnis wird erst im Haupt-Thread in die Sitzung übernommen.
    """
    generated = Signal(int)
    failed = Signal(str)

    def __init__(self, session):
        super().__init__()
        self.session = session
        self._thread = None
        self._worker = None

    def request(self, reference_date: date) -> bool:
        if not self.session.begin_generation():
            return False
        if self._thread is not None:
            # vorheriger Thread beendet nur noch seine Event-Loop
            self._thread.wait()
        self._thread = QThread()
        self._worker = GenerateWorker(reference_date, self.session.holidays)
        self._worker.moveToThread(self._thread)
        self._thread.started.connect(self._worker.run)
        self._worker.finished.connect(self.on_finished)
        self._worker.error.connect(self.on_error)
        self._worker.finished.connect(self._thread.quit)
        self._worker.error.connect(self._thread.quit)
        self._thread.start()
        return True

    @Slot(object)
    def on_finished(self, days):
        self.session.finish_generation(days)
        self.generated.emit(len(days))

    @Slot(str)
    def on_error(self, msg):
        logging.error(f"Generation error: {msg}")
        self.session.abort_generation()
        self.failed.emit(msg)

    def wait(self):
        if self._thread is not None:
            self._thread.wait()

    def cleanup(self):
        if self._worker is not None:
            self._worker.stop()
        if self._thread is not None and self._thread.isRunning():
            self._thread.quit()
            self._thread.wait()
        if self.session.is_generating:
            self.session.abort_generation()
        self._thread = None
        self._worker = None
