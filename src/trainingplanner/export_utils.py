from datetime import date
from typing import List, Optional, Tuple

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from trainingplanner.calendar_logic import partition_weeks
from trainingplanner.models import Day, Modality, ScheduleState

DEFAULT_TIME_LABEL = '09:00–17:00 (pauze 12:00–13:00)'
DAY_TIME = '09:00–17:00'
EMPTY = '—'
UNKNOWN = '(onbekend)'

_WEEKDAYS_NL = ['maandag', 'dinsdag', 'woensdag', 'donderdag', 'vrijdag', 'zaterdag', 'zondag']
_WEEKDAYS_NL_SHORT = ['ma', 'di', 'wo', 'do', 'vr', 'za', 'zo']
_MONTHS_NL = ['januari', 'februari', 'maart', 'april', 'mei', 'juni', 'juli',
              'augustus', 'september', 'oktober', 'november', 'december']

TABLE_HEADER = ('Datum', 'Modus', 'Trainer', 'Onderwerp', 'Tijd')


def format_date_nl(d: date, short: bool = False) -> str:
    """
    Niederländisches Datum ohne Abhängigkeit vom System-Locale.
      short=False: 'maandag 04 maart 2024'
      short=True:  'ma 04-03'
    """
    if short:
        return f"{_WEEKDAYS_NL_SHORT[d.weekday()]} {d.day:02d}-{d.month:02d}"
    return f"{_WEEKDAYS_NL[d.weekday()]} {d.day:02d} {_MONTHS_NL[d.month - 1]} {d.year}"


def modality_label(day: Day) -> str:
    if day.is_non_working:
        return day.non_working_label or 'Weekend'
    f = day.fields
    if f is None:
        return EMPTY
    if f.modality is Modality.CUSTOM:
        return f.custom_location or EMPTY
    return f.modality.value or EMPTY


def week_rows(week: List[Day]) -> List[Tuple[str, str, str, str, str]]:
    """Tabellenzeilen einer Woche für Druck/PDF: Datum, Modus, Trainer, Onderwerp, Tijd."""
    rows = []
    for day in week:
        label = format_date_nl(day.date, short=True)
        if day.is_non_working:
            rows.append((label, modality_label(day), '', '', ''))
            continue
        f = day.fields
        rows.append((
            label,
            modality_label(day),
            (f.trainer if f else '') or EMPTY,
            (f.subject if f else '') or EMPTY,
            DAY_TIME,
        ))
    return rows


def period_label(state: ScheduleState) -> str:
    if not state.days:
        return ''
    return f"{format_date_nl(state.start_date)} – {format_date_nl(state.end_date)}"


def export_weeks_pdf(state: ScheduleState, filename: str, title: Optional[str] = None) -> int:
    """Schreibe den Plan als PDF, eine Woche pro Seite. Gibt die Seitenzahl zurück."""
    weeks = partition_weeks(state.days)
    c = canvas.Canvas(filename, pagesize=A4)
    w, h = A4
    col_x = [50, 140, 250, 360, 470]
    meta = state.meta
    pages = 0
    for idx, week in enumerate(weeks):
        y = h - 50
        c.setFont('Helvetica-Bold', 14)
        c.drawCentredString(w / 2, y, title or f"Trainingsprogramma – week {idx + 1}")
        y -= 25
        c.setFont('Helvetica', 11)
        c.drawCentredString(w / 2, y, f"Naam trainee: {meta.trainee or UNKNOWN}")
        y -= 15
        c.drawCentredString(w / 2, y, f"Talent manager: {meta.talent_manager or UNKNOWN}")
        y -= 15
        c.drawCentredString(w / 2, y, f"Titel: {meta.title or UNKNOWN}")
        y -= 35

        c.setFont('Helvetica-Bold', 11)
        for x, head in zip(col_x, TABLE_HEADER):
            c.drawString(x, y, head)
        y -= 8
        c.line(col_x[0], y, w - 50, y)
        y -= 16
        c.setFont('Helvetica', 10)
        for day, row in zip(week, week_rows(week)):
            c.setFillGray(0.5 if day.is_non_working else 0)
            for x, cell in zip(col_x, row):
                c.drawString(x, y, cell[:22])
            y -= 18
        c.setFillGray(0)
        c.showPage()
        pages += 1
    if not pages:
        # leeres Dokument braucht mindestens eine Seite
        c.showPage()
    c.save()
    return pages
