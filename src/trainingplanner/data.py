import os
import sqlite3
from datetime import datetime
from typing import List, Optional
from trainingplanner.models import Day, DayFields, Modality, ProgramMeta, ScheduleState, Template
import logging

class Database:
    def __init__(self, db_path: str = None):
        try:
            self.db_path = db_path or os.path.join(os.path.expanduser("~"), ".trainingplanner", "trainingplanner.db")
            if self.db_path != ':memory:':
                os.makedirs(os.path.dirname(os.path.abspath(self.db_path)), exist_ok=True)
            self.conn = sqlite3.connect(self.db_path)
            self.conn.row_factory = sqlite3.Row
            self.conn.execute("PRAGMA foreign_keys = ON;")  # Enable foreign key constraints
            self._ensure_tables()
        except Exception as e:
            logging.error(f"Database connection error: {e}")
            raise

    def _ensure_tables(self):
        cur = self.conn.cursor()
        # Ein Programm pro Trainee
        cur.execute("""
        CREATE TABLE IF NOT EXISTS programs (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          trainee TEXT NOT NULL UNIQUE,
          title TEXT NOT NULL,
          talent_manager TEXT,
          cohort TEXT,
          remarks TEXT,
          start_date TEXT NOT NULL,
          end_date TEXT NOT NULL,
          updated_at TEXT NOT NULL
        )""")

        # Tage; has_fields unterscheidet "nie bearbeitet" von "geleert"
        cur.execute("""
        CREATE TABLE IF NOT EXISTS training_days (
          program_id INTEGER NOT NULL,
          day TEXT NOT NULL,
          is_non_working INTEGER NOT NULL,
          non_working_label TEXT,
          has_fields INTEGER NOT NULL DEFAULT 0,
          subject TEXT,
          modality TEXT,
          trainer TEXT,
          short_description TEXT,
          notes TEXT,
          custom_location TEXT,
          PRIMARY KEY(program_id, day),
          FOREIGN KEY(program_id) REFERENCES programs(id) ON DELETE CASCADE
        )""")

        # Vorlagen
        cur.execute("""
        CREATE TABLE IF NOT EXISTS templates (
          id INTEGER PRIMARY KEY AUTOINCREMENT,
          name TEXT NOT NULL,
          subject TEXT,
          modality TEXT,
          trainer TEXT,
          short_description TEXT,
          notes TEXT,
          custom_location TEXT
        )""")

        self.conn.commit()

    # Programm-Methoden
    def save_schedule(self, state: ScheduleState) -> bool:
        """Programm samt aller Tage ersetzen; die Auswahl wird nicht gespeichert."""
        meta = state.meta
        if not meta.trainee:
            logging.error("Cannot save schedule without trainee")
            return False
        start = state.days[0].id if state.days else meta.start_date
        end = state.days[-1].id if state.days else meta.end_date
        try:
            with self.conn:
                cur = self.conn.cursor()
                cur.execute("SELECT id FROM programs WHERE trainee=?", (meta.trainee,))
                row = cur.fetchone()
                now = datetime.now().isoformat(timespec='microseconds')
                values = (meta.title, meta.talent_manager, meta.cohort, meta.remarks, start, end, now)
                if row is not None:
                    program_id = row['id']
                    cur.execute(
                        "UPDATE programs SET title=?, talent_manager=?, cohort=?, remarks=?, start_date=?, end_date=?, updated_at=? WHERE id=?",
                        values + (program_id,)
                    )
                    cur.execute("DELETE FROM training_days WHERE program_id=?", (program_id,))
                else:
                    cur.execute(
                        "INSERT INTO programs (title, talent_manager, cohort, remarks, start_date, end_date, updated_at, trainee) VALUES (?,?,?,?,?,?,?,?)",
                        values + (meta.trainee,)
                    )
                    program_id = cur.lastrowid
                cur.executemany(
                    "INSERT INTO training_days (program_id, day, is_non_working, non_working_label, has_fields, subject, modality, trainer, short_description, notes, custom_location) VALUES (?,?,?,?,?,?,?,?,?,?,?)",
                    [self._day_row(program_id, d) for d in state.days]
                )
            logging.info(f"Saved schedule for {meta.trainee} ({len(state.days)} days)")
            return True
        except sqlite3.Error as e:
            logging.error(f"Error saving schedule: {e}")
            return False

    @staticmethod
    def _day_row(program_id, d: Day):
        f = d.fields
        if f is None:
            return (program_id, d.id, int(d.is_non_working), d.non_working_label, 0,
                    None, None, None, None, None, None)
        return (program_id, d.id, int(d.is_non_working), d.non_working_label, 1,
                f.subject, f.modality.value, f.trainer, f.short_description, f.notes, f.custom_location)

    def load_schedule(self, trainee: Optional[str] = None) -> Optional[ScheduleState]:
        """Programm eines Trainees laden; ohne Angabe das zuletzt gespeicherte."""
        cur = self.conn.cursor()
        if trainee:
            cur.execute("SELECT * FROM programs WHERE trainee=?", (trainee,))
        else:
            cur.execute("SELECT * FROM programs ORDER BY updated_at DESC, id DESC LIMIT 1")
        prog = cur.fetchone()
        if prog is None:
            return None
        meta = ProgramMeta(
            title=prog['title'],
            trainee=prog['trainee'],
            talent_manager=prog['talent_manager'] or '',
            cohort=prog['cohort'] or '',
            remarks=prog['remarks'],
            start_date=prog['start_date'],
            end_date=prog['end_date'],
        )
        cur.execute("SELECT * FROM training_days WHERE program_id=? ORDER BY day", (prog['id'],))
        days = []
        for row in cur.fetchall():
            fields = None
            if row['has_fields'] and not row['is_non_working']:
                fields = DayFields(
                    subject=row['subject'] or '',
                    modality=Modality(row['modality'] or ''),
                    trainer=row['trainer'] or '',
                    short_description=row['short_description'],
                    notes=row['notes'],
                    custom_location=row['custom_location'],
                )
            days.append(Day(row['day'], bool(row['is_non_working']), row['non_working_label'], fields))
        return ScheduleState(meta=meta, days=days, selected_ids=[])

    def list_programs(self) -> List[ProgramMeta]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM programs ORDER BY updated_at DESC, id DESC")
        return [
            ProgramMeta(
                title=row['title'], trainee=row['trainee'], talent_manager=row['talent_manager'] or '',
                cohort=row['cohort'] or '', remarks=row['remarks'],
                start_date=row['start_date'], end_date=row['end_date'],
            )
            for row in cur.fetchall()
        ]

    def delete_program(self, trainee: str) -> bool:
        cur = self.conn.cursor()
        cur.execute("DELETE FROM programs WHERE trainee=?", (trainee,))
        self.conn.commit()
        return cur.rowcount > 0

    # Store-Schnittstelle für ScheduleSession
    def load(self, trainee: Optional[str] = None) -> Optional[ScheduleState]:
        return self.load_schedule(trainee)

    def save(self, state: ScheduleState) -> bool:
        return self.save_schedule(state)

    # Vorlagen-Methoden
    def load_templates(self) -> List[Template]:
        cur = self.conn.cursor()
        cur.execute("SELECT * FROM templates ORDER BY name")
        out = []
        for row in cur.fetchall():
            fields = DayFields(
                subject=row['subject'] or '',
                modality=Modality(row['modality'] or ''),
                trainer=row['trainer'] or '',
                short_description=row['short_description'],
                notes=row['notes'],
                custom_location=row['custom_location'],
            )
            out.append(Template(row['name'], fields, id=row['id']))
        return out

    def save_template(self, tpl: Template):
        f = tpl.fields
        values = (tpl.name, f.subject or None, f.modality.value or None, f.trainer or None,
                  f.short_description or None, f.notes or None, f.custom_location or None)
        cur = self.conn.cursor()
        if tpl.id is not None:
            cur.execute(
                "UPDATE templates SET name=?, subject=?, modality=?, trainer=?, short_description=?, notes=?, custom_location=? WHERE id=?",
                values + (tpl.id,)
            )
        else:
            cur.execute(
                "INSERT INTO templates (name, subject, modality, trainer, short_description, notes, custom_location) VALUES (?,?,?,?,?,?,?)",
                values
            )
            tpl.id = cur.lastrowid
        self.conn.commit()

    def delete_template(self, template_id: int):
        cur = self.conn.cursor()
        cur.execute("DELETE FROM templates WHERE id=?", (template_id,))
        self.conn.commit()

    def close(self):
        """Schließe die Datenbankverbindung sauber"""
        if self.conn:
            self.conn.close()
            self.conn = None
