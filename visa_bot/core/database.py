#######################################################
# Database management for the bot
#######################################################
import datetime
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Dict, List, Optional

from visa_bot.core.errors import PersistenceError

APPLICATION_STATUSES = ('accepted', 'rejected')


class VisaDatabase:
    """Thin accessor over the `applications` and `settings` tables.
    Both tables are keyed by a Discord ID stored as text and only ever written with upserts.
    """

    def __init__(self, db_path='data/visa_bot.db'):
        self.db_path = db_path
        Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self._initialize_database()

    def _now_iso(self) -> str:
        return datetime.datetime.now(datetime.timezone.utc).isoformat()

    @contextmanager
    def _connect(self):
        try:
            with closing(sqlite3.connect(self.db_path)) as conn:
                with closing(conn.cursor()) as cursor:
                    yield conn, cursor
        except sqlite3.Error as e:
            raise PersistenceError(f"Database operation failed: {e}") from e

    def _initialize_database(self):
        """Creates the applications and settings tables if they don't exist."""
        with self._connect() as (conn, cursor):
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS applications (
                    user_id TEXT PRIMARY KEY,
                    status TEXT NOT NULL,
                    updated_at DATETIME
                )
            ''')
            cursor.execute('''
                CREATE TABLE IF NOT EXISTS settings (
                    guild_id TEXT PRIMARY KEY,
                    log_channel_id TEXT,
                    response_channel_id TEXT
                )
            ''')
            conn.commit()

    # --- Applications ---
    def set_application_status(self, user_id: int, status: str) -> None:
        """Record the decision for an applicant, replacing any earlier one.
        Parameters:
            user_id (int): The ID of the applicant.
            status (str): Either 'accepted' or 'rejected'.
        """
        if status not in APPLICATION_STATUSES:
            raise ValueError(f"Unknown application status: {status}")
        with self._connect() as (conn, cursor):
            cursor.execute('''
                INSERT INTO applications (user_id, status, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(user_id) DO UPDATE SET status=excluded.status, updated_at=excluded.updated_at
            ''', (str(user_id), status, self._now_iso()))
            conn.commit()

    def get_application(self, user_id: int) -> Dict | None:
        """Return the application record for a user, or None if no decision was made."""
        with self._connect() as (conn, cursor):
            cursor.execute('SELECT user_id, status, updated_at FROM applications WHERE user_id = ?', (str(user_id),))
            row = cursor.fetchone()
            if not row:
                return None
            return {
                'user_id': row[0],
                'status': row[1],
                'updated_at': row[2]
            }

    # --- Guild settings ---
    def set_log_channel(self, guild_id: int, channel_id: int) -> None:
        """Sets the audit log channel for a guild, leaving the response channel untouched."""
        with self._connect() as (conn, cursor):
            cursor.execute('''
                INSERT INTO settings (guild_id, log_channel_id)
                VALUES (?, ?)
                ON CONFLICT(guild_id) DO UPDATE SET log_channel_id=excluded.log_channel_id
            ''', (str(guild_id), str(channel_id)))
            conn.commit()

    def set_response_channel(self, guild_id: int, channel_id: int) -> None:
        """Sets the response channel for a guild, leaving the log channel untouched."""
        with self._connect() as (conn, cursor):
            cursor.execute('''
                INSERT INTO settings (guild_id, response_channel_id)
                VALUES (?, ?)
                ON CONFLICT(guild_id) DO UPDATE SET response_channel_id=excluded.response_channel_id
            ''', (str(guild_id), str(channel_id)))
            conn.commit()

    def get_settings(self, guild_id: int) -> Dict | None:
        """Retrieves the settings record for a guild.
        Returns:
            dict | None: {'guild_id', 'log_channel_id', 'response_channel_id'} with channel IDs as ints, or None if not set.
        """
        with self._connect() as (conn, cursor):
            cursor.execute('SELECT guild_id, log_channel_id, response_channel_id FROM settings WHERE guild_id = ?', (str(guild_id),))
            row = cursor.fetchone()
            return self._settings_from_row(row) if row else None

    def get_all_settings(self) -> List[Dict]:
        """Retrieves every guild settings record, used to warm the in-memory cache at startup."""
        with self._connect() as (conn, cursor):
            cursor.execute('SELECT guild_id, log_channel_id, response_channel_id FROM settings')
            rows = cursor.fetchall()
            return [self._settings_from_row(row) for row in rows]

    def _settings_from_row(self, row) -> Dict:
        return {
            'guild_id': int(row[0]),
            'log_channel_id': _optional_int(row[1]),
            'response_channel_id': _optional_int(row[2])
        }


def _optional_int(value) -> Optional[int]:
    if value is None or value == '':
        return None
    return int(value)
