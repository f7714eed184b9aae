from quiz_gauge.quiz.adapters.db_manager import DatabaseManager
from quiz_gauge.quiz.domain.ports import IKeyValueStore
from quiz_gauge.shared.telemetry import Telemetry, measure_time


class SQLiteKeyValueStore(IKeyValueStore):
    """
    Blob storage on a single SQLite table.
    sqlite3 errors propagate; the typed storage above decides what to do.
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        self.telemetry = Telemetry("SQLiteKeyValueStore")
        self.db_manager = db_manager

    @measure_time("kv_get")
    def get(self, key: str) -> str | None:
        conn = self.db_manager.get_connection()
        row = conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row[0] if row else None

    @measure_time("kv_set")
    def set(self, key: str, value: str) -> None:
        conn = self.db_manager.get_connection()
        conn.execute(
            "INSERT OR REPLACE INTO kv_store (key, value, updated_at) "
            "VALUES (?, ?, CURRENT_TIMESTAMP)",
            (key, value),
        )
        conn.commit()

    @measure_time("kv_remove")
    def remove(self, key: str) -> None:
        conn = self.db_manager.get_connection()
        conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))
        conn.commit()
