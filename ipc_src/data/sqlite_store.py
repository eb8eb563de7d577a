"""SQLite-backed record store."""

import json
import logging
import re
import sqlite3
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Mapping

from ..exceptions import DuplicateRecordError, RecordNotFoundError
from ..models import ALL_TABLES, ReportKind
from .base import BaseRecordStore, Category

logger = logging.getLogger(__name__)

# Fields stored in their own columns rather than inside the JSON payload
_COLUMN_FIELDS = {
    "id": "id",
    "validationStatus": "validation_status",
    "createdAt": "created_at",
}

_FIELD_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


class SQLiteRecordStore(BaseRecordStore):
    """SQLite storage for reports, census logs and audits.

    Each row keeps the submitted form as JSON; ``id``, ``validationStatus``
    and ``createdAt`` live in their own columns.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path).expanduser()
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_db()

    def _init_db(self) -> None:
        """Initialize the database schema."""
        schema_path = Path(__file__).parent.parent / "schema.sql"
        with open(schema_path) as f:
            schema = f.read()

        with self._get_connection() as conn:
            conn.executescript(schema)

    def _get_connection(self) -> sqlite3.Connection:
        """Get a database connection with row factory."""
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    # --- Helpers ---

    @staticmethod
    def _table(category: Category) -> str:
        """Resolve a category to a known table name."""
        if isinstance(category, ReportKind):
            return category.table
        if category in ALL_TABLES:
            return category
        raise ValueError(f"Unknown table: {category}")

    @staticmethod
    def _field_expr(name: str) -> tuple[str, tuple]:
        """SQL expression (and params) selecting a field for filter/order."""
        if name in _COLUMN_FIELDS:
            return _COLUMN_FIELDS[name], ()
        if not _FIELD_NAME.match(name):
            raise ValueError(f"Invalid field name: {name}")
        return "json_extract(data, ?)", (f"$.{name}",)

    def _row_to_record(self, row: sqlite3.Row) -> dict:
        """Convert database row to a record dict."""
        record = json.loads(row["data"])
        record["id"] = row["id"]
        if row["validation_status"] is not None:
            record["validationStatus"] = row["validation_status"]
        record["createdAt"] = row["created_at"]
        return record

    @staticmethod
    def _split(record: Mapping[str, Any]) -> tuple[str | None, dict]:
        """Separate the validation status from the JSON payload."""
        data = {k: v for k, v in record.items() if k not in _COLUMN_FIELDS}
        return record.get("validationStatus"), data

    def _fetch(self, conn: sqlite3.Connection, table: str, record_id: str) -> sqlite3.Row | None:
        return conn.execute(
            f"SELECT * FROM {table} WHERE id = ?", (record_id,)
        ).fetchone()

    # --- Record Operations ---

    def get(
        self,
        category: Category,
        filters: Mapping[str, Any] | None = None,
        order_by: str | None = None,
        descending: bool = False,
    ) -> list[dict]:
        table = self._table(category)
        clauses = []
        params: list[Any] = []
        for name, value in (filters or {}).items():
            expr, expr_params = self._field_expr(name)
            params.extend(expr_params)
            if value is None:
                clauses.append(f"{expr} IS NULL")
            else:
                clauses.append(f"{expr} = ?")
                params.append(value)

        query = f"SELECT * FROM {table}"
        if clauses:
            query += " WHERE " + " AND ".join(clauses)
        if order_by:
            expr, expr_params = self._field_expr(order_by)
            params.extend(expr_params)
            query += f" ORDER BY {expr} {'DESC' if descending else 'ASC'}, created_at"
        else:
            query += " ORDER BY created_at"

        with self._get_connection() as conn:
            rows = conn.execute(query, params).fetchall()
            return [self._row_to_record(row) for row in rows]

    def get_by_id(self, category: Category, record_id: str) -> dict | None:
        """Get a single row by id."""
        with self._get_connection() as conn:
            row = self._fetch(conn, self._table(category), record_id)
            return self._row_to_record(row) if row else None

    def insert(self, category: Category, record: Mapping[str, Any]) -> dict:
        table = self._table(category)
        record_id = record.get("id") or str(uuid.uuid4())
        status, data = self._split(record)
        created_at = datetime.now().isoformat()

        try:
            with self._get_connection() as conn:
                conn.execute(
                    f"""
                    INSERT INTO {table} (id, validation_status, data, created_at)
                    VALUES (?, ?, ?, ?)
                    """,
                    (record_id, status, json.dumps(data, default=str), created_at),
                )
                conn.commit()
                row = self._fetch(conn, table, record_id)
        except sqlite3.IntegrityError as e:
            logger.error(f"Insert into {table} rejected: {e}")
            raise DuplicateRecordError(
                f"A record with this identifier already exists in {table} "
                f"(potential duplicate hospital number): {e}"
            ) from e

        logger.info(f"Inserted {table}/{record_id}")
        return self._row_to_record(row)

    def update(self, category: Category, record_id: str, patch: Mapping[str, Any]) -> dict:
        table = self._table(category)
        with self._get_connection() as conn:
            row = self._fetch(conn, table, record_id)
            if row is None:
                raise RecordNotFoundError(table, record_id)

            status, changes = self._split(patch)
            data = json.loads(row["data"])
            data.update(changes)
            if "validationStatus" not in patch:
                status = row["validation_status"]

            conn.execute(
                f"UPDATE {table} SET validation_status = ?, data = ? WHERE id = ?",
                (status, json.dumps(data, default=str), record_id),
            )
            conn.commit()
            updated = self._fetch(conn, table, record_id)

        logger.info(f"Updated {table}/{record_id}")
        return self._row_to_record(updated)

    def delete(self, category: Category, record_id: str) -> dict:
        table = self._table(category)
        if not record_id:
            logger.error(f"delete called without ID for table: {table}")
            raise ValueError("Deletion failed: missing record ID.")

        logger.info(f"Starting deletion: table={table}, id={record_id}")
        with self._get_connection() as conn:
            row = self._fetch(conn, table, record_id)
            cursor = conn.execute(f"DELETE FROM {table} WHERE id = ?", (record_id,))
            conn.commit()

        if row is None or cursor.rowcount == 0:
            logger.warning(f"Delete on {table}/{record_id} removed 0 rows")
            raise RecordNotFoundError(table, record_id)

        deleted = self._row_to_record(row)
        logger.info(f"Deletion successful: {table}/{record_id}")
        return deleted

    def upsert(self, category: Category, record: Mapping[str, Any], key: str) -> dict:
        if record.get(key) is None:
            raise ValueError(f"Upsert requires a value for '{key}'")

        existing = self.get(category, filters={key: record[key]})
        if not existing:
            return self.insert(category, record)

        record_id = existing[0]["id"]
        table = self._table(category)
        status, data = self._split(record)
        with self._get_connection() as conn:
            conn.execute(
                f"UPDATE {table} SET validation_status = ?, data = ? WHERE id = ?",
                (status, json.dumps(data, default=str), record_id),
            )
            conn.commit()
            row = self._fetch(conn, table, record_id)

        logger.info(f"Overwrote {table}/{record_id} ({key}={record[key]})")
        return self._row_to_record(row)
