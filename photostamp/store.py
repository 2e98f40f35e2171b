from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import Any

from photostamp.errors import StoreUnavailableError, TemplateNotFoundError
from photostamp.models import TemplateRecord

LOGGER = logging.getLogger(__name__)

TABLE_NAME = "photo_templates"
_COLUMNS = ("id", "name", "crop_photo", "crop_number", "template_img")

_CREATE_TABLE_SQL = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    crop_photo TEXT NOT NULL,
    crop_number TEXT NOT NULL DEFAULT '',
    template_img TEXT NOT NULL
)
"""


def _row_to_record(row: Any) -> TemplateRecord:
    return TemplateRecord(
        id=int(row["id"]),
        name=str(row["name"] or ""),
        crop_photo=str(row["crop_photo"] or ""),
        crop_number=str(row["crop_number"] or ""),
        template_img=str(row["template_img"] or ""),
    )


class TemplateStore:
    """SQLite-backed store of photo templates keyed by integer id."""

    def __init__(self, conn: sqlite3.Connection, db_path: Path | None = None) -> None:
        self._conn = conn
        self._conn.row_factory = sqlite3.Row
        self.db_path = db_path

    @classmethod
    def connect(cls, db_path: Path) -> "TemplateStore":
        try:
            db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = sqlite3.connect(str(db_path), check_same_thread=False)
        except (OSError, sqlite3.Error) as exc:
            raise StoreUnavailableError(f"error connecting to {db_path}: {exc}") from exc
        store = cls(conn, db_path=db_path)
        try:
            store.ensure_schema()
        except StoreUnavailableError:
            store.close()
            raise
        return store

    def ensure_schema(self) -> None:
        try:
            with self._conn:
                self._conn.execute(_CREATE_TABLE_SQL)
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"error preparing template store: {exc}") from exc

    def close(self) -> None:
        self._conn.close()

    def __enter__(self) -> "TemplateStore":
        return self

    def __exit__(self, *_exc: object) -> None:
        self.close()

    def _query(self, sql: str, params: tuple[Any, ...] = ()) -> list[Any]:
        try:
            return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"error querying template store: {exc}") from exc

    def get(self, template_id: int) -> TemplateRecord:
        rows = self._query(
            f"SELECT {', '.join(_COLUMNS)} FROM {TABLE_NAME} WHERE id = ?",
            (int(template_id),),
        )
        if not rows:
            raise TemplateNotFoundError(template_id)
        return _row_to_record(rows[0])

    def list_all(self) -> list[TemplateRecord]:
        rows = self._query(f"SELECT {', '.join(_COLUMNS)} FROM {TABLE_NAME} ORDER BY id")
        return [_row_to_record(row) for row in rows]

    def insert(self, name: str, crop_photo: str, crop_number: str, template_img: str) -> TemplateRecord:
        try:
            with self._conn:
                cursor = self._conn.execute(
                    f"INSERT INTO {TABLE_NAME} (name, crop_photo, crop_number, template_img) VALUES (?, ?, ?, ?)",
                    (name, crop_photo, crop_number, template_img),
                )
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"error inserting photo template: {exc}") from exc
        LOGGER.debug("inserted photo template id=%s", cursor.lastrowid)
        return self.get(int(cursor.lastrowid))

    def update(
        self,
        template_id: int,
        name: str,
        crop_photo: str,
        crop_number: str,
        template_img: str,
    ) -> TemplateRecord:
        try:
            with self._conn:
                cursor = self._conn.execute(
                    f"UPDATE {TABLE_NAME} SET name = ?, crop_photo = ?, crop_number = ?, template_img = ? WHERE id = ?",
                    (name, crop_photo, crop_number, template_img, int(template_id)),
                )
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"error updating photo template: {exc}") from exc
        if cursor.rowcount == 0:
            raise TemplateNotFoundError(template_id)
        return self.get(template_id)

    def delete(self, template_id: int) -> None:
        try:
            with self._conn:
                cursor = self._conn.execute(f"DELETE FROM {TABLE_NAME} WHERE id = ?", (int(template_id),))
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"error deleting photo template: {exc}") from exc
        if cursor.rowcount == 0:
            raise TemplateNotFoundError(template_id)
