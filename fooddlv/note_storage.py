"""Storage of notes in the notes table."""

from __future__ import annotations

import json
import sqlite3
from datetime import datetime
from typing import Any, Mapping, Optional, Sequence

from fooddlv.errors import err_db
from fooddlv.models import Paging, RoleEnum, decode_json, encode_images
from fooddlv.notes_model import TABLE_NAME, ListFilter, Note, NoteCreate, NoteUser
from fooddlv.users import TABLE_NAME as USERS_TABLE
from fooddlv.users import RecordNotFoundError

PRELOAD_USER = "User"

_COLUMNS = frozenset(
    {
        "id",
        "status",
        "created_at",
        "updated_at",
        "title",
        "content",
        "user_id",
        "image",
        "images",
    }
)
_PRELOADS = frozenset({PRELOAD_USER})


def _parse_time(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _sql_value(value: Any) -> Any:
    return value.value if isinstance(value, RoleEnum) else value


def _note_from_row(row: Mapping[str, Any]) -> Note:
    return Note(
        id=row["id"],
        status=row["status"],
        created_at=_parse_time(row["created_at"]),
        updated_at=_parse_time(row["updated_at"]),
        title=row["title"] or "",
        content=row["content"] or "",
        user_id=row["user_id"] or 0,
    )


def _note_user_from_row(row: Mapping[str, Any]) -> NoteUser:
    return NoteUser(
        id=row["id"],
        status=row["status"],
        created_at=_parse_time(row["created_at"]),
        updated_at=_parse_time(row["updated_at"]),
        last_name=row["last_name"] or "",
        first_name=row["first_name"] or "",
        roles=RoleEnum(row["roles"]) if row["roles"] else None,
        avatar=decode_json(row["avatar"]) if row["avatar"] is not None else None,
    )


class NoteStore:
    """Reads and writes the notes table; every failure is raised as a DB error."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def _rows(self, query: str, params: Sequence[Any]) -> list[dict[str, Any]]:
        try:
            cursor = self._conn.execute(query, list(params))
            rows = cursor.fetchall()
            names = [description[0] for description in cursor.description]
        except sqlite3.Error as exc:
            raise err_db(exc) from exc
        return [dict(zip(names, row)) for row in rows]

    def create(self, data: NoteCreate) -> int:
        """Insert the note, assign its new id and return it."""
        image = json.dumps(data.image.to_dict()) if data.image is not None else None
        try:
            with self._conn:
                cursor = self._conn.execute(
                    f"INSERT INTO {TABLE_NAME} (title, content, image, images) "
                    "VALUES (?, ?, ?, ?)",
                    (data.title, data.content, image, encode_images(data.images)),
                )
        except sqlite3.Error as exc:
            raise err_db(exc) from exc
        data.id = int(cursor.lastrowid)
        return data.id

    def delete(self, note_id: int) -> None:
        """Soft-delete a note by setting its status to 0."""
        try:
            with self._conn:
                self._conn.execute(
                    f"UPDATE {TABLE_NAME} SET status = 0 WHERE id = ?", (note_id,)
                )
        except sqlite3.Error as exc:
            raise err_db(exc) from exc

    def find(self, conditions: Mapping[str, Any], *args: str) -> Note:
        """Return the first note matching every condition.

        Extra arguments name relations to load; only "User" is known.
        """
        unknown = set(conditions) - _COLUMNS
        if unknown:
            raise err_db(ValueError(f"unknown column: {', '.join(sorted(unknown))}"))
        unknown_relations = set(args) - _PRELOADS
        if unknown_relations:
            raise err_db(
                ValueError(f"unsupported relations: {', '.join(sorted(unknown_relations))}")
            )

        query = f"SELECT * FROM {TABLE_NAME}"
        if conditions:
            query += " WHERE " + " AND ".join(f"{column} = ?" for column in conditions)
        query += " ORDER BY id LIMIT 1"
        rows = self._rows(query, [_sql_value(v) for v in conditions.values()])
        if not rows:
            raise err_db(RecordNotFoundError("record not found"))
        note = _note_from_row(rows[0])

        if PRELOAD_USER in args and note.user_id:
            users = self._rows(f"SELECT * FROM {USERS_TABLE} WHERE id = ?", [note.user_id])
            if users:
                note.user = _note_user_from_row(users[0])
        return note

    def list(self, paging: Paging, filter: Optional[ListFilter]) -> list[Note]:
        """Return one page of notes and set ``paging.total`` to the active note count."""
        counted = self._rows(f"SELECT COUNT(*) AS total FROM {TABLE_NAME} WHERE status = 1", [])
        paging.total = int(counted[0]["total"])
        rows = self._rows(
            f"SELECT * FROM {TABLE_NAME} ORDER BY id LIMIT ? OFFSET ?",
            [paging.limit, (paging.page - 1) * paging.limit],
        )
        return [_note_from_row(row) for row in rows]