"""Image records: storage and creation."""

from __future__ import annotations

import sqlite3
from typing import Iterable, Sequence

from fooddlv.errors import err_db
from fooddlv.models import Image

TABLE_NAME = Image.table_name


class ImageStore:
    """Reads and writes the images table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def create(self, images: Sequence[Image]) -> list[int]:
        """Insert all images in one transaction, assign their ids and return them."""
        ids: list[int] = []
        try:
            with self._conn:
                for image in images:
                    cursor = self._conn.execute(
                        f"INSERT INTO {TABLE_NAME} (url, width, height) VALUES (?, ?, ?)",
                        (image.url, image.width, image.height),
                    )
                    ids.append(int(cursor.lastrowid))
        except sqlite3.Error as exc:
            raise err_db(exc) from exc
        for image, image_id in zip(images, ids):
            image.id = image_id
        return ids

    def get_images(self, ids: Iterable[int]) -> list[Image]:
        """Return the stored images with the given ids, ordered by id."""
        wanted = list(ids)
        if not wanted:
            return []
        placeholders = ", ".join("?" for _ in wanted)
        try:
            rows = self._conn.execute(
                f"SELECT id, url, width, height FROM {TABLE_NAME} "
                f"WHERE id IN ({placeholders}) ORDER BY id",
                wanted,
            ).fetchall()
        except sqlite3.Error as exc:
            raise err_db(exc) from exc
        return [Image(id=r[0], url=r[1], width=r[2], height=r[3]) for r in rows]


class CreateImageRepo:
    def __init__(self, store: ImageStore) -> None:
        self._store = store

    def create(self, images: Sequence[Image]) -> list[int]:
        return self._store.create(images)