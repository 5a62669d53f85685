"""Business rules for creating, deleting, reading and listing notes."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence

from fooddlv.errors import (
    err_cannot_create_entity,
    err_cannot_delete_entity,
    err_cannot_get_entity,
    err_cannot_list_entity,
)
from fooddlv.models import Image, Paging
from fooddlv.notes_model import ENTITY_NAME, ListFilter, Note, NoteCreate
from fooddlv.pubsub import CHAN_NOTE_CREATED, Message


class GetImageStorage(Protocol):
    def get_images(self, ids: Sequence[int]) -> list[Image]: ...


class CreateNoteStorage(Protocol):
    def create(self, data: NoteCreate) -> Any: ...


class FindNoteStorage(Protocol):
    def find(self, conditions: Mapping[str, Any], *args: str) -> Note: ...


class DeleteNoteStorage(FindNoteStorage, Protocol):
    def delete(self, note_id: int) -> None: ...


class ListNoteStorage(Protocol):
    def list(self, paging: Paging, filter: Optional[ListFilter]) -> list[Note]: ...


class Publisher(Protocol):
    def publish(self, channel: str, message: Message) -> None: ...


class CreateNoteRepo:
    """Creates a note from uploaded images and announces it on the hub."""

    def __init__(
        self, image_store: GetImageStorage, store: CreateNoteStorage, pubsub: Publisher
    ) -> None:
        self._image_store = image_store
        self._store = store
        self._pubsub = pubsub

    def create_note(self, data: NoteCreate) -> None:
        try:
            images = self._image_store.get_images(data.image_ids)
        except Exception as exc:
            raise err_cannot_create_entity(ENTITY_NAME, exc) from exc

        if len(data.image_ids) != len(images):
            raise err_cannot_create_entity(ENTITY_NAME, Exception("images not enough"))

        data.images = list(images)

        try:
            self._store.create(data)
        except Exception as exc:
            raise err_cannot_create_entity(ENTITY_NAME, exc) from exc

        self._pubsub.publish(CHAN_NOTE_CREATED, Message(data))


class DeleteNoteRepo:
    def __init__(self, store: DeleteNoteStorage) -> None:
        self._store = store

    def delete_note(self, note_id: int) -> Note:
        """Soft-delete an active note and return it as it was before deletion."""
        try:
            note = self._store.find({"id": note_id, "status": 1})
        except Exception as exc:
            raise err_cannot_get_entity(ENTITY_NAME, exc) from exc

        try:
            self._store.delete(note_id)
        except Exception as exc:
            raise err_cannot_delete_entity(ENTITY_NAME, exc) from exc

        return note


class GetNoteRepo:
    def __init__(self, store: FindNoteStorage) -> None:
        self._store = store

    def get_note(self, note_id: int) -> Note:
        """Return an active note together with its author."""
        try:
            return self._store.find({"id": note_id, "status": 1}, "User")
        except Exception as exc:
            raise err_cannot_get_entity(ENTITY_NAME, exc) from exc


class ListNoteRepo:
    def __init__(self, store: ListNoteStorage) -> None:
        self._store = store

    def list_note(self, paging: Paging, filter: Optional[ListFilter]) -> list[Note]:
        try:
            return self._store.list(paging, filter)
        except Exception as exc:
            raise err_cannot_list_entity(ENTITY_NAME, exc) from exc