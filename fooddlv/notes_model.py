"""Note records and the payloads used to create, update and list them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from fooddlv.errors import AppError, new_custom_error
from fooddlv.models import Image, RoleEnum, SQLModel

ENTITY_NAME = "Note"
TABLE_NAME = "notes"


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _base_dict(model: SQLModel) -> dict[str, Any]:
    return {
        "id": model.id,
        "status": model.status,
        "created_at": _format_time(model.created_at),
        "updated_at": _format_time(model.updated_at),
    }


def _title_cannot_empty() -> AppError:
    return new_custom_error(
        Exception("ErrNoteTitleEmpty"), "note title cannot not be empty", "ErrNoteTitleEmpty"
    )


@dataclass
class NoteUser(SQLModel):
    """The author shown alongside a note."""

    last_name: str = ""
    first_name: str = ""
    roles: Optional[RoleEnum] = None
    avatar: Any = None

    table_name = "users"

    def to_dict(self) -> dict[str, Any]:
        body = _base_dict(self)
        body["last_name"] = self.last_name
        body["first_name"] = self.first_name
        if self.avatar is not None:
            body["avatar"] = self.avatar
        return body


@dataclass
class Note(SQLModel):
    title: str = ""
    content: str = ""
    user_id: int = 0
    user: Optional[NoteUser] = None
    has_liked: bool = False
    liked_count: int = 0

    table_name = TABLE_NAME

    def to_dict(self) -> dict[str, Any]:
        body = _base_dict(self)
        body.update(
            title=self.title,
            content=self.content,
            user_id=self.user_id,
            user=self.user.to_dict() if self.user is not None else None,
            has_liked=self.has_liked,
            liked_count=self.liked_count,
        )
        return body


@dataclass
class NoteCreate:
    id: int = 0
    title: str = ""
    content: str = ""
    image: Optional[Image] = None
    image_ids: list[int] = field(default_factory=list)
    images: Optional[list[Image]] = None

    table_name = TABLE_NAME

    def get_image_ids(self) -> list[int]:
        return self.image_ids

    def validate(self) -> None:
        """Trim title and content; raise AppError if the title is empty."""
        self.title = self.title.strip()
        self.content = self.content.strip()
        if not self.title:
            raise _title_cannot_empty()


@dataclass
class NoteUpdate:
    title: Optional[str] = None
    content: Optional[str] = None

    table_name = TABLE_NAME


@dataclass
class ListFilter:
    """Filters for listing notes; none are defined yet."""

    def to_dict(self) -> dict[str, Any]:
        return {}