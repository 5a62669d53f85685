"""Shared data types: base model, roles, images, paging and the current user."""

from __future__ import annotations

import enum
import json
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Iterable, Optional

KEY_CURRENT_USER = "CurrentUser"


class RoleEnum(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"


def _format_time(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


@dataclass
class SQLModel:
    """Columns common to every stored record."""

    id: int = 0
    status: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class Image:
    id: int = 0
    url: str = ""
    width: int = 0
    height: int = 0

    table_name = "images"

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "url": self.url, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Image":
        return cls(
            id=int(data.get("id", 0)),
            url=str(data.get("url", "")),
            width=int(data.get("width", 0)),
            height=int(data.get("height", 0)),
        )


def _load(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        value = bytes(value).decode("utf-8")
    if not isinstance(value, str):
        raise TypeError(f"Failed to unmarshal JSONB value:{value!r}")
    return json.loads(value)


def encode_images(images: Optional[Iterable[Image]]) -> Optional[str]:
    """Serialise images to a JSON column value, or None for no images."""
    if images is None:
        return None
    return json.dumps([image.to_dict() for image in images])


def decode_images(value: Any) -> list[Image]:
    """Read a JSON column value into a list of images."""
    return [Image.from_dict(item) for item in _load(value)]


def encode_json(value: Any) -> Optional[str]:
    """Serialise a free-form JSON column value; None stays None."""
    if value is None:
        return None
    return json.dumps(value)


def decode_json(value: Any) -> Any:
    """Parse a free-form JSON column value."""
    return _load(value)


@dataclass
class Paging:
    page: int = 0
    limit: int = 0
    total: int = 0

    def fulfill(self) -> None:
        """Replace missing or invalid values with the defaults."""
        if self.page <= 0:
            self.page = 1
        if self.limit <= 0:
            self.limit = 50

    def to_dict(self) -> dict[str, int]:
        return {"page": self.page, "limit": self.limit, "total": self.total}


@dataclass
class SimpleUser(SQLModel):
    """The authenticated user attached to a request."""

    email: str = ""
    roles: Optional[RoleEnum] = field(default=None)

    @property
    def user_id(self) -> int:
        return self.id

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "status": self.status,
            "created_at": _format_time(self.created_at),
            "updated_at": _format_time(self.updated_at),
            "email": self.email,
            "roles": self.roles.value if self.roles is not None else None,
        }