"""Users: the stored model, the creation payload, storage and lookup."""

from __future__ import annotations

import enum
import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Optional, Protocol

from fooddlv.errors import AppError, err_cannot_list_entity, err_db
from fooddlv.models import RoleEnum, SimpleUser, SQLModel, decode_json, encode_json

logger = logging.getLogger(__name__)

ENTITY_NAME = "User"
TABLE_NAME = "users"

_COLUMNS = frozenset(
    {
        "id",
        "status",
        "created_at",
        "updated_at",
        "email",
        "password",
        "last_name",
        "first_name",
        "phone",
        "roles",
        "salt",
        "avatar",
    }
)


class RecordNotFoundError(LookupError):
    """Raised when a lookup matches no stored record."""


class Hasher(Protocol):
    salt: str

    def hash(self) -> str: ...


def _parse_time(value: Any) -> Optional[datetime]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(str(value))


def _sql_value(value: Any) -> Any:
    return value.value if isinstance(value, enum.Enum) else value


@dataclass
class User(SQLModel):
    email: str = ""
    password: str = ""
    last_name: str = ""
    first_name: str = ""
    phone: str = ""
    roles: Optional[RoleEnum] = None
    salt: str = ""
    avatar: Any = None

    table_name = TABLE_NAME

    def compare_password(self, hasher: Hasher) -> bool:
        """Tell whether the hasher reproduces the stored password hash."""
        return self.password == hasher.hash()

    def is_active(self) -> bool:
        return self.status == 1

    def to_simple_user(self) -> SimpleUser:
        return SimpleUser(id=self.id, email=self.email, roles=self.roles)

    def to_dict(self) -> dict[str, Any]:
        """Public JSON view; password, salt and roles are never exposed."""
        body: dict[str, Any] = {
            "id": self.id,
            "status": self.status,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "email": self.email,
            "last_name": self.last_name,
            "first_name": self.first_name,
            "phone": self.phone,
        }
        if self.avatar is not None:
            body["avatar"] = self.avatar
        return body


@dataclass
class CreateUser(SQLModel):
    """The record written when a user registers."""

    email: str = ""
    password: str = ""
    last_name: str = ""
    first_name: str = ""
    phone: Optional[str] = None
    roles: Optional[RoleEnum] = None
    salt: str = ""
    avatar: Any = None

    table_name = TABLE_NAME


def _user_from_row(row: Mapping[str, Any]) -> User:
    return User(
        id=row["id"],
        status=row["status"],
        created_at=_parse_time(row["created_at"]),
        updated_at=_parse_time(row["updated_at"]),
        email=row["email"] or "",
        password=row["password"] or "",
        last_name=row["last_name"] or "",
        first_name=row["first_name"] or "",
        phone=row["phone"] or "",
        roles=RoleEnum(row["roles"]) if row["roles"] else None,
        salt=row["salt"] or "",
        avatar=decode_json(row["avatar"]) if row["avatar"] is not None else None,
    )


class UserStore:
    """Reads and writes the users table."""

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    def create(self, data: CreateUser) -> int:
        """Insert the user in a transaction and return its new id."""
        logger.info("create user data %s", data)
        try:
            with self._conn:
                cursor = self._conn.execute(
                    f"INSERT INTO {TABLE_NAME} "
                    "(status, email, password, last_name, first_name, phone, roles, salt, avatar) "
                    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)",
                    (
                        data.status,
                        data.email,
                        data.password,
                        data.last_name,
                        data.first_name,
                        data.phone,
                        (data.roles or RoleEnum.USER).value,
                        data.salt,
                        encode_json(data.avatar),
                    ),
                )
        except sqlite3.Error as exc:
            raise err_db(exc) from exc
        data.id = int(cursor.lastrowid)
        logger.info("after create user data %s", data)
        return data.id

    def find_user_by_condition(self, conditions: Mapping[str, Any]) -> User:
        """Return the first user matching every condition.

        Raises RecordNotFoundError when nothing matches, AppError on a database error.
        """
        unknown = set(conditions) - _COLUMNS
        if unknown:
            raise err_db(ValueError(f"unknown column: {', '.join(sorted(unknown))}"))
        query = f"SELECT * FROM {TABLE_NAME}"
        if conditions:
            query += " WHERE " + " AND ".join(f"{column} = ?" for column in conditions)
        query += " ORDER BY id LIMIT 1"
        try:
            cursor = self._conn.execute(query, [_sql_value(v) for v in conditions.values()])
            row = cursor.fetchone()
            names = [description[0] for description in cursor.description]
        except sqlite3.Error as exc:
            raise err_db(exc) from exc
        if row is None:
            raise RecordNotFoundError("record not found")
        return _user_from_row(dict(zip(names, row)))


class FindUserRepo:
    """Looks users up, reporting every failure as an application error."""

    def __init__(self, store: UserStore) -> None:
        self._store = store

    def find_user_by_condition(self, conditions: Mapping[str, Any]) -> User:
        try:
            return self._store.find_user_by_condition(conditions)
        except (RecordNotFoundError, AppError) as exc:
            raise err_cannot_list_entity(ENTITY_NAME, exc) from exc