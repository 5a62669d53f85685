"""Registration and login payloads, and the registration flow."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from fooddlv.errors import err_cannot_create_entity, err_entity_existed
from fooddlv.hashing import Md5Hash
from fooddlv.models import RoleEnum, SQLModel
from fooddlv.randx import gen_salt
from fooddlv.users import TABLE_NAME, CreateUser, Hasher, RecordNotFoundError, UserStore

ENTITY_NAME = "User"
SALT_LENGTH = 50


@dataclass
class RegisterUser(SQLModel):
    """What a client sends to register."""

    email: str = ""
    password: str = ""
    last_name: str = ""
    first_name: str = ""
    phone: Optional[str] = None
    roles: Optional[RoleEnum] = None
    avatar: Any = None

    table_name = TABLE_NAME

    def validate(self) -> None:
        """Raise ValueError if the e-mail or password is missing."""
        if not self.email:
            raise ValueError("email can't not empty")
        if not self.password:
            raise ValueError("password can't not empty")

    def to_create_user(self, hasher: Hasher) -> CreateUser:
        return CreateUser(
            email=self.email,
            password=hasher.hash(),
            last_name=self.last_name,
            first_name=self.first_name,
            phone=self.phone,
            roles=self.roles,
            salt=hasher.salt,
            avatar=self.avatar,
        )


@dataclass
class LoginUser:
    email: str = ""
    password: str = ""

    table_name = TABLE_NAME


class RegisterRepo:
    """Registers new users with a freshly salted password hash."""

    def __init__(self, store: UserStore) -> None:
        self._store = store

    def register(self, data: RegisterUser) -> int:
        """Create the user and return its id; the e-mail must be unused."""
        try:
            self._store.find_user_by_condition({"email": data.email})
        except RecordNotFoundError:
            pass
        else:
            raise err_entity_existed(ENTITY_NAME, None)

        hasher = Md5Hash(data.password, gen_salt(SALT_LENGTH))
        try:
            return self._store.create(data.to_create_user(hasher))
        except Exception as exc:
            raise err_cannot_create_entity(ENTITY_NAME, exc) from exc