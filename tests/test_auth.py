import sqlite3

import pytest

from fooddlv.appctx import init_schema
from fooddlv.auth import LoginUser, RegisterRepo, RegisterUser
from fooddlv.errors import AppError
from fooddlv.hashing import Md5Hash
from fooddlv.models import RoleEnum
from fooddlv.users import RecordNotFoundError, UserStore

PASSWORD = "password"


@pytest.fixture
def store():
    connection = sqlite3.connect(":memory:")
    init_schema(connection)
    yield UserStore(connection)
    connection.close()


def test_validate_requires_email():
    password = PASSWORD
    with pytest.raises(ValueError, match="email can't not empty"):
        RegisterUser(password=password).validate()


def test_validate_requires_password():
    with pytest.raises(ValueError, match="password can't not empty"):
        RegisterUser(email="a@example.com").validate()


def test_to_create_user_uses_hasher():
    hasher = Md5Hash(PASSWORD, "abc")
    data = RegisterUser(email="a@example.com", password=PASSWORD, last_name="L", roles=RoleEnum.ADMIN)
    created = data.to_create_user(hasher)
    assert created.password == hasher.hash()
    assert created.salt == "abc"
    assert created.email == "a@example.com"
    assert created.last_name == "L"
    assert created.roles is RoleEnum.ADMIN


def test_register_stores_salted_hash(store):
    user_id = RegisterRepo(store).register(RegisterUser(email="a@example.com", password=PASSWORD))
    user = store.find_user_by_condition({"id": user_id})
    assert len(user.salt) == 50
    assert user.compare_password(Md5Hash(PASSWORD, user.salt))
    assert user.password != PASSWORD


def test_register_duplicate_email(store):
    repo = RegisterRepo(store)
    repo.register(RegisterUser(email="a@example.com", password=PASSWORD))
    with pytest.raises(AppError) as info:
        repo.register(RegisterUser(email="a@example.com", password=PASSWORD))
    assert info.value.key == "ErrUserAlreadyExistsUser"
    assert info.value.message == "User already exists user"


class _FailingStore:
    def find_user_by_condition(self, conditions):
        raise RecordNotFoundError("record not found")

    def create(self, data):
        raise RuntimeError("disk full")


def test_register_create_failure():
    with pytest.raises(AppError) as info:
        RegisterRepo(_FailingStore()).register(RegisterUser(email="a@example.com", password=PASSWORD))
    assert info.value.key == "ErrCannotCreateUser"
    assert str(info.value) == "disk full"


def test_login_user_table():
    login = LoginUser(email="a@example.com", password=PASSWORD)
    assert login.table_name == "users"
    assert login.email == "a@example.com"