import sqlite3

import pytest

from fooddlv.appctx import init_schema
from fooddlv.errors import AppError
from fooddlv.hashing import Md5Hash
from fooddlv.models import RoleEnum
from fooddlv.users import (
    CreateUser,
    FindUserRepo,
    RecordNotFoundError,
    User,
    UserStore,
)

PASSWORD = "password"


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    init_schema(connection)
    yield connection
    connection.close()


def test_compare_password_matches_hash():
    hasher = Md5Hash(PASSWORD, "salt")
    user = User(password=hasher.hash(), salt="salt")
    assert user.compare_password(hasher) is True
    assert user.compare_password(Md5Hash("other", "salt")) is False


def test_is_active_depends_on_status():
    assert User(status=1).is_active() is True
    assert User(status=0).is_active() is False


def test_to_simple_user_copies_identity():
    user = User(id=7, email="a@example.com", roles=RoleEnum.ADMIN, password=PASSWORD)
    simple = user.to_simple_user()
    assert (simple.id, simple.email, simple.roles) == (7, "a@example.com", RoleEnum.ADMIN)


def test_to_dict_hides_secrets_and_empty_avatar():
    body = User(id=3, email="a@example.com", password=PASSWORD, salt="s").to_dict()
    assert "password" not in body
    assert "salt" not in body
    assert "roles" not in body
    assert "avatar" not in body
    assert body["email"] == "a@example.com"


def test_to_dict_includes_avatar_when_set():
    body = User(avatar={"url": "x"}).to_dict()
    assert body["avatar"] == {"url": "x"}


def test_create_then_find_round_trip(conn):
    store = UserStore(conn)
    data = CreateUser(email="a@example.com", password=PASSWORD, first_name="Ann", salt="s")
    user_id = store.create(data)
    assert data.id == user_id
    found = store.find_user_by_condition({"email": "a@example.com"})
    assert found.id == user_id
    assert found.password == PASSWORD
    assert found.first_name == "Ann"
    assert found.roles is RoleEnum.USER
    assert found.is_active()
    assert found.created_at is not None


def test_avatar_round_trip(conn):
    store = UserStore(conn)
    user_id = store.create(CreateUser(email="b@example.com", avatar={"url": "u", "width": 1}))
    found = store.find_user_by_condition({"id": user_id})
    assert found.avatar == {"url": "u", "width": 1}


def test_find_missing_raises_not_found(conn):
    with pytest.raises(RecordNotFoundError):
        UserStore(conn).find_user_by_condition({"email": "none@example.com"})


def test_find_unknown_column_is_db_error(conn):
    with pytest.raises(AppError) as info:
        UserStore(conn).find_user_by_condition({"nope": 1})
    assert info.value.key == "DB_ERROR"


def test_create_on_closed_connection_is_db_error():
    connection = sqlite3.connect(":memory:")
    init_schema(connection)
    connection.close()
    with pytest.raises(AppError) as info:
        UserStore(connection).create(CreateUser(email="c@example.com"))
    assert info.value.message == "something went wrong with DB"


def test_find_user_repo_wraps_errors(conn):
    repo = FindUserRepo(UserStore(conn))
    with pytest.raises(AppError) as info:
        repo.find_user_by_condition({"id": 99})
    assert info.value.key == "ErrCannotListUser"
    assert info.value.message == "Cannot list user"


def test_find_user_repo_returns_user(conn):
    store = UserStore(conn)
    user_id = store.create(CreateUser(email="d@example.com"))
    assert FindUserRepo(store).find_user_by_condition({"id": user_id}).email == "d@example.com"