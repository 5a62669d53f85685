import sqlite3

import pytest

from fooddlv.appctx import init_schema
from fooddlv.errors import AppError
from fooddlv.models import Image, Paging, decode_images
from fooddlv.notes_model import ListFilter, NoteCreate
from fooddlv.note_storage import NoteStore
from fooddlv.users import CreateUser, UserStore


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    init_schema(connection)
    yield connection
    connection.close()


@pytest.fixture
def store(conn):
    return NoteStore(conn)


def test_create_assigns_id_and_find_returns_note(store):
    data = NoteCreate(title="Groceries", content="milk")
    note_id = store.create(data)
    assert data.id == note_id
    note = store.find({"id": note_id})
    assert note.id == note_id
    assert note.title == "Groceries"
    assert note.content == "milk"
    assert note.status == 1
    assert note.user is None


def test_create_stores_images_as_json(store, conn):
    images = [Image(id=1, url="https://", width=100, height=100)]
    note_id = store.create(NoteCreate(title="t", images=images))
    raw = conn.execute("SELECT images FROM notes WHERE id = ?", (note_id,)).fetchone()[0]
    assert decode_images(raw) == images


def test_delete_sets_status_to_zero(store):
    note_id = store.create(NoteCreate(title="t"))
    store.delete(note_id)
    assert store.find({"id": note_id}).status == 0
    with pytest.raises(AppError) as info:
        store.find({"id": note_id, "status": 1})
    assert info.value.key == "DB_ERROR"


def test_find_missing_raises_db_error(store):
    with pytest.raises(AppError) as info:
        store.find({"id": 42})
    assert info.value.message == "something went wrong with DB"


def test_find_unknown_column_raises(store):
    with pytest.raises(AppError) as info:
        store.find({"nope": 1})
    assert info.value.key == "DB_ERROR"


def test_find_unknown_relation_raises(store):
    note_id = store.create(NoteCreate(title="t"))
    with pytest.raises(AppError):
        store.find({"id": note_id}, "Restaurant")


def test_find_preloads_user(store, conn):
    user_id = UserStore(conn).create(
        CreateUser(email="ann@example.com", first_name="Ann", last_name="Lee")
    )
    note_id = store.create(NoteCreate(title="t"))
    with conn:
        conn.execute("UPDATE notes SET user_id = ? WHERE id = ?", (user_id, note_id))
    note = store.find({"id": note_id}, "User")
    assert note.user_id == user_id
    assert note.user.id == user_id
    assert note.user.first_name == "Ann"
    assert note.user.last_name == "Lee"
    assert store.find({"id": note_id}).user is None


def test_list_pages_and_counts_active(store):
    ids = [store.create(NoteCreate(title=f"n{i}")) for i in range(3)]
    store.delete(ids[0])

    paging = Paging(page=1, limit=2)
    first = store.list(paging, ListFilter())
    assert paging.total == 2
    assert [note.id for note in first] == ids[:2]

    second_paging = Paging(page=2, limit=2)
    second = store.list(second_paging, None)
    assert [note.id for note in second] == ids[2:]
    assert second_paging.total == 2