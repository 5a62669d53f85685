import sqlite3

import pytest

from fooddlv.appctx import init_schema
from fooddlv.errors import AppError
from fooddlv.images import CreateImageRepo, ImageStore
from fooddlv.models import Image


@pytest.fixture
def conn():
    connection = sqlite3.connect(":memory:")
    init_schema(connection)
    yield connection
    connection.close()


def test_create_assigns_ids(conn):
    images = [Image(url="a.png", width=100, height=100), Image(url="b.png", width=200, height=200)]
    ids = ImageStore(conn).create(images)
    assert ids == [image.id for image in images]
    assert len(set(ids)) == 2
    assert all(i > 0 for i in ids)


def test_get_images_round_trip(conn):
    store = ImageStore(conn)
    images = [Image(url="a.png", width=100, height=100), Image(url="b.png", width=200, height=200)]
    ids = store.create(images)
    assert store.get_images(ids) == images


def test_get_images_returns_only_requested(conn):
    store = ImageStore(conn)
    images = [Image(url=f"{n}.png") for n in range(3)]
    ids = store.create(images)
    got = store.get_images([ids[1]])
    assert [image.url for image in got] == ["1.png"]


def test_get_images_empty_ids(conn):
    store = ImageStore(conn)
    store.create([Image(url="a.png")])
    assert store.get_images([]) == []


def test_get_images_on_closed_connection_is_db_error():
    connection = sqlite3.connect(":memory:")
    init_schema(connection)
    connection.close()
    with pytest.raises(AppError) as info:
        ImageStore(connection).get_images([1])
    assert info.value.key == "DB_ERROR"


def test_repo_delegates_to_store(conn):
    store = ImageStore(conn)
    image = Image(url="c.gif", width=5, height=6)
    ids = CreateImageRepo(store).create([image])
    assert store.get_images(ids) == [image]