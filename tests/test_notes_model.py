import pytest

from fooddlv.errors import AppError
from fooddlv.models import RoleEnum
from fooddlv.notes_model import ListFilter, Note, NoteCreate, NoteUpdate, NoteUser


def test_validate_trims_fields():
    note = NoteCreate(title="  hello  ", content="\tbody\n")
    note.validate()
    assert note.title == "hello"
    assert note.content == "body"


def test_validate_rejects_blank_title():
    with pytest.raises(AppError) as info:
        NoteCreate(title="   ", content="x").validate()
    assert info.value.key == "ErrNoteTitleEmpty"
    assert info.value.message == "note title cannot not be empty"
    assert str(info.value) == "ErrNoteTitleEmpty"


def test_get_image_ids():
    assert NoteCreate(title="t", image_ids=[1, 2]).get_image_ids() == [1, 2]


def test_note_user_hides_roles_and_empty_avatar():
    body = NoteUser(id=2, first_name="Ann", roles=RoleEnum.ADMIN).to_dict()
    assert "roles" not in body
    assert "avatar" not in body
    assert body["first_name"] == "Ann"


def test_note_to_dict_nests_user():
    note = Note(id=1, title="t", content="c", user_id=2, user=NoteUser(id=2, last_name="L"))
    body = note.to_dict()
    assert body["user"]["last_name"] == "L"
    assert body["title"] == "t"
    assert body["has_liked"] is False
    assert body["liked_count"] == 0


def test_note_to_dict_without_user():
    assert Note(title="t").to_dict()["user"] is None


def test_table_names():
    assert Note(title="t").table_name == "notes"
    assert NoteCreate(title="t").table_name == "notes"
    assert NoteUpdate(title="t").table_name == "notes"
    assert NoteUser(id=1).table_name == "users"


def test_note_update_defaults_and_empty_filter():
    update = NoteUpdate(title="x")
    assert (update.title, update.content) == ("x", None)
    assert ListFilter().to_dict() == {}