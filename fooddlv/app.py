"""The HTTP application: notes, registration, image upload and static files."""

from __future__ import annotations

import argparse
import json
import logging
import os
import re
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional, Protocol

from flask import Flask, Response, current_app, jsonify, request, send_from_directory

from fooddlv.appctx import MEMORY, AppContext
from fooddlv.auth import RegisterRepo, RegisterUser
from fooddlv.consumers import ConsumerEngine
from fooddlv.errors import (
    AppError,
    err_internal,
    err_invalid_request,
    new_success_response,
    simple_success_response,
)
from fooddlv.images import CreateImageRepo, ImageStore
from fooddlv.models import Image, Paging, RoleEnum
from fooddlv.note_repo import CreateNoteRepo, DeleteNoteRepo, ListNoteRepo
from fooddlv.note_storage import NoteStore
from fooddlv.notes_model import NoteCreate
from fooddlv.users import UserStore

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png", ".ico", ".svg", ".bmp", ".gif")
FILE_BASE_URL = "http://localhost:8080/v1/file"
UPLOADED_IMAGE_SIZE = 100
DEFAULT_PORT = 8080

_INTEGER = re.compile(r"[+-]?\d+")


class FakeImageStore:
    """An image source that always answers with the same two images."""

    def get_images(self, ids: Iterable[int]) -> list[Image]:
        if not list(ids):
            raise ValueError("image ids can not be empty")
        return [
            Image(id=1, url="https://", width=100, height=100),
            Image(id=2, url="https://", width=200, height=200),
        ]


class PermissionStore(Protocol):
    def get_permission(self) -> list[Any]: ...


def _check_permission(resource_name: str, store: Optional[PermissionStore] = None):
    """Decorator guarding a view by permission; every request is let through."""

    def decorate(view):
        return view

    return decorate


def is_image(ext_name: str) -> bool:
    """Tell whether an extension, dot included, names a supported image type."""
    return ext_name in SUPPORTED_IMAGE_EXTENSIONS


def _extension(filename: str) -> str:
    name = filename.rsplit("/", 1)[-1]
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def _base_name(filename: str) -> str:
    return filename.replace("\\", "/").rsplit("/", 1)[-1]


def _error(err: AppError) -> tuple[Response, int]:
    return jsonify(err.to_dict()), err.status_code


def _text(body: str, status: int) -> Response:
    return Response(body, status=status, mimetype="text/plain")


def _is_http_exception(err: Exception) -> bool:
    return isinstance(getattr(err, "code", None), int) and callable(
        getattr(err, "get_response", None)
    )


def _payload() -> dict[str, Any]:
    """Bind the request body; an empty body binds to nothing."""
    if request.is_json:
        raw = request.get_data(as_text=True)
        if not raw.strip():
            return {}
        data = json.loads(raw)
        if not isinstance(data, dict):
            raise TypeError("request body must be a JSON object")
        return data
    return request.form.to_dict()


def _string(payload: dict[str, Any], key: str) -> str:
    value = payload.get(key, "")
    if value is None:
        return ""
    if not isinstance(value, str):
        raise TypeError(f"{key} must be a string")
    return value


def _optional_int(value: Any, name: str) -> int:
    if value is None or value == "":
        return 0
    if isinstance(value, bool):
        raise TypeError(f"{name} must be an integer")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and _INTEGER.fullmatch(value):
        return int(value)
    raise ValueError(f"{name} must be an integer")


def _note_create(payload: dict[str, Any]) -> NoteCreate:
    image = payload.get("image")
    images = payload.get("images")
    image_ids = payload.get("image_ids") or []
    if not isinstance(image_ids, list):
        raise TypeError("image_ids must be a list")
    return NoteCreate(
        id=_optional_int(payload.get("id"), "id"),
        title=_string(payload, "title"),
        content=_string(payload, "content"),
        image=Image.from_dict(image) if isinstance(image, dict) else None,
        image_ids=[_optional_int(item, "image_ids") for item in image_ids],
        images=[Image.from_dict(item) for item in images] if isinstance(images, list) else None,
    )


def _register_user(payload: dict[str, Any]) -> RegisterUser:
    role = payload.get("role")
    phone = payload.get("phone")
    if phone is not None and not isinstance(phone, str):
        raise TypeError("phone must be a string")
    return RegisterUser(
        email=_string(payload, "email"),
        password=_string(payload, "password"),
        last_name=_string(payload, "last_name"),
        first_name=_string(payload, "first_name"),
        phone=phone,
        roles=RoleEnum(role) if role else None,
        avatar=payload.get("avatar"),
    )


def create_app(app_ctx: AppContext) -> Flask:
    """Build the application around a shared context."""
    app = Flask(__name__)
    app.config.setdefault("PUBLIC_DIR", os.path.join(os.getcwd(), "public"))

    @contextmanager
    def connection() -> Iterator[Any]:
        conn = app_ctx.connect()
        try:
            yield conn
        finally:
            if app_ctx.database != MEMORY:
                conn.close()

    @app.errorhandler(AppError)
    def handle_app_error(err: AppError):
        logger.error("request failed: %s", err)
        return _error(err)

    @app.errorhandler(Exception)
    def handle_unexpected(err: Exception):
        if _is_http_exception(err):
            return err
        logger.exception("request failed")
        return _error(err_internal(err))

    @app.get("/ping")
    def ping():
        return jsonify({"message": "pong"})

    @app.get("/v1/notes")
    def list_notes():
        paging = Paging(
            page=_optional_int(request.args.get("page"), "page"),
            limit=_optional_int(request.args.get("limit"), "limit"),
        )
        paging.fulfill()
        with connection() as conn:
            try:
                result = ListNoteRepo(NoteStore(conn)).list_note(paging, None)
            except AppError as err:
                return _error(err)
        return jsonify(new_success_response(result, paging, None).to_dict())

    @app.post("/v1/notes")
    def create_note():
        data = _note_create(_payload())
        with connection() as conn:
            repo = CreateNoteRepo(FakeImageStore(), NoteStore(conn), app_ctx.pubsub)
            repo.create_note(data)
        return jsonify(simple_success_response(data.id).to_dict())

    @app.delete("/v1/notes/<note_id>")
    def delete_note(note_id: str):
        if not _INTEGER.fullmatch(note_id):
            err = ValueError(f'strconv.Atoi: parsing "{note_id}": invalid syntax')
            return _error(err_invalid_request(err))
        with connection() as conn:
            try:
                DeleteNoteRepo(NoteStore(conn)).delete_note(int(note_id))
            except AppError as err:
                return _error(err)
        return jsonify(simple_success_response(True).to_dict())

    @app.get("/v1/notes/<note_id>")
    def hello_note(note_id: str):
        return _text(f"Hello {note_id}", 200)

    @app.post("/v1/auth/register")
    def register():
        try:
            data = _register_user(_payload())
            data.validate()
        except (TypeError, ValueError) as exc:
            return _error(err_invalid_request(exc))
        with connection() as conn:
            try:
                user_id = RegisterRepo(UserStore(conn)).register(data)
            except AppError as err:
                return _error(err)
        return jsonify(simple_success_response(user_id).to_dict())

    @app.get("/v1/file/<path:filename>")
    def static_file(filename: str):
        return send_from_directory(current_app.config["PUBLIC_DIR"], filename)

    @app.post("/v1/upload")
    def upload_images():
        if request.mimetype != "multipart/form-data":
            return _text(
                "get form err: request Content-Type isn't multipart/form-data", 400
            )
        public_dir = current_app.config["PUBLIC_DIR"]
        files = request.files.getlist("files")
        images = [Image() for _ in files]
        for image, upload in zip(images, files):
            filename = _base_name(upload.filename or "")
            if not is_image(_extension(filename).lower()):
                return jsonify({"message": "unsuport file type"}), 400
            name = filename.strip()
            target = os.path.join(public_dir, name)
            if os.path.isfile(target):
                continue
            try:
                upload.save(target)
            except OSError as exc:
                return _text(f"upload file err: {exc}", 400)
            image.url = f"{FILE_BASE_URL}/{name}"
            image.width = UPLOADED_IMAGE_SIZE
            image.height = UPLOADED_IMAGE_SIZE

        with connection() as conn:
            try:
                CreateImageRepo(ImageStore(conn)).create(images)
            except AppError:
                logger.exception("cannot store uploaded images")

        ids = [image.id for image in images] if images else None
        return jsonify(simple_success_response({"ids": ids}).to_dict())

    return app


def main(argv: Optional[list[str]] = None) -> int:
    """Start the consumers and serve the application."""
    parser = argparse.ArgumentParser(prog="fooddlv", description="Food delivery API server.")
    parser.add_argument("--host", default="0.0.0.0")
    parser.add_argument("--port", type=int, default=int(os.environ.get("PORT", DEFAULT_PORT)))
    parser.add_argument("--database", default=os.environ.get("DBConnStr", "fooddlv.db"))
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO)
    app_ctx = AppContext(args.database)
    engine = ConsumerEngine(app_ctx)
    engine.start()
    try:
        create_app(app_ctx).run(host=args.host, port=args.port)
    finally:
        engine.stop()
        app_ctx.close()
    return 0