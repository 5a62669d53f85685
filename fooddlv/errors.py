"""Application errors and JSON response envelopes."""

from __future__ import annotations

from dataclasses import dataclass
from http import HTTPStatus
from typing import Any, Optional


class AppError(Exception):
    """An error carrying an HTTP status, a user message, a log line and a key."""

    def __init__(
        self,
        root_err: Optional[BaseException],
        message: str,
        log: str = "",
        key: str = "",
        status_code: int = HTTPStatus.BAD_REQUEST,
    ) -> None:
        self.status_code = int(status_code)
        self.root_err = root_err
        self.message = message
        self.log = log
        self.key = key
        super().__init__(message)

    def root_error(self) -> Optional[BaseException]:
        """Follow nested application errors down to the original cause."""
        if isinstance(self.root_err, AppError):
            return self.root_err.root_error()
        return self.root_err

    def __str__(self) -> str:
        root = self.root_error()
        return str(root) if root is not None else self.message

    def to_dict(self) -> dict[str, Any]:
        return {
            "status_code": self.status_code,
            "message": self.message,
            "log": self.log,
            "error_key": self.key,
        }


def new_error_response(
    root: Optional[BaseException], message: str, log: str, key: str
) -> AppError:
    return AppError(root, message, log, key, HTTPStatus.BAD_REQUEST)


def new_unauthorized(root: Optional[BaseException], message: str, key: str) -> AppError:
    return AppError(root, message, "", key, HTTPStatus.UNAUTHORIZED)


def new_custom_error(root: Optional[BaseException], message: str, key: str) -> AppError:
    if root is not None:
        return new_error_response(root, message, str(root), key)
    return new_error_response(Exception(message), message, message, key)


def err_db(err: BaseException) -> AppError:
    return new_error_response(err, "something went wrong with DB", str(err), "DB_ERROR")


def err_invalid_request(err: BaseException) -> AppError:
    return new_error_response(err, "invalid request", str(err), "ErrInvalidRequest")


def err_internal(err: BaseException) -> AppError:
    return new_error_response(err, "internal error", str(err), "ErrInternal")


def err_cannot_list_entity(entity: str, err: Optional[BaseException]) -> AppError:
    return new_custom_error(err, f"Cannot list {entity.lower()}", f"ErrCannotList{entity}")


def err_cannot_delete_entity(entity: str, err: Optional[BaseException]) -> AppError:
    return new_custom_error(err, f"Cannot delete {entity.lower()}", f"ErrCannotDelete{entity}")


def err_cannot_get_entity(entity: str, err: Optional[BaseException]) -> AppError:
    return new_custom_error(err, f"Cannot get {entity.lower()}", f"ErrCannotGet{entity}")


def err_entity_existed(entity: str, err: Optional[BaseException]) -> AppError:
    return new_custom_error(
        err, f"User already exists {entity.lower()}", f"ErrUserAlreadyExists{entity}"
    )


def err_cannot_create_entity(entity: str, err: Optional[BaseException]) -> AppError:
    return new_custom_error(err, f"Cannot Create {entity.lower()}", f"ErrCannotCreate{entity}")


def _jsonable(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if isinstance(value, (list, tuple)):
        return [_jsonable(item) for item in value]
    return value


@dataclass
class SuccessResponse:
    """The envelope wrapped around every successful response body."""

    data: Any
    paging: Any = None
    filter: Any = None

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {"data": _jsonable(self.data)}
        if self.paging is not None:
            body["paging"] = _jsonable(self.paging)
        if self.filter is not None:
            body["filter"] = _jsonable(self.filter)
        return body


def simple_success_response(data: Any) -> SuccessResponse:
    return new_success_response(data, None, None)


def new_success_response(data: Any, paging: Any, filter: Any) -> SuccessResponse:
    return SuccessResponse(data=data, paging=paging, filter=filter)