"""Options for token providers and for generating tokens."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta
from typing import Callable, Union

DEFAULT_EXPIRY = timedelta(minutes=15)


@dataclass
class Options:
    secret_key: bytes = b""


@dataclass
class GenerateOptions:
    expiry: timedelta = timedelta(0)


Option = Callable[[Options], None]
GenerateOption = Callable[[GenerateOptions], None]


def with_secret_key(key: Union[bytes, str]) -> Option:
    value = key.encode("utf-8") if isinstance(key, str) else bytes(key)

    def apply(options: Options) -> None:
        options.secret_key = value

    return apply


def new_options(*args: Option) -> Options:
    """Build provider options; later options win."""
    options = Options()
    for option in args:
        option(options)
    return options


def with_expiry(duration: timedelta) -> GenerateOption:
    def apply(options: GenerateOptions) -> None:
        options.expiry = duration

    return apply


def new_generate_options(*args: GenerateOption) -> GenerateOptions:
    """Build generation options; a zero expiry becomes fifteen minutes."""
    options = GenerateOptions()
    for option in args:
        option(options)
    if not options.expiry:
        options.expiry = DEFAULT_EXPIRY
    return options