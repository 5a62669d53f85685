"""Cryptographically random strings drawn from fixed alphabets."""

from __future__ import annotations

import secrets
from typing import Sequence

ALPHA_NUM = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
ALPHA = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ"
ALPHA_LOWER_NUM = "abcdefghijklmnopqrstuvwxyz0123456789"
ALPHA_UPPER_NUM = "ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"
ALPHA_LOWER = "abcdefghijklmnopqrstuvwxyz"
ALPHA_UPPER = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
NUMERIC = "0123456789"

DEFAULT_SALT_LENGTH = 50


def rune_sequence(length: int, allowed: Sequence[str]) -> list[str]:
    """Return ``length`` characters picked at random from ``allowed``."""
    if length < 0:
        raise ValueError("length must not be negative")
    if length and not allowed:
        raise ValueError("allowed characters must not be empty")
    return [secrets.choice(allowed) for _ in range(length)]


def must_string(length: int, allowed: Sequence[str]) -> str:
    return "".join(rune_sequence(length, allowed))


def gen_salt(length: int) -> str:
    """Return an alphanumeric salt; a negative length means the default of 50."""
    if length < 0:
        length = DEFAULT_SALT_LENGTH
    return must_string(length, ALPHA_NUM)