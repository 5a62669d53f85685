"""Salted MD5 password hashing."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass


@dataclass(frozen=True)
class Md5Hash:
    """Hashes a password concatenated with its salt."""

    password: str
    salt: str

    def hash(self) -> str:
        return hashlib.md5((self.password + self.salt).encode("utf-8")).hexdigest()