"""Food delivery backend on Flask and SQLite: notes, users, uploads, pub/sub and retrying jobs."""

__version__ = "0.1.0"

__all__ = ["__version__"]