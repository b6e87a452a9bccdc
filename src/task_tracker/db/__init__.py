"""Database related helpers."""

from __future__ import annotations

from .base import SQLModel
from .session import get_engine, get_session

__all__ = ["SQLModel", "get_engine", "get_session"]
