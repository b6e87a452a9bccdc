"""Metadata registry shared by every table model."""

from __future__ import annotations

from sqlmodel import SQLModel

# Importing the models registers their tables on ``SQLModel.metadata``.
from .. import models  # noqa: F401

__all__ = ["SQLModel"]
