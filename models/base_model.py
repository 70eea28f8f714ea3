#!/usr/bin/env python3
"""
Shared SQLAlchemy base and mixin for the accounts API.

- UUID primary key (String(36)) with defaults
- created_at / updated_at timestamps
- save() and delete() that use DBStorage
"""

from __future__ import annotations

from datetime import datetime, timezone
import uuid

# Importing 'models' gives access to the global 'storage' instance (DBStorage)
import models

from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

# Declarative base for all models
Base = declarative_base()


def _uuid_str() -> str:
    """Return a canonical UUIDv4 string (36 chars, with hyphens)."""
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BaseModel:
    """
    Base mixin for all persistent models: id, created_at, updated_at and
    save()/delete() wired to DBStorage.
    """

    id = Column(String(36), primary_key=True, default=_uuid_str, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), default=_utcnow, nullable=False)
    updated_at = Column(
        DateTime(timezone=True), server_default=func.now(), default=_utcnow, onupdate=_utcnow, nullable=False
    )

    def __init__(self, *args, **kwargs):
        for key, value in kwargs.items():
            if key != "__class__":
                setattr(self, key, value)
        # Ensure an id exists if caller passed none
        if getattr(self, "id", None) is None:
            self.id = _uuid_str()

    def save(self):
        """Persist the instance and commit."""
        self.updated_at = _utcnow()
        models.storage.new(self)
        models.storage.save()

    def delete(self):
        """Hard delete; the caller decides when to commit."""
        models.storage.delete(self)
