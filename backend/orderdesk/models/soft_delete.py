from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Union

from sqlalchemy.orm import declared_attr

from ..extensions import db
from orderdesk.time_utils import utcnow


@dataclass(frozen=True)
class Active:
    """Row is live."""


@dataclass(frozen=True)
class Deleted:
    """Row was soft-deleted at `at` (UTC-naive)."""
    at: datetime


DeletionState = Union[Active, Deleted]


class SoftDeleteMixin:
    """
    Soft delete through a nullable `deleted_at` column.

    Callers branch on `deletion` (Active | Deleted) instead of the raw column.
    """

    @declared_attr
    def deleted_at(cls):
        return db.Column(db.DateTime(timezone=True), nullable=True, index=True)

    @property
    def deletion(self) -> DeletionState:
        if self.deleted_at is None:
            return Active()
        return Deleted(at=self.deleted_at)

    @property
    def is_deleted(self) -> bool:
        return isinstance(self.deletion, Deleted)

    def soft_delete(self, at: datetime | None = None) -> None:
        self.deleted_at = at or utcnow()

    @classmethod
    def live(cls):
        """Filter clause selecting rows that are not soft-deleted."""
        return cls.deleted_at.is_(None)
