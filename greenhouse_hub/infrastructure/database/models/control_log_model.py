"""
SQLAlchemy ORM model for the control log.
"""
from typing import Any, Optional
from uuid import UUID

from sqlalchemy import JSON, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel
from ....domain.entities.command import CommandState
from ....domain.entities.control_log import ControlLogEntry


class ControlLogModel(BaseModel):
    """Append-only record of command outcomes per greenhouse."""

    __tablename__ = "control_logs"

    greenhouse_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("greenhouses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    method: Mapped[str] = mapped_column(String(100), nullable=False)
    control_key: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    params: Mapped[Optional[Any]] = mapped_column(JSON, nullable=True)
    outcome: Mapped[str] = mapped_column(String(20), nullable=False)
    error_message: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    device_name: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def to_domain(self) -> ControlLogEntry:
        return ControlLogEntry(
            id=self.id,
            greenhouse_id=self.greenhouse_id,
            method=self.method,
            params=self.params,
            outcome=CommandState(self.outcome),
            error_message=self.error_message,
            device_name=self.device_name,
            created_at=self.created_at,
        )

    @classmethod
    def from_domain(cls, entry: ControlLogEntry) -> "ControlLogModel":
        return cls(
            id=entry.id,
            greenhouse_id=entry.greenhouse_id,
            method=entry.method,
            control_key=entry.control_key,
            params=entry.params,
            outcome=entry.outcome.value,
            error_message=entry.error_message,
            device_name=entry.device_name,
            created_at=entry.created_at,
        )
