"""
SQLAlchemy ORM model for greenhouses (monitored controller devices).
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel
from ....domain.entities.device_status import GreenhouseStatus, MonitoredDevice
from ....domain.entities.session import DeviceTarget


class GreenhouseModel(BaseModel):
    """SQLAlchemy model for greenhouses."""

    __tablename__ = "greenhouses"
    __table_args__ = (
        UniqueConstraint("project_id", "gh_key", name="uq_greenhouses_project_id_gh_key"),
        CheckConstraint("status IN ('ready', 'developing')", name="status"),
    )

    project_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    gh_key: Mapped[str] = mapped_column(String(100), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=GreenhouseStatus.DEVELOPING.value, nullable=False)

    # ThingsBoard device id; greenhouses without one are not monitored
    tb_device_id: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    # Reachability as last observed by the device monitor
    device_status: Mapped[Optional[str]] = mapped_column(String(20), nullable=True)
    last_online_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    project: Mapped["ProjectModel"] = relationship(  # noqa: F821
        "ProjectModel",
        back_populates="greenhouses",
    )

    def to_domain(self, tenant: str) -> MonitoredDevice:
        """Convert to domain entity."""
        return MonitoredDevice(
            id=self.id,
            target=DeviceTarget(
                tenant=tenant,
                device_id=self.tb_device_id,
                name=self.name,
            ),
            name=self.name,
            status=GreenhouseStatus(self.status),
        )
