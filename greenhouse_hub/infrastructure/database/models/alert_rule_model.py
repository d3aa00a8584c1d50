"""
SQLAlchemy ORM model for alert rules.
"""
from datetime import datetime
from typing import Optional
from uuid import UUID

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum as SQLEnum,
    Float,
    ForeignKey,
    Integer,
    String,
)
from sqlalchemy.dialects.postgresql import UUID as PGUUID
from sqlalchemy.orm import Mapped, mapped_column

from .base import BaseModel
from ....domain.entities.alert_rule import AlertRule, AlertSeverity, ConditionType
from ....domain.entities.session import DeviceTarget


class AlertRuleModel(BaseModel):
    """SQLAlchemy model for alert rules."""

    __tablename__ = "alert_rules"
    __table_args__ = (
        CheckConstraint("cooldown_seconds >= 0", name="cooldown_seconds"),
    )

    greenhouse_id: Mapped[UUID] = mapped_column(
        PGUUID(as_uuid=True),
        ForeignKey("greenhouses.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    sensor_key: Mapped[str] = mapped_column(String(100), nullable=False)

    condition_type: Mapped[ConditionType] = mapped_column(
        SQLEnum(ConditionType, name="condition_type", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    threshold_value: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    threshold_min: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    threshold_max: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    severity: Mapped[AlertSeverity] = mapped_column(
        SQLEnum(AlertSeverity, name="alert_severity", values_callable=lambda e: [m.value for m in e]),
        default=AlertSeverity.WARNING,
        nullable=False,
    )

    cooldown_seconds: Mapped[int] = mapped_column(Integer, default=1800, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    last_triggered_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def to_domain(
        self,
        target: Optional[DeviceTarget] = None,
        device_name: Optional[str] = None,
    ) -> AlertRule:
        """Convert to domain entity."""
        return AlertRule(
            id=self.id,
            device_id=self.greenhouse_id,
            name=self.name,
            sensor_key=self.sensor_key,
            condition_type=ConditionType(self.condition_type),
            threshold_value=self.threshold_value,
            threshold_min=self.threshold_min,
            threshold_max=self.threshold_max,
            severity=AlertSeverity(self.severity),
            cooldown_seconds=self.cooldown_seconds,
            is_active=self.is_active,
            last_triggered_at=self.last_triggered_at,
            target=target,
            device_name=device_name,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
