"""
SQLAlchemy ORM model for projects (platform tenants).
"""
from typing import List, Optional

from sqlalchemy import CheckConstraint, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import BaseModel
from ....domain.entities.session import TenantCredentials


class ProjectModel(BaseModel):
    """
    A project groups greenhouses under one ThingsBoard tenant.

    The project key is the tenant key used throughout the hub.
    """

    __tablename__ = "projects"
    __table_args__ = (
        CheckConstraint("status IN ('ready', 'developing')", name="status"),
    )

    key: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    status: Mapped[str] = mapped_column(String(20), default="developing", nullable=False)

    tb_base_url: Mapped[str] = mapped_column(String(500), nullable=False)
    tb_username: Mapped[str] = mapped_column(String(255), nullable=False)
    tb_password: Mapped[str] = mapped_column(String(255), nullable=False)

    greenhouses: Mapped[List["GreenhouseModel"]] = relationship(  # noqa: F821
        "GreenhouseModel",
        back_populates="project",
        cascade="all, delete-orphan",
    )

    def to_credentials(self) -> TenantCredentials:
        """Convert to tenant credentials."""
        return TenantCredentials(
            tenant=self.key,
            base_url=self.tb_base_url,
            username=self.tb_username,
            password=self.tb_password,
        )
