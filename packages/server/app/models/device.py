"""Device model. Belongs to an application, and through it to an organization."""

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import IntIDMixin, TimestampMixin


class Device(IntIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "device"

    dev_eui: bytes = Field(sa_type=sa.LargeBinary(8), unique=True, nullable=False)
    application_id: int = Field(
        foreign_key="application.id", nullable=False, index=True, ondelete="CASCADE"
    )
    name: str = Field(nullable=False, index=True)
    description: str = Field(default="", nullable=False)
