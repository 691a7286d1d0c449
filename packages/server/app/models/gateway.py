"""Gateway model."""

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import IntIDMixin, TimestampMixin


class Gateway(IntIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "gateway"

    mac: bytes = Field(sa_type=sa.LargeBinary(8), unique=True, nullable=False)
    organization_id: int = Field(
        foreign_key="organization.id", nullable=False, index=True, ondelete="CASCADE"
    )
    name: str = Field(nullable=False, index=True)
    description: str = Field(default="", nullable=False)
