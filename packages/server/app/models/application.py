"""Application model."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import IntIDMixin, TimestampMixin


class Application(IntIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "application"

    organization_id: int = Field(
        foreign_key="organization.id", nullable=False, index=True, ondelete="CASCADE"
    )
    name: str = Field(nullable=False, index=True)
    description: str = Field(default="", nullable=False)
    service_profile_id: Optional[int] = Field(default=None, foreign_key="service_profile.id")
