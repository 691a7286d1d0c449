"""Service profile. Only its name is read, for application listings."""

from sqlmodel import Field, SQLModel

from .base import IntIDMixin, TimestampMixin


class ServiceProfile(IntIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "service_profile"

    organization_id: int = Field(
        foreign_key="organization.id", nullable=False, index=True, ondelete="CASCADE"
    )
    name: str = Field(nullable=False)
