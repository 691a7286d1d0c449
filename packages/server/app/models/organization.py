"""Organization model. Root of every visibility decision."""

from sqlmodel import Field, SQLModel

from .base import IntIDMixin, TimestampMixin


class Organization(IntIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "organization"

    name: str = Field(unique=True, nullable=False, index=True)
    display_name: str = Field(default="", nullable=False)
    can_have_gateways: bool = Field(default=False, nullable=False)
