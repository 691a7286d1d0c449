"""User model."""

from typing import Optional

from sqlmodel import Field, SQLModel

from .base import IntIDMixin, TimestampMixin


class User(IntIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "user"

    username: str = Field(unique=True, nullable=False, index=True)
    is_admin: bool = Field(default=False, nullable=False)  # global admin, sees every org
    is_active: bool = Field(default=True, nullable=False)
    email: Optional[str] = None
