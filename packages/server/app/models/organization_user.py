"""User-Organization membership (join table)."""

import sqlalchemy as sa
from sqlmodel import Field, SQLModel

from .base import IntIDMixin, TimestampMixin


class OrganizationUser(IntIDMixin, TimestampMixin, SQLModel, table=True):
    __tablename__ = "organization_user"
    __table_args__ = (
        sa.UniqueConstraint("organization_id", "user_id", name="uq_organization_user"),
    )

    organization_id: int = Field(
        foreign_key="organization.id", nullable=False, index=True, ondelete="CASCADE"
    )
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True, ondelete="CASCADE")
    is_admin: bool = Field(default=False, nullable=False)  # org admin, not global
