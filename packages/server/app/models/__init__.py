# SQLModel definitions — imported here to ensure metadata is populated for Alembic.
from .base import IntIDMixin, TimestampMixin  # noqa: F401
from .organization import Organization  # noqa: F401
from .user import User  # noqa: F401
from .organization_user import OrganizationUser  # noqa: F401
from .service_profile import ServiceProfile  # noqa: F401
from .application import Application  # noqa: F401
from .device import Device  # noqa: F401
from .gateway import Gateway  # noqa: F401
