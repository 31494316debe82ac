# SQLModel definitions, imported here to ensure metadata is populated for Alembic.
from .base import UUIDMixin, TimestampMixin  # noqa: F401
from .user import User  # noqa: F401
from .room import Room  # noqa: F401
from .room_member import RoomMember  # noqa: F401
from .service_request import ServiceRequest  # noqa: F401
