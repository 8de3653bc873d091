from collections.abc import Iterable
from enum import Enum


class Role(str, Enum):
    USER = "user"
    ADMIN = "admin"


def is_role_allowed(role: Role | str | None, allowed_roles: Iterable[Role | str]) -> bool:
    """Return True when ``role`` is one of ``allowed_roles``.

    Roles are compared by value so plain strings read from a token or a
    database row match the enum members.
    """
    if not role:
        return False
    allowed = {getattr(item, "value", item) for item in allowed_roles}
    return getattr(role, "value", role) in allowed
