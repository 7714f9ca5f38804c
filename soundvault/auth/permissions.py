"""Role based capabilities.

Authorization is a lookup in a static table, never a string comparison on
the role field.
"""
import enum
from typing import FrozenSet, Mapping

from ..models import Role


class Capability(str, enum.Enum):
    """Operations that need more than an authenticated session."""
    MANAGE_DEFAULT_SONGS = "manage_default_songs"
    MANAGE_USERS = "manage_users"


ROLE_CAPABILITIES: Mapping[Role, FrozenSet[Capability]] = {
    Role.USER: frozenset(),
    Role.ADMIN: frozenset({Capability.MANAGE_DEFAULT_SONGS, Capability.MANAGE_USERS}),
}


def has_capability(role: Role, capability: Capability) -> bool:
    return capability in ROLE_CAPABILITIES.get(role, frozenset())
