# app/domain/roles.py
from enum import Enum


class Role(str, Enum):
    USER = "User"
    ADMIN = "Admin"

    @classmethod
    def normalize(cls, value: str | None) -> "Role":
        """Unknown or missing role names fall back to USER."""
        for role in cls:
            if role.value == value:
                return role
        return cls.USER


class Capability(str, Enum):
    MANAGE_CATALOG = "manage_catalog"


_ROLE_CAPABILITIES = {
    Role.USER: frozenset(),
    Role.ADMIN: frozenset({Capability.MANAGE_CATALOG}),
}


def has_capability(actor, capability: Capability) -> bool:
    if actor is None:
        return False
    role = Role.normalize(getattr(actor, "role", None))
    return capability in _ROLE_CAPABILITIES[role]
