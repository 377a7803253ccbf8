# ------------------------------ IMPORTS ------------------------------
from enum import Enum
from typing import Iterable

from core.exceptions import InvalidRequestError

# ------------------------------ ROLES ------------------------------

class Role(str, Enum):
    ADMIN = "ADMIN"
    USER = "USER"
    PRIVATE = "PRIVATE"
    DEALER = "DEALER"

ROLE_ORDER = [Role.ADMIN, Role.USER, Role.PRIVATE, Role.DEALER]

# ------------------------------ PARSING ------------------------------

def parse_roles(raw) -> frozenset:
    """Parse a comma-separated role string (or iterable of tags) into a role set.

    Unknown tags are rejected rather than ignored so a typo in an admin edit
    cannot silently strip someone's access.
    """
    if raw is None:
        return frozenset()
    tags = raw.split(",") if isinstance(raw, str) else raw

    roles = set()
    for tag in tags:
        if isinstance(tag, Role):
            roles.add(tag)
            continue
        tag = str(tag).strip().upper()
        if not tag:
            continue
        try:
            roles.add(Role(tag))
        except ValueError:
            raise InvalidRequestError(f"Unknown role: {tag}", {"role": tag})
    return frozenset(roles)

def format_roles(roles: Iterable[Role]) -> str:
    """Serialize a role set in a stable order."""
    roles = set(roles)
    return ",".join(role.value for role in ROLE_ORDER if role in roles)

# ------------------------------ END OF FILE ------------------------------
