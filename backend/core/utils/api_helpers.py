# ------------------------------ IMPORTS ------------------------------
from typing import Any, Iterable, Mapping

from core.exceptions import InvalidRequestError

# ------------------------------ API HELPER FUNCTIONS ------------------------------

def validate_credentials(username: str, password: str) -> None:
    """Validate username and password are provided."""
    if not username or not username.strip():
        raise InvalidRequestError("Username is required", {"field": "username"})
    if not password:
        raise InvalidRequestError("Password is required", {"field": "password"})

def require_fields(data: Mapping[str, Any], *fields: str) -> None:
    """Reject the payload if any of the fields is missing or blank."""
    missing = [
        name for name in fields
        if data.get(name) is None or (isinstance(data.get(name), str) and not data[name].strip())
    ]
    if missing:
        raise InvalidRequestError(f"Missing required fields: {', '.join(missing)}", {"fields": missing})

def apply_updates(entity: Any, data: Mapping[str, Any], fields: Iterable[str]) -> list[str]:
    """Overwrite the entity's attributes with every supplied, non-blank value.

    Returns the names of the fields that changed.
    """
    changed = []
    for name in fields:
        if name not in data:
            continue
        value = data[name]
        if value is None or (isinstance(value, str) and not value.strip()):
            continue
        if isinstance(value, str):
            value = value.strip()
        if getattr(entity, name) != value:
            setattr(entity, name, value)
            changed.append(name)
    return changed

# ------------------------------ END OF FILE ------------------------------
