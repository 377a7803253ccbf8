# ------------------------------ IMPORTS ------------------------------
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
import logging

from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from core.config.settings import settings
from core.database import get_db
from core.database.models import Account
from core.exceptions import AuthenticationError, NotAuthorizedError
from core.security.roles import Role

logger = logging.getLogger(__name__)

# ------------------------------ PASSWORDS ------------------------------
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.security.bcrypt_rounds
)

def hash_password(password: str) -> str:
    return pwd_context.hash(password)

def verify_password(plain_password: str, hashed_password: str) -> bool:
    if not plain_password or not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)

# ------------------------------ SESSION TOKENS ------------------------------

def create_session_token(account: Account, expires_delta: Optional[timedelta] = None) -> str:
    """Issue a signed session token for the account."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=settings.security.session_expire_minutes))
    payload = {
        "sub": str(account.id),
        "username": account.username,
        "iat": now,
        "exp": expire,
        "type": "session",
    }
    return jwt.encode(payload, settings.security.secret_key, algorithm=settings.security.algorithm)

def decode_session_token(token: str) -> Dict[str, Any]:
    """Verify a session token and return its claims."""
    try:
        payload = jwt.decode(token, settings.security.secret_key, algorithms=[settings.security.algorithm])
    except JWTError as e:
        logger.info(f"Rejected session token: {e}")
        raise AuthenticationError("Invalid or expired session")

    if payload.get("type") != "session" or not payload.get("sub"):
        raise AuthenticationError("Invalid session token")
    return payload

# ------------------------------ CURRENT ACCOUNT ------------------------------
bearer_scheme = HTTPBearer(auto_error=False)

def _extract_token(request: Request, credentials: Optional[HTTPAuthorizationCredentials]) -> Optional[str]:
    if credentials and credentials.credentials:
        return credentials.credentials
    return request.cookies.get(settings.security.session_cookie_name)

def get_optional_account(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    db: Session = Depends(get_db)
) -> Optional[Account]:
    """Resolve the caller if a session token is present, else None."""
    token = _extract_token(request, credentials)
    if not token:
        return None

    payload = decode_session_token(token)
    account = db.get(Account, int(payload["sub"]))
    if not account:
        raise AuthenticationError("Session refers to an account that no longer exists")
    return account

def get_current_account(account: Optional[Account] = Depends(get_optional_account)) -> Account:
    """Dependency for routes that require a signed-in caller."""
    if account is None:
        raise AuthenticationError("Authentication required")
    return account

# ------------------------------ GUARDS ------------------------------

def require_roles(*roles: Role):
    """Build a dependency admitting callers that hold any of the given roles."""
    allowed = frozenset(roles)

    def guard(account: Account = Depends(get_current_account)) -> Account:
        if not (account.role_set & allowed):
            logger.info(f"Account {account.id} lacks roles {sorted(r.value for r in allowed)}")
            raise NotAuthorizedError(
                "You do not have permission to perform this action",
                {"required_roles": sorted(r.value for r in allowed)}
            )
        return account

    return guard

def ensure_owner_or_admin(caller: Account, owner_id: Optional[int], resource: str, resource_id: Any = None) -> None:
    """Reject the caller unless they own the resource or are an admin."""
    if caller.is_admin or (owner_id is not None and caller.id == owner_id):
        return
    raise NotAuthorizedError(
        f"You are not allowed to modify this {resource}",
        {"resource": resource, "id": resource_id}
    )

def ensure_owner(caller: Account, owner_id: Optional[int], resource: str, resource_id: Any = None) -> None:
    """Reject the caller unless they own the resource."""
    if owner_id is not None and caller.id == owner_id:
        return
    raise NotAuthorizedError(
        f"You are not allowed to access this {resource}",
        {"resource": resource, "id": resource_id}
    )

# ------------------------------ END OF FILE ------------------------------
