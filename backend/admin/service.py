# ------------------------------ IMPORTS ------------------------------
from typing import List, Tuple, Dict, Any
import logging

from sqlalchemy import desc
from sqlalchemy.orm import Session

from accounts.service import AccountService
from core.database import transaction
from core.database.models import Account, Listing
from core.exceptions import ConflictError, InvalidRequestError
from core.security.roles import parse_roles
from core.services.email_service import EmailService
from core.utils.data_helpers import clean_string

logger = logging.getLogger(__name__)

# ------------------------------ SERVICE ------------------------------

class AdminService:
    """Account maintenance for administrators."""

    def __init__(self, db: Session, email: EmailService):
        self.db = db
        self.accounts = AccountService(db, email)

    def list_users(self, limit: int = 100, offset: int = 0) -> Tuple[List[Account], int]:
        query = self.db.query(Account)
        total = query.count()
        return query.order_by(Account.id).limit(limit).offset(offset).all(), total

    def list_listings(self, limit: int = 100, offset: int = 0) -> Tuple[List[Listing], int]:
        query = self.db.query(Listing)
        total = query.count()
        return query.order_by(desc(Listing.created_at), desc(Listing.id)).limit(limit).offset(offset).all(), total

    def update_user(self, user_id: int, data: Dict[str, Any], admin: Account) -> Account:
        """Edit username, email or roles of any account."""
        account = self.accounts.get_account(user_id)
        username = clean_string(data.get("username"))
        email = clean_string(data.get("email"))

        if username and username != account.username:
            other = self.accounts.find_by_username(username)
            if other and other.id != account.id:
                raise ConflictError("Username is already taken", {"field": "username"}, error_code="USERNAME_TAKEN")
        if email and email.lower() != account.email.lower():
            other = self.accounts.find_by_email(email)
            if other and other.id != account.id:
                raise ConflictError("Email is already registered", {"field": "email"}, error_code="EMAIL_TAKEN")

        roles = None
        if data.get("roles") is not None:
            roles = parse_roles(data["roles"])
            if not roles:
                raise InvalidRequestError("At least one role is required", {"field": "roles"})

        with transaction(self.db):
            if username:
                account.username = username
            if email:
                account.email = email
            if roles is not None:
                account.set_roles(roles)

        logger.info(f"Admin {admin.id} updated account {user_id}")
        return account

    def delete_user(self, user_id: int, admin: Account) -> None:
        """Delete any other account with its dealer and listings."""
        if user_id == admin.id:
            raise InvalidRequestError("Administrators cannot delete their own account here")

        account = self.accounts.get_account(user_id)
        with transaction(self.db):
            self.accounts.purge_account(account)

        self.accounts.verify_deleted(user_id)
        logger.info(f"Admin {admin.id} deleted account {user_id}")

# ------------------------------ END OF FILE ------------------------------
