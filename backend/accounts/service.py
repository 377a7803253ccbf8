# ------------------------------ IMPORTS ------------------------------
from datetime import date, timedelta
from typing import Optional, Dict, Any
import logging
import uuid

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalog.service import ListingService
from core.config.settings import settings
from core.database import transaction
from core.database.models import Account, AccountInformation, UserSubscription
from core.exceptions import (
    AuthenticationError,
    CascadeDeleteError,
    ConflictError,
    InvalidRequestError,
    NotFoundError,
)
from core.security.auth import hash_password, verify_password
from core.security.roles import Role
from core.services.email_service import EmailService
from core.utils.api_helpers import apply_updates, validate_credentials
from core.utils.data_helpers import utcnow, clean_string
from dealers.service import DealerService
from messages.service import MessageService

logger = logging.getLogger(__name__)

PROFILE_FIELDS = ("first_name", "last_name", "birth_date", "address", "phone_number", "additional_info")

# ------------------------------ SERVICE ------------------------------

class AccountService:
    """Registration, credentials, profile and account lifecycle."""

    def __init__(self, db: Session, email: EmailService):
        self.db = db
        self.email = email

    # ------------------------------ LOOKUPS ------------------------------

    def get_account(self, account_id: int) -> Account:
        account = self.db.get(Account, account_id)
        if not account:
            raise NotFoundError("Account", account_id)
        return account

    def find_by_email(self, email: str) -> Optional[Account]:
        return self.db.query(Account).filter(func.lower(Account.email) == email.strip().lower()).first()

    def find_by_username(self, username: str) -> Optional[Account]:
        return self.db.query(Account).filter(Account.username == username.strip()).first()

    def _has_current_subscription(self, account: Account, on: Optional[date] = None) -> bool:
        subscriptions = (
            self.db.query(UserSubscription)
            .filter(UserSubscription.account_id == account.id, UserSubscription.active.is_(True))
            .all()
        )
        return any(s.is_current(on) for s in subscriptions)

    # ------------------------------ REGISTRATION ------------------------------

    def register(self, data: Dict[str, Any]) -> Account:
        username = clean_string(data.get("username"))
        email = clean_string(data.get("email"))
        password = data.get("password")

        validate_credentials(username, password)
        if not email:
            raise InvalidRequestError("Email is required", {"field": "email"})
        if password != data.get("confirm_password"):
            raise InvalidRequestError("Passwords do not match", {"field": "confirm_password"}, error_code="PASSWORD_MISMATCH")
        if self.find_by_username(username):
            raise InvalidRequestError("Username is already taken", {"field": "username"}, error_code="USERNAME_TAKEN")
        if self.find_by_email(email):
            raise InvalidRequestError("Email is already registered", {"field": "email"}, error_code="EMAIL_TAKEN")

        account = Account(
            username=username,
            email=email,
            password_hash=hash_password(password),
            roles=Role.USER.value,
        )
        try:
            with transaction(self.db):
                self.db.add(account)
        except IntegrityError as e:
            raise InvalidRequestError("Username or email is already registered", error_code="ACCOUNT_EXISTS") from e

        self.db.refresh(account)
        logger.info(f"Registered account {account.id} ({account.username})")
        self.email.send_welcome(account.email, account.username)
        return account

    def ensure_admin(self, username: str, email: str, password: str) -> Account:
        """Create the bootstrap admin if missing, or grant the role to an existing account."""
        account = self.db.query(Account).filter(
            or_(Account.username == username, func.lower(Account.email) == email.lower())
        ).first()

        with transaction(self.db):
            if account is None:
                account = Account(
                    username=username,
                    email=email,
                    password_hash=hash_password(password),
                    roles=Role.USER.value,
                )
                self.db.add(account)
            account.add_role(Role.ADMIN)

        logger.info(f"Admin account ready: {username}")
        return account

    # ------------------------------ CREDENTIALS ------------------------------

    def authenticate(self, username: str, password: str) -> Account:
        """Return the account for a username (or email) and password pair."""
        validate_credentials(username, password)
        account = self.find_by_username(username) or self.find_by_email(username)
        if not account or not verify_password(password, account.password_hash):
            raise AuthenticationError("Invalid username or password")
        return account

    def generate_reset_token(self, email: str) -> str:
        account = self.find_by_email(email or "")
        if not account:
            raise NotFoundError("Account", message="No account is registered with that email")

        token = uuid.uuid4().hex
        with transaction(self.db):
            account.reset_token = token
            account.reset_token_expiry = utcnow() + timedelta(minutes=settings.security.reset_token_expire_minutes)

        logger.info(f"Issued password reset token for account {account.id}")
        self.email.send_password_reset(account.email, token)
        return token

    def _account_for_token(self, token: str) -> Optional[Account]:
        if not token:
            return None
        account = self.db.query(Account).filter(Account.reset_token == token).first()
        if not account or not account.reset_token_expiry or account.reset_token_expiry <= utcnow():
            return None
        return account

    def is_reset_token_valid(self, token: str) -> bool:
        return self._account_for_token(token) is not None

    def reset_password(self, token: str, password: str, confirm_password: str) -> Account:
        account = self._account_for_token(token)
        if account is None:
            raise InvalidRequestError("Reset link is invalid or has expired", error_code="INVALID_RESET_TOKEN")
        if not password:
            raise InvalidRequestError("Password is required", {"field": "password"})
        if password != confirm_password:
            raise InvalidRequestError("Passwords do not match", {"field": "confirm_password"}, error_code="PASSWORD_MISMATCH")

        with transaction(self.db):
            account.password_hash = hash_password(password)
            account.reset_token = None
            account.reset_token_expiry = None

        logger.info(f"Password reset for account {account.id}")
        return account

    # ------------------------------ PROFILE ------------------------------

    def update_profile(self, account: Account, data: Dict[str, Any]) -> Account:
        """Update email and profile details; blank values keep the current ones."""
        email = clean_string(data.get("email"))
        if email and email.lower() != account.email.lower():
            other = self.find_by_email(email)
            if other and other.id != account.id:
                raise ConflictError("Email is already registered", {"field": "email"}, error_code="EMAIL_TAKEN")

        with transaction(self.db):
            if email:
                account.email = email
            info = account.account_information
            if info is None:
                info = AccountInformation(account_id=account.id)
                account.account_information = info
            apply_updates(info, data, PROFILE_FIELDS)

        return account

    # ------------------------------ ROLES ------------------------------

    def become_private(self, account: Account, on: Optional[date] = None) -> Account:
        """Let a plain user sell one vehicle privately."""
        if account.has_role(Role.PRIVATE):
            raise InvalidRequestError("You are already a private seller", error_code="ALREADY_PRIVATE")
        if account.has_role(Role.DEALER) or self._has_current_subscription(account, on):
            raise InvalidRequestError(
                "Accounts with a dealer subscription cannot become private sellers",
                error_code="HAS_SUBSCRIPTION"
            )

        with transaction(self.db):
            account.add_role(Role.PRIVATE)
        logger.info(f"Account {account.id} became a private seller")
        return account

    def remove_private(self, account: Account) -> int:
        """Drop the private-seller role together with the seller's listings."""
        if not account.has_role(Role.PRIVATE):
            raise InvalidRequestError("You are not a private seller", error_code="NOT_PRIVATE")

        with transaction(self.db):
            removed = ListingService(self.db).purge_seller_listings(account.id)
            account.set_roles((account.role_set - {Role.PRIVATE}) | {Role.USER})

        logger.info(f"Account {account.id} stopped selling privately, removed {removed} listings")
        return removed

    # ------------------------------ DELETION ------------------------------

    def purge_account(self, account: Account) -> None:
        """Delete an account and everything it owns, inside the caller's transaction."""
        MessageService(self.db, self.email).purge_sent_requests(account.id)

        dealers = DealerService(self.db)
        dealer = dealers.find_by_owner(account)
        if dealer is not None:
            dealers.purge_dealer(dealer)
        else:
            ListingService(self.db).purge_seller_listings(account.id)

        self.db.expire(account, ["listings", "dealer", "sent_requests"])
        self.db.delete(account)
        self.db.flush()

    def verify_deleted(self, account_id: int) -> None:
        if self.db.query(Account.id).filter(Account.id == account_id).first() is not None:
            raise CascadeDeleteError(f"Account {account_id} still exists after delete", {"account_id": account_id})

    def delete_account(self, account: Account, password: str, on: Optional[date] = None) -> None:
        """Close the caller's own account after re-checking their password."""
        if not verify_password(password, account.password_hash):
            raise InvalidRequestError("Incorrect password", {"field": "password"}, error_code="INCORRECT_PASSWORD")
        if self._has_current_subscription(account, on):
            raise InvalidRequestError(
                "Cancel your active subscriptions before deleting your account",
                error_code="ACTIVE_SUBSCRIPTIONS"
            )

        account_id, email, username = account.id, account.email, account.username
        with transaction(self.db):
            self.purge_account(account)

        self.verify_deleted(account_id)
        logger.info(f"Deleted account {account_id} ({username})")
        self.email.send_account_deleted(email, username)

# ------------------------------ END OF FILE ------------------------------
