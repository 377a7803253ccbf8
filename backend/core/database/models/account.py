# ------------------------------ IMPORTS ------------------------------
from sqlalchemy import Column, Integer, String, DateTime, Date, Text, ForeignKey
from sqlalchemy.orm import relationship

from core.security.roles import Role, ROLE_ORDER, parse_roles, format_roles
from .base import BaseModel

# ------------------------------ ACCOUNT MODEL ------------------------------

class Account(BaseModel):
    """Account model - a marketplace user with credentials and roles."""

    __tablename__ = "accounts"

    username = Column(String(50), unique=True, nullable=False, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False, comment="bcrypt hash, never plaintext")
    roles = Column(String(100), nullable=False, default=Role.USER.value, comment="Comma-separated role tags")

    reset_token = Column(String(64), nullable=True, index=True)
    reset_token_expiry = Column(DateTime, nullable=True)

    subscription_id = Column(Integer, ForeignKey("subscriptions.id"), nullable=True, comment="Current plan")

    account_information = relationship("AccountInformation", back_populates="account", uselist=False, cascade="all, delete-orphan")
    dealer = relationship("Dealer", back_populates="owner", uselist=False)
    listings = relationship("Listing", back_populates="seller")
    cart_items = relationship("CartItem", back_populates="account", cascade="all, delete-orphan")
    user_subscriptions = relationship("UserSubscription", back_populates="account", cascade="all, delete-orphan")
    payments = relationship("Payment", back_populates="account", cascade="all, delete-orphan")
    sent_requests = relationship("QuoteRequest", back_populates="account")
    subscription = relationship("Subscription")

    @property
    def role_set(self) -> frozenset:
        return parse_roles(self.roles)

    def set_roles(self, roles) -> None:
        self.roles = format_roles(parse_roles(roles))

    def add_role(self, role: Role) -> None:
        self.set_roles(self.role_set | {role})

    @property
    def role_names(self) -> list[str]:
        return [role.value for role in ROLE_ORDER if role in self.role_set]

    def has_role(self, role: Role) -> bool:
        return role in self.role_set

    @property
    def is_admin(self) -> bool:
        return self.has_role(Role.ADMIN)

    def __repr__(self):
        return f"<Account(id={self.id}, username={self.username}, roles={self.roles})>"

# ------------------------------ ACCOUNT INFORMATION MODEL ------------------------------

class AccountInformation(BaseModel):
    """Optional profile details attached to an account."""

    __tablename__ = "account_information"

    account_id = Column(Integer, ForeignKey("accounts.id"), unique=True, nullable=False)

    first_name = Column(String(100), nullable=True)
    last_name = Column(String(100), nullable=True)
    birth_date = Column(Date, nullable=True)
    address = Column(String(255), nullable=True)
    phone_number = Column(String(50), nullable=True)
    additional_info = Column(Text, nullable=True)

    account = relationship("Account", back_populates="account_information")

# ------------------------------ END OF FILE ------------------------------
