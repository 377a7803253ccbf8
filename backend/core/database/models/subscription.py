# ------------------------------ IMPORTS ------------------------------
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, Integer, String, Text, Boolean, Date, Float, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from core.config.settings import settings
from core.utils.data_helpers import to_money, today
from .base import BaseModel

# ------------------------------ SUBSCRIPTION PLAN MODEL ------------------------------

class Subscription(BaseModel):
    """Subscription plan with an optional time-bounded discount."""

    __tablename__ = "subscriptions"

    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    duration_days = Column(Integer, nullable=False, default=30)
    max_featured_cars = Column(Integer, nullable=False, default=1)

    discount = Column(Float, nullable=True, comment="Percent off")
    discount_expiry = Column(Date, nullable=True)

    user_subscriptions = relationship("UserSubscription", back_populates="subscription")

    def has_active_discount(self, on: Optional[date] = None) -> bool:
        if not self.discount or self.discount_expiry is None:
            return False
        return (on or today()) < self.discount_expiry

    def effective_price(self, on: Optional[date] = None) -> Decimal:
        """Price at purchase time on the given day."""
        price = to_money(self.price)
        if self.has_active_discount(on):
            factor = Decimal(1) - Decimal(str(self.discount)) / Decimal(100)
            return to_money(price * factor)
        return price

    @property
    def current_price(self) -> Decimal:
        return self.effective_price()

    def __repr__(self):
        return f"<Subscription(id={self.id}, name={self.name}, price={self.price})>"

# ------------------------------ USER SUBSCRIPTION MODEL ------------------------------

class UserSubscription(BaseModel):
    """A purchase of a plan by an account, with expiry and auto-renew state."""

    __tablename__ = "user_subscriptions"

    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    subscription_id = Column(Integer, ForeignKey("subscriptions.id"), nullable=False, index=True)

    start_date = Column(Date, nullable=False)
    expiry_date = Column(Date, nullable=True)
    active = Column(Boolean, nullable=False, default=True)
    auto_renew = Column(Boolean, nullable=False, default=False)
    last_renewed_on = Column(Date, nullable=True)

    account = relationship("Account", back_populates="user_subscriptions")
    subscription = relationship("Subscription", back_populates="user_subscriptions")

    @property
    def renewal_period(self) -> timedelta:
        if self.subscription is not None and self.subscription.duration_days:
            return timedelta(days=self.subscription.duration_days)
        return timedelta(days=settings.subscriptions.default_renewal_days)

    def is_expired(self, on: Optional[date] = None) -> bool:
        """Past expiry with auto-renew off."""
        if self.expiry_date is None or self.auto_renew:
            return False
        return (on or today()) > self.expiry_date

    def is_current(self, on: Optional[date] = None) -> bool:
        return bool(self.active) and not self.is_expired(on)

    def is_due_for_renewal(self, on: Optional[date] = None) -> bool:
        on = on or today()
        return (
            bool(self.auto_renew)
            and self.expiry_date is not None
            and self.expiry_date < on
            and self.last_renewed_on != on
        )

    def renew(self, on: Optional[date] = None) -> bool:
        """Extend expiry by one period when auto-renew is on. Returns whether it renewed."""
        if not self.auto_renew:
            return False
        on = on or today()
        self.expiry_date = (self.expiry_date or on) + self.renewal_period
        self.active = True
        self.last_renewed_on = on
        return True

    def __repr__(self):
        return f"<UserSubscription(id={self.id}, account_id={self.account_id}, expiry_date={self.expiry_date}, active={self.active})>"

# ------------------------------ END OF FILE ------------------------------
