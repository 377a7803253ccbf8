# ------------------------------ IMPORTS ------------------------------
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Column, Integer, ForeignKey, CheckConstraint, Enum as SQLEnum
from sqlalchemy.orm import relationship

from core.utils.data_helpers import to_money
from .base import BaseModel, CartItemStatus

# ------------------------------ CART ITEM MODEL ------------------------------

class CartItem(BaseModel):
    """Cart entry for a listing, a plan, or a plan bound to the listing it will feature."""

    __tablename__ = "cart_items"
    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_cart_item_quantity_positive"),
    )

    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    listing_id = Column(Integer, ForeignKey("listings.id"), nullable=True)
    subscription_id = Column(Integer, ForeignKey("subscriptions.id"), nullable=True)

    quantity = Column(Integer, nullable=False, default=1)
    status = Column(SQLEnum(CartItemStatus, native_enum=False), nullable=False, default=CartItemStatus.ACTIVE)

    account = relationship("Account", back_populates="cart_items")
    listing = relationship("Listing", back_populates="cart_items")
    subscription = relationship("Subscription")

    def unit_price(self, on: Optional[date] = None) -> Decimal:
        """Plan price (discount-aware) when a plan is attached, else the listing price."""
        if self.subscription is not None:
            return self.subscription.effective_price(on)
        if self.listing is not None:
            return to_money(self.listing.price)
        return Decimal("0.00")

    def line_total(self, on: Optional[date] = None) -> Decimal:
        return to_money(self.unit_price(on) * self.quantity)

    def __repr__(self):
        return f"<CartItem(id={self.id}, account_id={self.account_id}, quantity={self.quantity}, status={self.status})>"

# ------------------------------ END OF FILE ------------------------------
