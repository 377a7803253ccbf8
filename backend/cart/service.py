# ------------------------------ IMPORTS ------------------------------
from datetime import date, timedelta
from decimal import Decimal
from typing import Optional, List, Iterable, Dict, Any
import logging
import uuid

from sqlalchemy.orm import Session

from core.database import transaction
from core.database.models import (
    Account,
    CartItem,
    CartItemStatus,
    Listing,
    Payment,
    PaymentStatus,
    Subscription,
)
from core.exceptions import NotFoundError, InvalidRequestError
from core.security.auth import ensure_owner
from core.services.email_service import EmailService
from core.utils.data_helpers import to_money, today, utcnow
from subscriptions.service import SubscriptionService

logger = logging.getLogger(__name__)

# ------------------------------ TOTALS ------------------------------

def calculate_subtotal(items: Iterable[CartItem], on: Optional[date] = None) -> Decimal:
    """Sum of unit price times quantity; independent of item order."""
    return to_money(sum((item.line_total(on) for item in items), Decimal("0.00")))

def calculate_total(items: Iterable[CartItem], on: Optional[date] = None) -> Decimal:
    # No tax or shipping yet.
    return calculate_subtotal(items, on)

# ------------------------------ SERVICE ------------------------------

class CartService:
    """Per-account cart with a persisted saved-for-later list."""

    def __init__(self, db: Session, email: EmailService):
        self.db = db
        self.email = email

    def _get_owned_item(self, account: Account, item_id: int) -> CartItem:
        item = self.db.get(CartItem, item_id)
        if not item:
            raise NotFoundError("Cart item", item_id)
        ensure_owner(account, item.account_id, "cart item", item_id)
        return item

    def _items(self, account: Account, status: CartItemStatus) -> List[CartItem]:
        return (
            self.db.query(CartItem)
            .filter(CartItem.account_id == account.id, CartItem.status == status)
            .order_by(CartItem.id)
            .all()
        )

    def get_cart_items(self, account: Account) -> List[CartItem]:
        return self._items(account, CartItemStatus.ACTIVE)

    def get_saved_items(self, account: Account) -> List[CartItem]:
        return self._items(account, CartItemStatus.SAVED)

    def get_summary(self, account: Account, on: Optional[date] = None) -> Dict[str, Any]:
        items = self.get_cart_items(account)
        return {
            "items": items,
            "saved": self.get_saved_items(account),
            "subtotal": calculate_subtotal(items, on),
            "total": calculate_total(items, on),
        }

    # ------------------------------ MUTATIONS ------------------------------

    def add_to_cart(self, account: Account, listing_id: int) -> CartItem:
        """Add a listing with quantity 1. Adding it again creates a second entry."""
        listing = self.db.get(Listing, listing_id)
        if not listing:
            raise NotFoundError("Listing", listing_id)

        item = CartItem(account_id=account.id, listing_id=listing.id, quantity=1, status=CartItemStatus.ACTIVE)
        with transaction(self.db):
            self.db.add(item)
        self.db.refresh(item)
        logger.info(f"Account {account.id} added listing {listing_id} to cart")
        return item

    def add_subscription_to_cart(self, account: Account, plan_id: int, listing_id: Optional[int] = None) -> CartItem:
        """Add a plan, optionally bound to one of the caller's listings to feature at checkout."""
        plan = self.db.get(Subscription, plan_id)
        if not plan:
            raise NotFoundError("Subscription plan", plan_id)

        if listing_id is not None:
            listing = self.db.get(Listing, listing_id)
            if not listing:
                raise NotFoundError("Listing", listing_id)
            ensure_owner(account, listing.seller_id, "listing", listing_id)

        item = CartItem(
            account_id=account.id,
            subscription_id=plan.id,
            listing_id=listing_id,
            quantity=1,
            status=CartItemStatus.ACTIVE,
        )
        with transaction(self.db):
            self.db.add(item)
        self.db.refresh(item)
        logger.info(f"Account {account.id} added plan {plan_id} to cart")
        return item

    def update_quantity(self, account: Account, item_id: int, quantity: int) -> Optional[CartItem]:
        """Set the quantity; zero or less removes the item and returns None.

        A plan grants one subscription period per purchase, so plan items stay at quantity 1.
        """
        item = self._get_owned_item(account, item_id)
        if item.subscription_id is not None and quantity > 1:
            raise InvalidRequestError(
                "Subscription plans can only be bought one at a time",
                {"item_id": item_id, "quantity": quantity},
                error_code="PLAN_QUANTITY"
            )

        with transaction(self.db):
            if quantity <= 0:
                self.db.delete(item)
            else:
                item.quantity = quantity

        if quantity <= 0:
            logger.info(f"Removed cart item {item_id} (quantity {quantity})")
            return None
        return item

    def remove_from_cart(self, account: Account, item_id: int) -> None:
        item = self._get_owned_item(account, item_id)
        with transaction(self.db):
            self.db.delete(item)

    def save_for_later(self, account: Account, item_id: int) -> CartItem:
        item = self._get_owned_item(account, item_id)
        with transaction(self.db):
            item.status = CartItemStatus.SAVED
        return item

    def restore_from_saved(self, account: Account, item_id: int) -> CartItem:
        item = self._get_owned_item(account, item_id)
        if item.status != CartItemStatus.SAVED:
            raise InvalidRequestError("Item is not saved for later", {"item_id": item_id})
        with transaction(self.db):
            item.status = CartItemStatus.ACTIVE
        return item

    # ------------------------------ CHECKOUT ------------------------------

    def checkout(self, account: Account, on: Optional[date] = None) -> Payment:
        """Pay for the active cart, start bought plans and feature their listings."""
        on = on or today()
        items = self.get_cart_items(account)
        if not items:
            raise InvalidRequestError("Your cart is empty", error_code="EMPTY_CART")

        total = calculate_total(items, on)
        subscriptions = SubscriptionService(self.db, self.email)
        started = []

        with transaction(self.db):
            payment = Payment(
                account_id=account.id,
                amount=total,
                status=PaymentStatus.COMPLETED,
                transaction_id=uuid.uuid4().hex,
                payment_date=utcnow(),
            )
            self.db.add(payment)

            for item in items:
                plan = item.subscription
                if plan is not None:
                    started.append(subscriptions.activate(account, plan, auto_renew=True, on=on))
                    if item.listing is not None:
                        item.listing.is_featured = True
                        item.listing.featured_until = utcnow() + timedelta(days=plan.duration_days)
                self.db.delete(item)

        self.db.refresh(payment)
        logger.info(f"Account {account.id} checked out {len(items)} items for {total} ({payment.transaction_id})")

        for user_subscription in started:
            self.email.send_subscription_confirmation(
                account.email, user_subscription.subscription.name, user_subscription.expiry_date
            )
        return payment

# ------------------------------ END OF FILE ------------------------------
