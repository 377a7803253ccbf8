# ------------------------------ IMPORTS ------------------------------
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from catalog.schemas import ListingOut
from core.database.models import CartItemStatus, PaymentStatus
from core.schemas import BaseOutModel
from subscriptions.schemas import PlanOut

# ------------------------------ OUTPUT MODELS ------------------------------

class CartItemOut(BaseOutModel):
    """Cart item output model."""
    id: int
    listing_id: Optional[int] = None
    subscription_id: Optional[int] = None
    quantity: int
    status: CartItemStatus
    listing: Optional[ListingOut] = None
    subscription: Optional[PlanOut] = None

class PaymentOut(BaseOutModel):
    id: int
    amount: float
    status: PaymentStatus
    transaction_id: str
    payment_date: Optional[datetime] = None

# ------------------------------ INPUT MODELS ------------------------------

class QuantityUpdate(BaseModel):
    quantity: int = Field(..., description="Zero or less removes the item")

class PlanCartAdd(BaseModel):
    listing_id: Optional[int] = Field(None, description="Listing to feature when the plan is bought")

# ------------------------------ END OF FILE ------------------------------
