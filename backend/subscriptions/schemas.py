# ------------------------------ IMPORTS ------------------------------
from pydantic import BaseModel, Field
from typing import Optional
from datetime import date, datetime
from decimal import Decimal

from core.schemas import BaseOutModel

# ------------------------------ OUTPUT MODELS ------------------------------

class PlanOut(BaseOutModel):
    """Subscription plan output model."""
    id: int
    name: str
    description: Optional[str] = None
    price: float
    current_price: float
    duration_days: int
    max_featured_cars: int
    discount: Optional[float] = None
    discount_expiry: Optional[date] = None

class UserSubscriptionOut(BaseOutModel):
    id: int
    subscription_id: int
    subscription: Optional[PlanOut] = None
    start_date: date
    expiry_date: Optional[date] = None
    active: bool
    auto_renew: bool
    last_renewed_on: Optional[date] = None
    created_at: Optional[datetime] = None

# ------------------------------ INPUT MODELS ------------------------------

class PlanCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    duration_days: int = Field(30, gt=0)
    max_featured_cars: int = Field(1, ge=0)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Dealer Basic",
                "price": "49.00",
                "duration_days": 30,
                "max_featured_cars": 3
            }
        }

class PlanUpdate(BaseModel):
    name: Optional[str] = Field(None, max_length=100)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    duration_days: Optional[int] = Field(None, gt=0)
    max_featured_cars: Optional[int] = Field(None, ge=0)

class DiscountRequest(BaseModel):
    percent: float = Field(..., gt=0, le=100)
    expiry: date = Field(..., description="The discount applies on days before this date")

class SubscribeRequest(BaseModel):
    auto_renew: bool = False

# ------------------------------ END OF FILE ------------------------------
