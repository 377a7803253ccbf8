# ------------------------------ IMPORTS ------------------------------
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal

from core.database.models import SellerType
from core.schemas import BaseOutModel

# ------------------------------ OUTPUT MODELS ------------------------------

class ListingImageOut(BaseOutModel):
    """Listing image output model."""
    id: int
    url: str
    content_type: Optional[str] = None

class ListingOut(BaseOutModel):
    """Listing output model."""
    id: int
    name: Optional[str] = None
    description: Optional[str] = None
    price: float
    image_url: str
    category: Optional[str] = None
    brand: Optional[str] = None
    model: Optional[str] = None
    mileage: Optional[int] = None
    year: Optional[int] = None
    fuel_type: Optional[str] = None
    transmission: Optional[str] = None
    seller_id: int
    seller_type: SellerType
    is_featured: bool = False
    featured_until: Optional[datetime] = None
    featured_active: bool = False
    images: List[ListingImageOut] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

# ------------------------------ INPUT MODELS ------------------------------

class ListingCreate(BaseModel):
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    image_url: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    mileage: Optional[int] = Field(None, ge=0)
    year: Optional[int] = Field(None, ge=1886, le=2100)
    fuel_type: Optional[str] = Field(None, max_length=50)
    transmission: Optional[str] = Field(None, max_length=50)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Audi A4 Avant",
                "price": "18900.00",
                "category": "Estate",
                "brand": "Audi",
                "model": "A4",
                "mileage": 84000,
                "year": 2018,
                "fuel_type": "Diesel",
                "transmission": "Automatic"
            }
        }

class ListingUpdate(BaseModel):
    """Partial update; omitted or blank fields keep their current value."""
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    price: Optional[Decimal] = Field(None, gt=0, max_digits=12, decimal_places=2)
    image_url: Optional[str] = Field(None, max_length=500)
    category: Optional[str] = Field(None, max_length=100)
    brand: Optional[str] = Field(None, max_length=100)
    model: Optional[str] = Field(None, max_length=100)
    mileage: Optional[int] = Field(None, ge=0)
    year: Optional[int] = Field(None, ge=1886, le=2100)
    fuel_type: Optional[str] = Field(None, max_length=50)
    transmission: Optional[str] = Field(None, max_length=50)

class HighlightRequest(BaseModel):
    days: int = Field(..., gt=0, le=365, description="How long the listing stays featured")

class ImageCreate(BaseModel):
    url: str = Field(..., min_length=1, max_length=500)
    content_type: Optional[str] = Field(None, max_length=100)

# ------------------------------ END OF FILE ------------------------------
