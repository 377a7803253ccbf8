# ------------------------------ IMPORTS ------------------------------
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

from catalog.schemas import ListingOut
from core.schemas import BaseOutModel

# ------------------------------ OUTPUT MODELS ------------------------------

class DealerOut(BaseOutModel):
    """Dealer output model."""
    id: int
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    image_path: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    owner_id: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class DealerDetailOut(DealerOut):
    listings: List[ListingOut] = []

# ------------------------------ INPUT MODELS ------------------------------

class DealerData(BaseModel):
    """Dealer fields; name is required when creating."""
    name: Optional[str] = Field(None, max_length=255)
    description: Optional[str] = None
    address: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    email: Optional[str] = Field(None, max_length=255)
    image_path: Optional[str] = Field(None, max_length=500)
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Fjord City Cars",
                "address": "Storgata 1, Oslo",
                "phone": "+47 22 00 00 00",
                "email": "sales@fjordcitycars.no"
            }
        }

# ------------------------------ END OF FILE ------------------------------
