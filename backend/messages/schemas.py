# ------------------------------ IMPORTS ------------------------------
from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

from core.database.models import RequestType, RequestStatus
from core.schemas import BaseOutModel

# ------------------------------ OUTPUT MODELS ------------------------------

class QuoteRequestOut(BaseOutModel):
    """Quote request / private message output model."""
    id: int
    listing_id: int
    account_id: Optional[int] = None
    dealer_id: Optional[int] = None
    request_type: RequestType
    status: RequestStatus
    requester_email: Optional[str] = None
    recipient_email: Optional[str] = None
    message: Optional[str] = None
    response_message: Optional[str] = None
    request_date: Optional[datetime] = None
    responded_at: Optional[datetime] = None

# ------------------------------ INPUT MODELS ------------------------------

class PrivateMessageCreate(BaseModel):
    listing_id: int
    message: str = Field(..., min_length=1, max_length=5000)

    class Config:
        json_schema_extra = {
            "example": {
                "listing_id": 12,
                "message": "Is this still available?"
            }
        }

class QuoteRequestCreate(BaseModel):
    listing_id: int
    email: Optional[str] = Field(None, max_length=255, description="Required when not signed in")
    message: Optional[str] = Field(None, max_length=5000)

class ResponseCreate(BaseModel):
    response: str = Field(..., min_length=1, max_length=5000)

# ------------------------------ END OF FILE ------------------------------
