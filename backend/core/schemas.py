# ------------------------------ IMPORTS ------------------------------
from pydantic import BaseModel, field_serializer
from typing import Optional, Any
from datetime import datetime

# ------------------------------ BASE MODELS ------------------------------

class BaseOutModel(BaseModel):
    """Base model with common datetime serialization."""

    @field_serializer(
        'created_at', 'updated_at', 'featured_until', 'request_date', 'responded_at', 'payment_date',
        check_fields=False
    )
    def serialize_datetime(self, dt: Optional[datetime]) -> Optional[str]:
        return dt.isoformat() if dt else None

    class Config:
        from_attributes = True

# ------------------------------ RESPONSE MODELS ------------------------------

class APIResponse(BaseModel):
    """Generic API response model."""
    success: bool
    data: dict[str, Any]

# ------------------------------ END OF FILE ------------------------------
