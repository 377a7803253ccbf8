# ------------------------------ IMPORTS ------------------------------
from enum import Enum
from typing import Any

from sqlalchemy import Column, Integer, DateTime, func

from core.database.connection import Base

# ------------------------------ ENUMS ------------------------------

class SellerType(str, Enum):
    PRIVATE = "PRIVATE"
    DEALER = "DEALER"

class CartItemStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SAVED = "SAVED"

class RequestType(str, Enum):
    DEALER_QUOTE = "DEALER_QUOTE"
    PRIVATE = "PRIVATE"

class RequestStatus(str, Enum):
    PENDING = "PENDING"
    RESPONDED = "RESPONDED"

class PaymentStatus(str, Enum):
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"

# ------------------------------ BASE MODEL ------------------------------

class BaseModel(Base):
    """Base model with common fields for all tables."""
    __abstract__ = True

    id = Column(Integer, primary_key=True, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def to_dict(self) -> dict[str, Any]:
        """Convert model instance to a column dictionary."""
        return {
            column.name: getattr(self, column.name)
            for column in self.__table__.columns
        }

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(id={self.id})>"

# ------------------------------ END OF FILE ------------------------------
