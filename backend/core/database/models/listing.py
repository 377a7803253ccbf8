# ------------------------------ IMPORTS ------------------------------
from datetime import datetime
from typing import Optional

from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Numeric, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from core.utils.data_helpers import utcnow
from .base import BaseModel, SellerType

PLACEHOLDER_IMAGE = "/images/placeholder.png"

# ------------------------------ LISTING MODEL ------------------------------

class Listing(BaseModel):
    """Listing model - a vehicle offered for sale by a private seller or dealer."""

    __tablename__ = "listings"
    __table_args__ = (
        Index("ix_listing_brand_model", "brand", "model"),
    )

    name = Column(String(255), nullable=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(12, 2), nullable=False)
    image_url = Column(String(500), nullable=False, default=PLACEHOLDER_IMAGE)

    category = Column(String(100), nullable=True, index=True)
    brand = Column(String(100), nullable=True, index=True)
    model = Column(String(100), nullable=True)
    mileage = Column(Integer, nullable=True)
    year = Column(Integer, nullable=True)
    fuel_type = Column(String(50), nullable=True)
    transmission = Column(String(50), nullable=True)

    seller_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    seller_type = Column(SQLEnum(SellerType, native_enum=False), nullable=False)

    is_featured = Column(Boolean, default=False, nullable=False)
    featured_until = Column(DateTime, nullable=True)

    seller = relationship("Account", back_populates="listings")
    images = relationship("ListingImage", back_populates="listing", cascade="all, delete-orphan")
    quote_requests = relationship("QuoteRequest", back_populates="listing", cascade="all, delete-orphan")
    cart_items = relationship("CartItem", back_populates="listing", cascade="all, delete-orphan")

    def is_featured_active(self, now: Optional[datetime] = None) -> bool:
        """Featured and not yet past featured_until (strictly before)."""
        if not self.is_featured:
            return False
        if self.featured_until is None:
            return True
        return (now or utcnow()) < self.featured_until

    @property
    def featured_active(self) -> bool:
        return self.is_featured_active()

    @property
    def title(self) -> str:
        """Human readable label used in notifications."""
        parts = [str(part) for part in (self.year, self.brand, self.model) if part]
        return self.name or " ".join(parts) or f"Listing #{self.id}"

    def __repr__(self):
        return f"<Listing(id={self.id}, brand={self.brand}, model={self.model}, seller_type={self.seller_type})>"

# ------------------------------ LISTING IMAGE MODEL ------------------------------

class ListingImage(BaseModel):
    """Reference to an externally stored listing image."""

    __tablename__ = "listing_images"

    listing_id = Column(Integer, ForeignKey("listings.id"), nullable=False, index=True)
    url = Column(String(500), nullable=False)
    content_type = Column(String(100), nullable=True)

    listing = relationship("Listing", back_populates="images")

# ------------------------------ END OF FILE ------------------------------
