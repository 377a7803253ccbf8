# ------------------------------ IMPORTS ------------------------------
from sqlalchemy import Column, Integer, String, Text, Float, ForeignKey
from sqlalchemy.orm import relationship

from .base import BaseModel

# ------------------------------ DEALER MODEL ------------------------------

class Dealer(BaseModel):
    """Dealer model - a storefront owned by exactly one account."""

    __tablename__ = "dealers"

    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    email = Column(String(255), nullable=True)
    image_path = Column(String(500), nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)

    owner_id = Column(Integer, ForeignKey("accounts.id"), unique=True, nullable=False, comment="One dealer per account")

    owner = relationship("Account", back_populates="dealer")
    quote_requests = relationship("QuoteRequest", back_populates="dealer", cascade="all, delete-orphan")

    @property
    def listings(self):
        """Every listing sold by the dealer's owner."""
        return list(self.owner.listings) if self.owner else []

    def __repr__(self):
        return f"<Dealer(id={self.id}, name={self.name}, owner_id={self.owner_id})>"

# ------------------------------ END OF FILE ------------------------------
