# ------------------------------ IMPORTS ------------------------------
from sqlalchemy import Column, Integer, String, Text, DateTime, ForeignKey, Index, Enum as SQLEnum
from sqlalchemy.orm import relationship

from core.exceptions import InvalidRequestError
from core.utils.data_helpers import utcnow
from .base import BaseModel, RequestType, RequestStatus

# ------------------------------ QUOTE REQUEST MODEL ------------------------------

class QuoteRequest(BaseModel):
    """QuoteRequest model - a dealer quote request or a private buyer/seller message.

    Status moves PENDING -> RESPONDED exactly once.
    """

    __tablename__ = "quote_requests"
    __table_args__ = (
        Index("ix_quote_request_recipient", "recipient_email", "request_type"),
    )

    listing_id = Column(Integer, ForeignKey("listings.id"), nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True, index=True, comment="Requester, empty for anonymous inquiries")
    dealer_id = Column(Integer, ForeignKey("dealers.id"), nullable=True, index=True)

    request_type = Column(SQLEnum(RequestType, native_enum=False), nullable=False)
    status = Column(SQLEnum(RequestStatus, native_enum=False), nullable=False, default=RequestStatus.PENDING)

    requester_email = Column(String(255), nullable=True)
    recipient_email = Column(String(255), nullable=True)
    message = Column(Text, nullable=True)
    response_message = Column(Text, nullable=True)

    request_date = Column(DateTime, nullable=False, default=utcnow)
    responded_at = Column(DateTime, nullable=True)

    listing = relationship("Listing", back_populates="quote_requests")
    account = relationship("Account", back_populates="sent_requests")
    dealer = relationship("Dealer", back_populates="quote_requests")

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    def mark_responded(self, response: str) -> None:
        """Attach the response and close the request."""
        if not self.is_pending:
            raise InvalidRequestError(
                f"Request {self.id} has already been answered",
                {"request_id": self.id, "status": self.status.value},
                error_code="ALREADY_RESPONDED"
            )
        self.response_message = response
        self.responded_at = utcnow()
        self.status = RequestStatus.RESPONDED

    def __repr__(self):
        return f"<QuoteRequest(id={self.id}, type={self.request_type}, status={self.status})>"

# ------------------------------ END OF FILE ------------------------------
