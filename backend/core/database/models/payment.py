# ------------------------------ IMPORTS ------------------------------
from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, Enum as SQLEnum
from sqlalchemy.orm import relationship

from core.utils.data_helpers import utcnow
from .base import BaseModel, PaymentStatus

# ------------------------------ PAYMENT MODEL ------------------------------

class Payment(BaseModel):
    """Payment recorded at checkout."""

    __tablename__ = "payments"

    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    amount = Column(Numeric(12, 2), nullable=False)
    status = Column(SQLEnum(PaymentStatus, native_enum=False), nullable=False, default=PaymentStatus.COMPLETED)
    transaction_id = Column(String(64), unique=True, nullable=False)
    payment_date = Column(DateTime, nullable=False, default=utcnow)

    account = relationship("Account", back_populates="payments")

    def __repr__(self):
        return f"<Payment(id={self.id}, amount={self.amount}, status={self.status})>"

# ------------------------------ END OF FILE ------------------------------
