# salon_booking/models/payment.py
"""Payment rows tied to a booking; capture happens in the payment service"""
from sqlalchemy import Column, Integer, Numeric, ForeignKey, Index, Enum as SQLAEnum
import enum

from salon_booking.models.base import Base, UTCDateTime, utcnow


class PaymentStatus(str, enum.Enum):
    PENDING = "PENDING"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class Payment(Base):
    __tablename__ = "payments"
    __table_args__ = (
        Index("idx_payments_booking_status", "booking_id", "status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=True)
    amount = Column(Numeric(10, 2), nullable=False)
    status = Column(
        SQLAEnum(PaymentStatus, name="payment_status", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=PaymentStatus.PENDING
    )

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    def __repr__(self):
        return f"<Payment(id={self.id}, booking_id={self.booking_id}, status={self.status})>"
