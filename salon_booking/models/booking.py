# salon_booking/models/booking.py
"""
Booking and its snapshotted service lines.

``scheduled_start``/``scheduled_end`` never change once written; a reschedule
cancels the row and inserts a replacement.
"""
from sqlalchemy import (
    Column, Integer, Text, Numeric, ForeignKey, CheckConstraint, Index,
    Enum as SQLAEnum
)
from sqlalchemy.orm import relationship
import enum

from salon_booking.models.base import Base, UTCDateTime, utcnow


class BookingStatus(str, enum.Enum):
    """Lifecycle of a booking"""
    PENDING = "PENDING"        # checkout in progress, holds no slot
    SCHEDULED = "SCHEDULED"
    COMPLETED = "COMPLETED"
    CANCELED = "CANCELED"

    @property
    def is_terminal(self) -> bool:
        return not ALLOWED_TRANSITIONS[self]

    def can_transition_to(self, target: "BookingStatus") -> bool:
        return target in ALLOWED_TRANSITIONS[self]


ALLOWED_TRANSITIONS = {
    BookingStatus.PENDING: frozenset({BookingStatus.SCHEDULED, BookingStatus.CANCELED}),
    BookingStatus.SCHEDULED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELED}),
    BookingStatus.COMPLETED: frozenset(),
    BookingStatus.CANCELED: frozenset(),
}

# Statuses whose interval occupies the stylist's time
SLOT_HOLDING_STATUSES = (BookingStatus.SCHEDULED, BookingStatus.COMPLETED)


class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        CheckConstraint("scheduled_end > scheduled_start", name="ck_bookings_interval"),
        Index("idx_bookings_salon_start", "salon_id", "scheduled_start"),
        Index("idx_bookings_customer_start", "customer_user_id", "scheduled_start"),
        Index("idx_bookings_status_end", "status", "scheduled_end"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    salon_id = Column(Integer, ForeignKey("salons.id"), nullable=False)
    customer_user_id = Column(Integer, nullable=False)

    scheduled_start = Column(UTCDateTime, nullable=False)
    scheduled_end = Column(UTCDateTime, nullable=False)
    status = Column(
        SQLAEnum(BookingStatus, name="booking_status", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=BookingStatus.SCHEDULED
    )
    notes = Column(Text, nullable=True)

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)
    canceled_at = Column(UTCDateTime, nullable=True)

    lines = relationship(
        "BookingService",
        back_populates="booking",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="BookingService.id"
    )

    def __repr__(self):
        return f"<Booking(id={self.id}, status={self.status}, start={self.scheduled_start})>"

    @property
    def duration_minutes(self) -> int:
        return int((self.scheduled_end - self.scheduled_start).total_seconds() // 60)

    @property
    def employee_ids(self):
        return sorted({line.employee_id for line in self.lines})

    @property
    def total_price(self):
        return sum((line.price for line in self.lines), 0)


class BookingService(Base):
    """One service line of a booking, price and duration frozen at booking time"""
    __tablename__ = "booking_services"
    __table_args__ = (
        Index("idx_bs_employee", "employee_id"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False, index=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    duration_minutes = Column(Integer, nullable=False)

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)

    booking = relationship("Booking", back_populates="lines")
