# salon_booking/models/salon.py
"""
Salon and its weekly operating hours
"""
from sqlalchemy import (
    Column, String, Integer, Time, ForeignKey, CheckConstraint, UniqueConstraint,
    Enum as SQLAEnum
)
from sqlalchemy.orm import relationship
import enum

from salon_booking.models.base import Base, UTCDateTime, utcnow


class SalonStatus(str, enum.Enum):
    """Approval state, moved by the admin service"""
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class Salon(Base):
    __tablename__ = "salons"

    id = Column(Integer, primary_key=True, autoincrement=True)
    owner_user_id = Column(Integer, nullable=False, unique=True, index=True)
    name = Column(String(160), nullable=False)

    # IANA zone, e.g. "America/New_York"; empty falls back to DEFAULT_TIMEZONE
    timezone = Column(String(64), nullable=True)
    status = Column(
        SQLAEnum(SalonStatus, name="salon_status", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=SalonStatus.PENDING,
        index=True
    )

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    hours = relationship(
        "SalonAvailability",
        back_populates="salon",
        cascade="all, delete-orphan",
        order_by="SalonAvailability.weekday"
    )
    employees = relationship("Employee", back_populates="salon")

    def __repr__(self):
        return f"<Salon(id={self.id}, name={self.name}, timezone={self.timezone})>"


class SalonAvailability(Base):
    """Salon is open on ``weekday`` (0 = Sunday) from start_time to end_time, local time"""
    __tablename__ = "salon_availability"
    __table_args__ = (
        UniqueConstraint("salon_id", "weekday", name="uq_salon_availability_weekday"),
        CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_salon_availability_weekday"),
        CheckConstraint("end_time > start_time", name="ck_salon_availability_window"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    salon_id = Column(Integer, ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, index=True)
    weekday = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    salon = relationship("Salon", back_populates="hours")

    def __repr__(self):
        return f"<SalonAvailability(salon_id={self.salon_id}, weekday={self.weekday})>"
