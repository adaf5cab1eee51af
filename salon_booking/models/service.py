# salon_booking/models/service.py
"""
Service Model - catalog entries a stylist can perform.
Live price/duration only; bookings keep their own snapshot.
"""
from sqlalchemy import Column, String, Numeric, Integer, ForeignKey, Boolean, Text
from sqlalchemy.orm import relationship

from salon_booking.models.base import Base, UTCDateTime, utcnow
from salon_booking.models.employee import employee_services


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, autoincrement=True)
    salon_id = Column(Integer, ForeignKey("salons.id", ondelete="CASCADE"), nullable=False, index=True)

    name = Column(String(160), nullable=False)
    description = Column(Text, nullable=True)
    duration_minutes = Column(Integer, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)

    # Soft delete
    is_active = Column(Boolean, default=True, nullable=False, index=True)

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    employees = relationship("Employee", secondary=employee_services, back_populates="services")

    def __repr__(self):
        return f"<Service(id={self.id}, name={self.name}, salon_id={self.salon_id})>"
