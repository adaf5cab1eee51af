# salon_booking/models/employee.py
"""
Stylists, the services they offer, their weekly working hours and their
recurring unavailability blocks.
"""
from sqlalchemy import (
    Column, String, Integer, Boolean, Time, ForeignKey, Table,
    CheckConstraint, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship

from salon_booking.models.base import Base, UTCDateTime, utcnow


# Offered-services set of a stylist
employee_services = Table(
    "employee_services",
    Base.metadata,
    Column("employee_id", Integer, ForeignKey("employees.id", ondelete="CASCADE"), primary_key=True),
    Column("service_id", Integer, ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
)


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, autoincrement=True)
    salon_id = Column(Integer, ForeignKey("salons.id"), nullable=False, index=True)
    user_id = Column(Integer, nullable=False, unique=True, index=True)
    title = Column(String(120), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    # Bumped by the conflict guard; the UPDATE is the per-employee reservation lock
    reservation_version = Column(Integer, default=0, nullable=False)

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    salon = relationship("Salon", back_populates="employees")
    services = relationship("Service", secondary=employee_services, back_populates="employees")
    availability = relationship(
        "EmployeeAvailability",
        back_populates="employee",
        cascade="all, delete-orphan",
        order_by="EmployeeAvailability.weekday"
    )
    unavailability = relationship(
        "EmployeeUnavailability",
        back_populates="employee",
        cascade="all, delete-orphan"
    )

    def __repr__(self):
        return f"<Employee(id={self.id}, salon_id={self.salon_id}, user_id={self.user_id})>"


class EmployeeAvailability(Base):
    """Working hours of a stylist for one weekday, local salon time"""
    __tablename__ = "employee_availability"
    __table_args__ = (
        UniqueConstraint("employee_id", "weekday", name="uq_employee_availability_weekday"),
        CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_employee_availability_weekday"),
        CheckConstraint("end_time > start_time", name="ck_employee_availability_window"),
        CheckConstraint("slot_interval_minutes > 0", name="ck_employee_availability_interval"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    weekday = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    slot_interval_minutes = Column(Integer, default=30, nullable=False)

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    employee = relationship("Employee", back_populates="availability")


class EmployeeUnavailability(Base):
    """Weekly-repeating window during which a stylist takes no bookings"""
    __tablename__ = "employee_unavailability"
    __table_args__ = (
        CheckConstraint("weekday BETWEEN 0 AND 6", name="ck_employee_unavailability_weekday"),
        CheckConstraint("end_time > start_time", name="ck_employee_unavailability_window"),
        Index("idx_eua_emp_weekday_start", "employee_id", "weekday", "start_time"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    employee_id = Column(Integer, ForeignKey("employees.id", ondelete="CASCADE"), nullable=False)
    weekday = Column(Integer, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    slot_interval_minutes = Column(Integer, default=30, nullable=False)

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime, default=utcnow, onupdate=utcnow, nullable=False)

    employee = relationship("Employee", back_populates="unavailability")

    def to_dict(self):
        """Convert to dictionary for API responses"""
        return {
            "id": self.id,
            "employee_id": self.employee_id,
            "weekday": self.weekday,
            "start_time": self.start_time.strftime("%H:%M:%S"),
            "end_time": self.end_time.strftime("%H:%M:%S"),
            "slot_interval_minutes": self.slot_interval_minutes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
