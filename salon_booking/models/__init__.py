# salon_booking/models/__init__.py
from .base import Base
from .salon import Salon, SalonAvailability, SalonStatus
from .employee import Employee, EmployeeAvailability, EmployeeUnavailability, employee_services
from .service import Service
from .booking import Booking, BookingService, BookingStatus, SLOT_HOLDING_STATUSES
from .payment import Payment, PaymentStatus
from .notification import NotificationInbox, NotificationType, NotificationStatus

__all__ = [
    "Base",
    "Salon",
    "SalonAvailability",
    "SalonStatus",
    "Employee",
    "EmployeeAvailability",
    "EmployeeUnavailability",
    "employee_services",
    "Service",
    "Booking",
    "BookingService",
    "BookingStatus",
    "SLOT_HOLDING_STATUSES",
    "Payment",
    "PaymentStatus",
    "NotificationInbox",
    "NotificationType",
    "NotificationStatus",
]
