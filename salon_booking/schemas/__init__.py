# salon_booking/schemas/__init__.py
from .booking import (
    ServiceSelection,
    BookingCreateRequest,
    RescheduleRequest,
    CancelRequest
)

from .unavailability import (
    BlockCreateRequest,
    BlockDeleteRequest
)

from .hours import (
    DayHours,
    SalonHoursUpdate,
    DayAvailability,
    EmployeeAvailabilityUpdate
)

from .task_payloads import BookingNotificationPayload
