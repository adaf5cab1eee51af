from __future__ import annotations
# salon_booking/schemas/task_payloads.py
from pydantic import BaseModel, Field
from typing import Optional

from salon_booking.models.notification import NotificationType


class BookingNotificationPayload(BaseModel):
    """Payload for delivering a booking notification to one user"""
    type_code: NotificationType = Field(..., description="Notification type")
    user_id: int = Field(..., description="Recipient user")
    salon_id: int = Field(..., description="Salon of the booking")
    booking_id: int = Field(..., description="Booking the event is about")
    employee_id: Optional[int] = Field(None, description="Stylist on the booking")
    message: Optional[str] = Field(None, description="Human readable text")
