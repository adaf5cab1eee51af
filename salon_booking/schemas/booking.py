# salon_booking/schemas/booking.py
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Optional, List


class ServiceSelection(BaseModel):
    """One service requested in a booking"""
    service_id: int = Field(..., gt=0, description="Service identifier")


class BookingCreateRequest(BaseModel):
    """Book a stylist for one or more services"""
    scheduled_start: str = Field(
        ...,
        description="ISO-8601 start instant with offset, e.g. 2025-11-12T09:00:00-05:00"
    )
    services: List[ServiceSelection] = Field(..., min_length=1, description="Requested services")
    notes: Optional[str] = Field("", max_length=2000, description="Notes for the stylist")


class RescheduleRequest(BaseModel):
    """Move a scheduled booking to a new start"""
    booking_id: int = Field(..., gt=0, description="Booking to move")
    scheduled_start: str = Field(..., description="New ISO-8601 start instant with offset")


class CancelRequest(BaseModel):
    booking_id: int = Field(..., gt=0, description="Booking to cancel")
