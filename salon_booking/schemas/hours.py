# salon_booking/schemas/hours.py
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Optional, Dict


class DayHours(BaseModel):
    """Opening window of a salon on one weekday"""
    is_open: bool = Field(True, description="False closes the day")
    start_time: Optional[str] = Field(None, description="HH:MM or HH:MM:SS")
    end_time: Optional[str] = Field(None, description="HH:MM or HH:MM:SS")


class SalonHoursUpdate(BaseModel):
    """Keys are weekday names (SUNDAY..SATURDAY) or 0..6; null closes the day"""
    weekly_hours: Dict[str, Optional[DayHours]] = Field(..., description="Hours per weekday")


class DayAvailability(BaseModel):
    """Working window of a stylist on one weekday"""
    is_available: bool = Field(True, description="False removes the day")
    start_time: Optional[str] = Field(None, description="HH:MM or HH:MM:SS")
    end_time: Optional[str] = Field(None, description="HH:MM or HH:MM:SS")
    slot_interval_minutes: Optional[int] = Field(None, description="Minutes between offered starts; defaults to DEFAULT_SLOT_INTERVAL_MINUTES")


class EmployeeAvailabilityUpdate(BaseModel):
    weekly_availability: Dict[str, Optional[DayAvailability]] = Field(..., description="Availability per weekday")
