# salon_booking/schemas/unavailability.py
from __future__ import annotations
from pydantic import BaseModel, Field
from typing import Optional, Union


class BlockCreateRequest(BaseModel):
    """Recurring weekly block; weekday 0 = Sunday"""
    weekday: Union[int, str] = Field(..., description="0 (Sunday) .. 6 (Saturday)")
    start_time: str = Field(..., description="HH:MM or HH:MM:SS, salon local time")
    end_time: str = Field(..., description="HH:MM or HH:MM:SS, salon local time")
    slot_interval_minutes: Optional[int] = Field(None, description="Slot step used within the block; defaults to DEFAULT_SLOT_INTERVAL_MINUTES")


class BlockDeleteRequest(BaseModel):
    """Identifies a block by its exact weekday and window"""
    weekday: Union[int, str] = Field(..., description="0 (Sunday) .. 6 (Saturday)")
    start_time: str = Field(..., description="Block start, HH:MM or HH:MM:SS")
    end_time: str = Field(..., description="Block end, HH:MM or HH:MM:SS")
