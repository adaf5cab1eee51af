# ============================================================================
# salon_booking/api/v1/timeslots.py
# Public slot lookup - thin HTTP layer
# ============================================================================
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional

from salon_booking.config.database import get_db
from salon_booking.core.clock import Clock, get_clock
from salon_booking.services.availability.availability_service import AvailabilityService

router = APIRouter(tags=["Timeslots"])


@router.get("/salons/{salon_id}/stylists/{employee_id}/timeslots")
def get_available_timeslots(
        salon_id: int = Path(..., gt=0, description="The salon ID"),
        employee_id: int = Path(..., gt=0, description="The stylist (employee) ID"),
        start_date: Optional[date] = Query(None, description="First civil date (salon time), defaults to today"),
        end_date: Optional[date] = Query(None, description="Last civil date (salon time), inclusive"),
        service_duration: Optional[int] = Query(None, description="Minutes each slot must fit"),
        service_ids: Optional[List[int]] = Query(None, description="Services whose summed duration each slot must fit"),
        clock: Clock = Depends(get_clock),
        db: Session = Depends(get_db)
):
    """
    Bookable start times of a stylist per civil date.
    Times are UTC instants with salon-local display values.
    """
    return AvailabilityService.get_time_slots(
        db=db,
        salon_id=salon_id,
        employee_id=employee_id,
        clock=clock,
        start_date=start_date,
        end_date=end_date,
        service_duration=service_duration,
        service_ids=service_ids
    )
