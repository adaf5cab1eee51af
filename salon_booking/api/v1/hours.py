# ============================================================================
# salon_booking/api/v1/hours.py
# Salon owner endpoints for weekly hours (JWT authenticated)
# ============================================================================
from fastapi import APIRouter, Depends, Path
from sqlalchemy.orm import Session

from salon_booking.api.dependencies import CurrentUser, require_owner
from salon_booking.config.database import get_db
from salon_booking.core.clock import Clock, get_clock
from salon_booking.schemas.hours import EmployeeAvailabilityUpdate, SalonHoursUpdate
from salon_booking.services.hours.hours_service import HoursService

router = APIRouter(prefix="/salons/{salon_id}", tags=["Hours"])


@router.get("/hours")
def get_salon_hours(
        salon_id: int = Path(..., gt=0, description="The salon ID"),
        current_user: CurrentUser = Depends(require_owner),
        db: Session = Depends(get_db)
):
    return HoursService.get_salon_hours(db, salon_id, current_user.user_id)


@router.put("/hours")
def set_salon_hours(
        request: SalonHoursUpdate,
        salon_id: int = Path(..., gt=0, description="The salon ID"),
        current_user: CurrentUser = Depends(require_owner),
        clock: Clock = Depends(get_clock),
        db: Session = Depends(get_db)
):
    """Upsert or close weekdays; the whole update is rejected on the first error"""
    weekly = {
        day: (hours.model_dump() if hours is not None else None)
        for day, hours in request.weekly_hours.items()
    }
    return HoursService.set_salon_hours(db, salon_id, current_user.user_id, weekly, clock)


@router.get("/stylists/{employee_id}/availability")
def get_employee_availability(
        salon_id: int = Path(..., gt=0, description="The salon ID"),
        employee_id: int = Path(..., gt=0, description="The stylist (employee) ID"),
        current_user: CurrentUser = Depends(require_owner),
        db: Session = Depends(get_db)
):
    return HoursService.get_employee_availability(db, salon_id, employee_id, current_user.user_id)


@router.put("/stylists/{employee_id}/availability")
def set_employee_availability(
        request: EmployeeAvailabilityUpdate,
        salon_id: int = Path(..., gt=0, description="The salon ID"),
        employee_id: int = Path(..., gt=0, description="The stylist (employee) ID"),
        current_user: CurrentUser = Depends(require_owner),
        clock: Clock = Depends(get_clock),
        db: Session = Depends(get_db)
):
    """Each day must fit inside the salon's hours for that weekday"""
    weekly = {
        day: (availability.model_dump() if availability is not None else None)
        for day, availability in request.weekly_availability.items()
    }
    return HoursService.set_employee_availability(
        db, salon_id, employee_id, current_user.user_id, weekly, clock
    )
