# ============================================================================
# salon_booking/api/v1/bookings.py
# Customer and stylist booking endpoints (JWT authenticated)
# ============================================================================
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
from typing import Optional

from salon_booking.api.dependencies import CurrentUser, require_customer, require_stylist
from salon_booking.config.database import get_db
from salon_booking.core.clock import Clock, get_clock
from salon_booking.models import BookingStatus, Salon
from salon_booking.schemas.booking import BookingCreateRequest, CancelRequest, RescheduleRequest
from salon_booking.services.booking.booking_service import BookingService, CancelResult, booking_to_dict
from salon_booking.services.notification.notification_service import BookingNotifier, get_notifier
from salon_booking.utils.timezones import parse_instant, resolve_zone

router = APIRouter(tags=["Bookings"])


def _zone_for(db: Session, salon_id: int):
    salon = db.query(Salon).filter(Salon.id == salon_id).first()
    return resolve_zone(salon.timezone if salon else None)


def _cancel_response(db: Session, result: CancelResult) -> dict:
    booking = result.booking
    return {
        "message": "Booking canceled successfully",
        "booking_id": booking.id,
        "previous_status": result.previous_status.value,
        "new_status": booking.status.value,
        "canceled_at": booking.canceled_at.isoformat() if booking.canceled_at else None,
        "refunded_payment_ids": [payment.id for payment in result.refunded_payments],
        "appointment": booking_to_dict(booking, _zone_for(db, booking.salon_id)),
    }


@router.post("/salons/{salon_id}/stylists/{employee_id}/book", status_code=201)
def book_time_slot(
        request: BookingCreateRequest,
        salon_id: int = Path(..., gt=0, description="The salon ID"),
        employee_id: int = Path(..., gt=0, description="The stylist (employee) ID"),
        current_user: CurrentUser = Depends(require_customer),
        clock: Clock = Depends(get_clock),
        notifier: BookingNotifier = Depends(get_notifier),
        db: Session = Depends(get_db)
):
    """Book a stylist for one or more services starting at scheduled_start"""
    scheduled_start = parse_instant(request.scheduled_start)

    booking = BookingService.create_booking(
        db=db,
        salon_id=salon_id,
        employee_id=employee_id,
        customer_user_id=current_user.user_id,
        scheduled_start=scheduled_start,
        service_ids=[selection.service_id for selection in request.services],
        clock=clock,
        notifier=notifier,
        notes=request.notes
    )

    return {
        "message": "Time slot booked successfully",
        "booking_id": booking.id,
        "appointment": booking_to_dict(booking, _zone_for(db, booking.salon_id)),
    }


@router.post("/bookings/reschedule", status_code=201)
def reschedule_booking(
        request: RescheduleRequest,
        current_user: CurrentUser = Depends(require_customer),
        clock: Clock = Depends(get_clock),
        notifier: BookingNotifier = Depends(get_notifier),
        db: Session = Depends(get_db)
):
    """Cancel a scheduled booking and book the same services at a new time"""
    new_start = parse_instant(request.scheduled_start)

    old, new = BookingService.reschedule_booking(
        db=db,
        booking_id=request.booking_id,
        customer_user_id=current_user.user_id,
        new_start=new_start,
        clock=clock,
        notifier=notifier
    )

    return {
        "message": "Booking rescheduled successfully",
        "old_booking_id": old.id,
        "new_booking_id": new.id,
        "appointment": booking_to_dict(new, _zone_for(db, new.salon_id)),
    }


@router.post("/bookings/cancel")
def cancel_booking(
        request: CancelRequest,
        current_user: CurrentUser = Depends(require_customer),
        clock: Clock = Depends(get_clock),
        notifier: BookingNotifier = Depends(get_notifier),
        db: Session = Depends(get_db)
):
    """Customer cancels one of their scheduled bookings"""
    result = BookingService.cancel_booking(
        db=db,
        booking_id=request.booking_id,
        customer_user_id=current_user.user_id,
        clock=clock,
        notifier=notifier
    )
    return _cancel_response(db, result)


@router.post("/stylist/bookings/cancel")
def cancel_booking_as_stylist(
        request: CancelRequest,
        current_user: CurrentUser = Depends(require_stylist),
        clock: Clock = Depends(get_clock),
        notifier: BookingNotifier = Depends(get_notifier),
        db: Session = Depends(get_db)
):
    """Stylist cancels a scheduled booking they are assigned to"""
    result = BookingService.cancel_booking_as_stylist(
        db=db,
        booking_id=request.booking_id,
        stylist_user_id=current_user.user_id,
        clock=clock,
        notifier=notifier
    )
    return _cancel_response(db, result)


@router.get("/bookings/mine")
def list_my_bookings(
        status: Optional[BookingStatus] = Query(None, description="Filter by booking status"),
        current_user: CurrentUser = Depends(require_customer),
        db: Session = Depends(get_db)
):
    """Caller's bookings, newest first"""
    bookings = BookingService.list_customer_bookings(db, current_user.user_id, status=status)
    zones = {}
    data = []
    for booking in bookings:
        if booking.salon_id not in zones:
            zones[booking.salon_id] = _zone_for(db, booking.salon_id)
        data.append(booking_to_dict(booking, zones[booking.salon_id]))
    return {"data": data, "count": len(data)}


@router.delete("/bookings/pending/{booking_id}")
def delete_pending_booking(
        booking_id: int = Path(..., gt=0, description="The pending booking ID"),
        current_user: CurrentUser = Depends(require_customer),
        db: Session = Depends(get_db)
):
    """Remove an abandoned checkout"""
    BookingService.delete_pending_booking(db, booking_id, current_user.user_id)
    return {"message": "Pending booking deleted", "booking_id": booking_id}
