# ============================================================================
# salon_booking/api/v1/unavailability.py
# Stylist-owned recurring blocks (JWT authenticated)
# ============================================================================
from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
from typing import Optional

from salon_booking.api.dependencies import CurrentUser, require_stylist
from salon_booking.config.database import get_db
from salon_booking.core.clock import Clock, get_clock
from salon_booking.schemas.unavailability import BlockCreateRequest, BlockDeleteRequest
from salon_booking.services.unavailability.unavailability_service import UnavailabilityService

router = APIRouter(prefix="/unavailability", tags=["Unavailability"])


@router.post("", status_code=201)
def create_recurring_block(
        request: BlockCreateRequest,
        current_user: CurrentUser = Depends(require_stylist),
        clock: Clock = Depends(get_clock),
        db: Session = Depends(get_db)
):
    """Block a weekly window for the calling stylist"""
    block = UnavailabilityService.create_block(
        db=db,
        stylist_user_id=current_user.user_id,
        weekday=request.weekday,
        start_time=request.start_time,
        end_time=request.end_time,
        clock=clock,
        slot_interval_minutes=request.slot_interval_minutes
    )
    return block.to_dict()


@router.get("")
def list_recurring_blocks(
        weekday: Optional[str] = Query(None, description="Only this weekday (0 = Sunday)"),
        current_user: CurrentUser = Depends(require_stylist),
        db: Session = Depends(get_db)
):
    """Calling stylist's blocks ordered by weekday then start time"""
    blocks = UnavailabilityService.list_blocks(db, current_user.user_id, weekday=weekday)
    return [block.to_dict() for block in blocks]


@router.delete("")
def delete_recurring_block(
        request: BlockDeleteRequest,
        current_user: CurrentUser = Depends(require_stylist),
        db: Session = Depends(get_db)
):
    """Delete the block with exactly this weekday and window"""
    UnavailabilityService.delete_block(
        db=db,
        stylist_user_id=current_user.user_id,
        weekday=request.weekday,
        start_time=request.start_time,
        end_time=request.end_time
    )
    return {"message": "Recurring block deleted"}


@router.delete("/{block_id}")
def delete_recurring_block_by_id(
        block_id: int = Path(..., gt=0, description="The block ID"),
        current_user: CurrentUser = Depends(require_stylist),
        db: Session = Depends(get_db)
):
    UnavailabilityService.delete_block_by_id(db, current_user.user_id, block_id)
    return {"message": "Recurring block deleted", "id": block_id}
