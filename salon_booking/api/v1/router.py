"""
API v1 router setup
Organized into: public slot lookup and JWT-authenticated booking, block and hours routes
"""
from fastapi import APIRouter

from salon_booking.api.v1 import timeslots, bookings, unavailability, hours

api_v1_router = APIRouter()

# ============================================================================
# PUBLIC ROUTES (No authentication required)
# ============================================================================
api_v1_router.include_router(timeslots.router)

# ============================================================================
# AUTHENTICATED ROUTES (JWT)
# ============================================================================
api_v1_router.include_router(bookings.router)
api_v1_router.include_router(unavailability.router)
api_v1_router.include_router(hours.router)
