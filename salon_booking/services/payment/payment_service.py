# salon_booking/services/payment/payment_service.py
"""Payment bookkeeping triggered by booking changes"""
import logging
from typing import List

from sqlalchemy.orm import Session

from salon_booking.models import Payment, PaymentStatus

logger = logging.getLogger(__name__)


class PaymentService:
    """Runs inside the caller's transaction; never commits on its own"""

    @staticmethod
    def refund_succeeded_payments(db: Session, booking_id: int) -> List[Payment]:
        """Mark every captured payment of a canceled booking as refunded"""
        payments = db.query(Payment).filter(
            Payment.booking_id == booking_id,
            Payment.status == PaymentStatus.SUCCEEDED
        ).with_for_update().all()

        for payment in payments:
            payment.status = PaymentStatus.REFUNDED

        if payments:
            db.flush()
            logger.info(f"Marked {len(payments)} payment(s) of booking {booking_id} as refunded")
        return payments

    @staticmethod
    def move_payments(db: Session, from_booking_id: int, to_booking_id: int) -> int:
        """Point payments of a rescheduled booking at its replacement"""
        moved = db.query(Payment).filter(
            Payment.booking_id == from_booking_id
        ).update({Payment.booking_id: to_booking_id}, synchronize_session=False)

        if moved:
            logger.info(f"Moved {moved} payment(s) from booking {from_booking_id} to {to_booking_id}")
        return moved
