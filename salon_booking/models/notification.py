# salon_booking/models/notification.py
"""In-app notification inbox written by the notification worker"""
from sqlalchemy import Column, String, Integer, Index, Enum as SQLAEnum
import enum

from salon_booking.models.base import Base, UTCDateTime, utcnow


class NotificationType(str, enum.Enum):
    BOOKING_CREATED = "BOOKING_CREATED"
    BOOKING_RESCHEDULED = "BOOKING_RESCHEDULED"
    BOOKING_CANCELED = "BOOKING_CANCELED"


class NotificationStatus(str, enum.Enum):
    UNREAD = "UNREAD"
    READ = "READ"


class NotificationInbox(Base):
    __tablename__ = "notifications_inbox"
    __table_args__ = (
        Index("idx_notifications_user_status", "user_id", "status"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=False)
    salon_id = Column(Integer, nullable=True)
    employee_id = Column(Integer, nullable=True)
    booking_id = Column(Integer, nullable=True)
    type_code = Column(String(64), nullable=False)
    status = Column(
        SQLAEnum(NotificationStatus, name="notification_status", values_callable=lambda obj: [e.value for e in obj]),
        nullable=False,
        default=NotificationStatus.UNREAD
    )
    message = Column(String(1000), nullable=True)

    created_at = Column(UTCDateTime, default=utcnow, nullable=False)
