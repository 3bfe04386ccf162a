import logging
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from leavedesk.models.notification import Notification, NotificationType

logger = logging.getLogger(__name__)


class NotificationService:
    @staticmethod
    def create_notification(
        db: Session,
        recipient_id: int,
        type: NotificationType,
        content: str,
        related_leave_id: Optional[int] = None,
        link: Optional[str] = None
    ) -> Notification:
        """
        Internal utility for creating notifications.
        """
        notification = Notification(
            recipient_id=recipient_id,
            type=type.value,
            content=content,
            related_leave_id=related_leave_id,
            link=link
        )
        db.add(notification)
        db.commit()
        db.refresh(notification)
        return notification

    @staticmethod
    def notify(
        db: Session,
        recipient_id: int,
        type: NotificationType,
        content: str,
        related_leave_id: Optional[int] = None,
        link: Optional[str] = None
    ) -> Optional[Notification]:
        """
        Fire-and-forget trigger. A failure is logged and never propagates to
        the operation that caused the notification.
        """
        try:
            return NotificationService.create_notification(
                db, recipient_id, type, content, related_leave_id, link
            )
        except Exception:
            db.rollback()
            logger.exception(
                "Notification failed",
                extra={"recipient_id": recipient_id, "type": getattr(type, "value", type), "leave_id": related_leave_id},
            )
            return None

    @staticmethod
    def mark_read_for_leaves(db: Session, leave_ids: Iterable[int]) -> int:
        """Mark notifications about the given (removed) leave requests as read; caller commits."""
        ids = list(leave_ids)
        if not ids:
            return 0
        return (
            db.query(Notification)
            .filter(Notification.related_leave_id.in_(ids), Notification.read.is_(False))
            .update({Notification.read: True}, synchronize_session=False)
        )
