import logging

from sqlalchemy.orm import Session

from fleetbook.models.notification import Notification, NotificationType
from fleetbook.models.user import User
from fleetbook.utils.exceptions import NotFoundException, ForbiddenException
from fleetbook.utils.timeutil import isoformat

logger = logging.getLogger(__name__)


def serialize_notification(n: Notification) -> dict:
    return {
        "id":        n.id,
        "userId":    n.userId,
        "title":     n.title,
        "message":   n.message,
        "type":      n.type.value,
        "read":      n.read,
        "createdAt": isoformat(n.createdAt),
    }


class NotificationService:

    def notify(
        self, db: Session, user_id: int, title: str, message: str,
        type_: NotificationType = NotificationType.INFO,
    ) -> Notification:
        """Stage a notification on the caller's session. The caller commits."""
        n = Notification(userId=user_id, title=title, message=message, type=type_, read=False)
        db.add(n)
        return n

    def list_for_user(self, db: Session, user_id: int) -> list[dict]:
        items = db.query(Notification).filter(Notification.userId == user_id)\
                  .order_by(Notification.createdAt.desc(), Notification.id.desc()).all()
        return [serialize_notification(n) for n in items]

    def mark_read(self, db: Session, notification_id: int, current_user: User) -> dict:
        n = db.get(Notification, notification_id)
        if not n:
            raise NotFoundException("Notification")
        if n.userId != current_user.id:
            raise ForbiddenException("You can only update your own notifications")
        n.read = True
        db.commit()
        return serialize_notification(n)

    def mark_all_read(self, db: Session, current_user: User) -> int:
        count = db.query(Notification).filter(
            Notification.userId == current_user.id,
            Notification.read == False,  # noqa: E712
        ).update({Notification.read: True}, synchronize_session=False)
        db.commit()
        logger.info(f"Marked {count} notification(s) read for user #{current_user.id}")
        return count


notification_service = NotificationService()
