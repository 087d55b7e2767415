from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fleetbook.database import get_db
from fleetbook.dependencies import get_current_user
from fleetbook.models.user import User
from fleetbook.schemas.common import success_response, ERROR_RESPONSES
from fleetbook.services.notification_service import notification_service

router = APIRouter(prefix="/notifications")


@router.get("", summary="Current user's notifications (newest first)")
def list_notifications(
    db:           Session = Depends(get_db),
    current_user: User    = Depends(get_current_user),
):
    return notification_service.list_for_user(db, current_user.id)


@router.patch("/read-all", summary="Mark all of the current user's notifications read")
def mark_all_read(
    db:           Session = Depends(get_db),
    current_user: User    = Depends(get_current_user),
):
    count = notification_service.mark_all_read(db, current_user)
    return success_response("Notifications marked as read", {"updated": count})


@router.patch("/{notification_id}/read", summary="Mark a notification read", responses=ERROR_RESPONSES)
def mark_read(
    notification_id: int,
    db:              Session = Depends(get_db),
    current_user:    User    = Depends(get_current_user),
):
    return notification_service.mark_read(db, notification_id, current_user)
