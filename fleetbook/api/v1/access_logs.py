from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fleetbook.database import get_db
from fleetbook.dependencies import get_admin_user
from fleetbook.models.user import User
from fleetbook.schemas.access_log import AccessLogCreateRequest
from fleetbook.services.access_log_service import access_log_service

router = APIRouter(prefix="/access-logs")


@router.get("", summary="Vehicle access audit trail (Admin)")
def list_access_logs(
    db: Session = Depends(get_db),
    _:  User    = Depends(get_admin_user),
):
    return access_log_service.list_access_logs(db)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Record a vehicle access attempt")
def record_access(body: AccessLogCreateRequest, db: Session = Depends(get_db)):
    return access_log_service.record_access(db, body)
