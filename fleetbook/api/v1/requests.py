from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from fleetbook.database import get_db
from fleetbook.dependencies import get_admin_user
from fleetbook.models.user import User
from fleetbook.models.vehicle_request import RequestStatus
from fleetbook.schemas.common import ERROR_RESPONSES
from fleetbook.schemas.vehicle_request import VehicleRequestCreateRequest, RequestDecisionRequest
from fleetbook.services.request_service import request_service

router = APIRouter(prefix="/requests")


@router.get("", summary="List vehicle requests with details (newest first)")
def list_requests(
    userId: Optional[int]           = Query(None, description="Only this employee's requests"),
    status: Optional[RequestStatus] = Query(None, description="pending | approved | rejected"),
    db:     Session                 = Depends(get_db),
):
    return request_service.list_requests(db, user_id=userId, status=status)


@router.get("/{request_id}", summary="Get vehicle request with details", responses=ERROR_RESPONSES)
def get_request(request_id: int, db: Session = Depends(get_db)):
    return request_service.get_request(db, request_id)


@router.post("", status_code=status.HTTP_201_CREATED, summary="Create vehicle request",
             responses=ERROR_RESPONSES)
def create_request(body: VehicleRequestCreateRequest, db: Session = Depends(get_db)):
    return request_service.create_request(db, body)


@router.patch("/{request_id}/status", summary="Approve or reject a request (Admin)",
              responses=ERROR_RESPONSES)
def decide_request(
    request_id: int,
    body:       RequestDecisionRequest,
    db:         Session = Depends(get_db),
    current_user: User  = Depends(get_admin_user),
):
    return request_service.decide_request(db, request_id, body.status, current_user, body.rejectionReason)
