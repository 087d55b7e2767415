from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from fleetbook.database import get_db
from fleetbook.services.request_service import request_service
from fleetbook.services.vehicle_service import vehicle_service

router = APIRouter(prefix="/stats")


@router.get("/vehicles", summary="Vehicle counts by status")
def vehicle_stats(db: Session = Depends(get_db)):
    return vehicle_service.get_stats(db)


@router.get("/pending-requests", summary="Number of pending requests")
def pending_requests_count(db: Session = Depends(get_db)):
    return {"count": request_service.pending_count(db)}
