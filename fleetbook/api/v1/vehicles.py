from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from fleetbook.database import get_db
from fleetbook.dependencies import get_admin_user
from fleetbook.models.user import User
from fleetbook.schemas.common import success_response, ERROR_RESPONSES
from fleetbook.schemas.vehicle import VehicleCreateRequest, VehicleUpdateRequest
from fleetbook.services.vehicle_service import vehicle_service
from fleetbook.utils.exceptions import MissingDatesException

router = APIRouter(prefix="/vehicles")


@router.get("", summary="List all vehicles")
def list_vehicles(db: Session = Depends(get_db)):
    return vehicle_service.list_vehicles(db)


# Declared before /{vehicle_id} so "available" is not parsed as an id
@router.get("/available", summary="Vehicles free for a date range", responses=ERROR_RESPONSES)
def list_available(
    startDate: Optional[datetime] = Query(None, description="ISO date or datetime"),
    endDate:   Optional[datetime] = Query(None, description="ISO date or datetime"),
    db:        Session            = Depends(get_db),
):
    if startDate is None or endDate is None:
        raise MissingDatesException()
    return vehicle_service.list_available(db, startDate, endDate)


@router.get("/{vehicle_id}", summary="Get vehicle by ID", responses=ERROR_RESPONSES)
def get_vehicle(vehicle_id: int, db: Session = Depends(get_db)):
    return vehicle_service.get_vehicle(db, vehicle_id)


@router.post("", summary="Create vehicle (Admin)", responses=ERROR_RESPONSES)
def create_vehicle(
    body: VehicleCreateRequest,
    db:   Session = Depends(get_db),
    current_user: User = Depends(get_admin_user),
):
    return vehicle_service.create_vehicle(db, body, current_user)


@router.patch("/{vehicle_id}", summary="Update vehicle (Admin)", responses=ERROR_RESPONSES)
def update_vehicle(
    vehicle_id: int,
    body:       VehicleUpdateRequest,
    db:         Session = Depends(get_db),
    current_user: User  = Depends(get_admin_user),
):
    return vehicle_service.update_vehicle(db, vehicle_id, body, current_user)


@router.delete("/{vehicle_id}", summary="Delete vehicle (Admin)", responses=ERROR_RESPONSES)
def delete_vehicle(
    vehicle_id: int,
    db:         Session = Depends(get_db),
    current_user: User  = Depends(get_admin_user),
):
    vehicle_service.delete_vehicle(db, vehicle_id, current_user)
    return success_response("Vehicle deleted successfully")
