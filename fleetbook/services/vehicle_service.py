import logging
from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from fleetbook.models.vehicle import Vehicle, VehicleStatus
from fleetbook.models.vehicle_request import VehicleRequest
from fleetbook.models.user import User
from fleetbook.schemas.vehicle import VehicleCreateRequest, VehicleUpdateRequest
from fleetbook.services import availability
from fleetbook.utils.exceptions import (
    NotFoundException, DuplicateEntryException, VehicleInUseException,
)
from fleetbook.utils.timeutil import isoformat, to_utc_naive

logger = logging.getLogger(__name__)


def serialize_vehicle(v: Vehicle) -> dict:
    return {
        "id":              v.id,
        "model":           v.model,
        "plateNumber":     v.plateNumber,
        "capacity":        v.capacity,
        "fuelType":        v.fuelType,
        "status":          v.status.value,
        "lastMaintenance": isoformat(v.lastMaintenance),
        "imageUrl":        v.imageUrl,
        "createdAt":       isoformat(v.createdAt),
    }


class VehicleService:

    def list_vehicles(self, db: Session) -> list[dict]:
        return [serialize_vehicle(v) for v in db.query(Vehicle).order_by(Vehicle.id).all()]

    def list_available(self, db: Session, start: datetime, end: datetime) -> list[dict]:
        return [serialize_vehicle(v) for v in availability.available_vehicles(db, start, end)]

    def get_vehicle(self, db: Session, vehicle_id: int) -> dict:
        v = db.get(Vehicle, vehicle_id)
        if not v:
            raise NotFoundException("Vehicle")
        return serialize_vehicle(v)

    def create_vehicle(self, db: Session, data: VehicleCreateRequest, actor: User) -> dict:
        if db.query(Vehicle).filter(Vehicle.plateNumber == data.plateNumber).first():
            raise DuplicateEntryException("Plate number already registered", field="plateNumber")

        v = Vehicle(
            model=data.model,
            plateNumber=data.plateNumber,
            capacity=data.capacity,
            fuelType=data.fuelType,
            status=data.status,
            lastMaintenance=to_utc_naive(data.lastMaintenance) if data.lastMaintenance else None,
            imageUrl=data.imageUrl,
        )
        db.add(v)
        db.commit()
        db.refresh(v)
        logger.info(f"Vehicle #{v.id} ({v.plateNumber}) created by {actor.email}")
        return serialize_vehicle(v)

    def update_vehicle(self, db: Session, vehicle_id: int, data: VehicleUpdateRequest, actor: User) -> dict:
        v = db.get(Vehicle, vehicle_id)
        if not v:
            raise NotFoundException("Vehicle")

        if data.plateNumber and data.plateNumber != v.plateNumber:
            if db.query(Vehicle).filter(Vehicle.plateNumber == data.plateNumber, Vehicle.id != vehicle_id).first():
                raise DuplicateEntryException("Plate number already used", field="plateNumber")

        if data.model:           v.model       = data.model
        if data.plateNumber:     v.plateNumber = data.plateNumber
        if data.capacity:        v.capacity    = data.capacity
        if data.fuelType:        v.fuelType    = data.fuelType
        if data.status:          v.status      = data.status
        if data.imageUrl is not None:        v.imageUrl        = data.imageUrl
        if data.lastMaintenance is not None: v.lastMaintenance = to_utc_naive(data.lastMaintenance)

        db.commit()
        db.refresh(v)
        logger.info(f"Vehicle #{v.id} updated by {actor.email}")
        return serialize_vehicle(v)

    def delete_vehicle(self, db: Session, vehicle_id: int, actor: User) -> None:
        v = db.get(Vehicle, vehicle_id)
        if not v:
            raise NotFoundException("Vehicle")
        # Requests must keep resolving their vehicle in projections
        if db.query(VehicleRequest.id).filter(VehicleRequest.vehicleId == vehicle_id).first():
            raise VehicleInUseException()

        db.delete(v)
        db.commit()
        logger.info(f"Vehicle #{vehicle_id} ({v.plateNumber}) deleted by {actor.email}")

    def get_stats(self, db: Session) -> dict:
        counts = dict(db.query(Vehicle.status, func.count(Vehicle.id)).group_by(Vehicle.status).all())
        return {
            "totalVehicles": sum(counts.values()),
            "available":     counts.get(VehicleStatus.AVAILABLE, 0),
            "inUse":         counts.get(VehicleStatus.IN_USE, 0),
            "maintenance":   counts.get(VehicleStatus.MAINTENANCE, 0),
        }


vehicle_service = VehicleService()
