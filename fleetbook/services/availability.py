"""
Date-range availability of vehicles.

A vehicle is bookable for [start, end] when its static status is
``available`` and no *approved* request on it overlaps the window. Overlap
is closed on both ends: a booking ending exactly when another starts still
conflicts.
"""
from datetime import datetime

from sqlalchemy import and_
from sqlalchemy.orm import Session

from fleetbook.models.vehicle import Vehicle, VehicleStatus
from fleetbook.models.vehicle_request import VehicleRequest, RequestStatus
from fleetbook.utils.exceptions import InvalidDateRangeException
from fleetbook.utils.timeutil import to_utc_naive


def intervals_overlap(start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime) -> bool:
    return start_a <= end_b and end_a >= start_b


def _overlapping_approved(start: datetime, end: datetime):
    return and_(
        VehicleRequest.status == RequestStatus.APPROVED,
        VehicleRequest.startDate <= end,
        VehicleRequest.endDate   >= start,
    )


def booked_vehicle_ids(db: Session, start: datetime, end: datetime) -> set[int]:
    """Ids of vehicles holding an approved booking that overlaps [start, end]."""
    rows = db.query(VehicleRequest.vehicleId).filter(_overlapping_approved(start, end)).distinct().all()
    return {vehicle_id for (vehicle_id,) in rows}


def available_vehicles(db: Session, start: datetime, end: datetime) -> list[Vehicle]:
    start, end = to_utc_naive(start), to_utc_naive(end)
    if end <= start:
        raise InvalidDateRangeException()

    candidates = db.query(Vehicle).filter(Vehicle.status == VehicleStatus.AVAILABLE)\
                   .order_by(Vehicle.id).all()
    booked = booked_vehicle_ids(db, start, end)
    return [v for v in candidates if v.id not in booked]


def has_conflict(db: Session, vehicle_id: int, start: datetime, end: datetime,
                 exclude_id: int | None = None) -> bool:
    """True if another approved request on the vehicle overlaps [start, end]."""
    q = db.query(VehicleRequest.id).filter(
        VehicleRequest.vehicleId == vehicle_id,
        _overlapping_approved(to_utc_naive(start), to_utc_naive(end)),
    )
    if exclude_id:
        q = q.filter(VehicleRequest.id != exclude_id)
    return q.first() is not None
