import logging

from sqlalchemy.orm import Session

from fleetbook.models.user import User
from fleetbook.models.vehicle import Vehicle
from fleetbook.models.vehicle_access import VehicleAccess
from fleetbook.models.vehicle_request import VehicleRequest
from fleetbook.schemas.access_log import AccessLogCreateRequest
from fleetbook.utils.exceptions import NotFoundException
from fleetbook.utils.timeutil import isoformat, to_utc_naive, utcnow

logger = logging.getLogger(__name__)


def serialize_access(a: VehicleAccess) -> dict:
    return {
        "id":         a.id,
        "requestId":  a.requestId,
        "employeeId": a.employeeId,
        "vehicleId":  a.vehicleId,
        "accessTime": isoformat(a.accessTime),
        "accessCode": a.accessCode,
        "action":     a.action,
        "successful": a.successful,
        "location":   a.location,
        "createdAt":  isoformat(a.createdAt),
    }


class AccessLogService:
    """
    Audit sink for vehicle access attempts.

    The code is recorded as presented; checking it against the request's
    issued code happens upstream, at the device.
    """

    def record_access(self, db: Session, data: AccessLogCreateRequest) -> dict:
        # SQLite does not enforce foreign keys
        if not db.get(VehicleRequest, data.requestId):
            raise NotFoundException("Request")
        if not db.get(User, data.employeeId):
            raise NotFoundException("Employee")
        if not db.get(Vehicle, data.vehicleId):
            raise NotFoundException("Vehicle")

        entry = VehicleAccess(
            requestId=data.requestId,
            employeeId=data.employeeId,
            vehicleId=data.vehicleId,
            accessTime=to_utc_naive(data.accessTime) if data.accessTime else utcnow(),
            accessCode=data.accessCode,
            action=data.action,
            successful=data.successful,
            location=data.location,
        )
        db.add(entry)
        db.commit()
        db.refresh(entry)
        level = logging.INFO if data.successful else logging.WARNING
        logger.log(level, f"Access {data.action} on vehicle #{data.vehicleId} for request "
                          f"#{data.requestId}: {'ok' if data.successful else 'FAILED'}")
        return serialize_access(entry)

    def list_access_logs(self, db: Session) -> list[dict]:
        items = db.query(VehicleAccess)\
                  .order_by(VehicleAccess.createdAt.desc(), VehicleAccess.id.desc()).all()
        return [serialize_access(a) for a in items]


access_log_service = AccessLogService()
