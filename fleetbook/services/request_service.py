import logging

from sqlalchemy.orm import Session

from fleetbook.config import settings
from fleetbook.models.notification import NotificationType
from fleetbook.models.user import User
from fleetbook.models.vehicle import Vehicle
from fleetbook.models.vehicle_request import VehicleRequest, RequestStatus
from fleetbook.schemas.vehicle_request import VehicleRequestCreateRequest
from fleetbook.services import availability
from fleetbook.services.auth_service import serialize_user
from fleetbook.services.notification_service import notification_service
from fleetbook.services.vehicle_service import serialize_vehicle
from fleetbook.utils.exceptions import (
    NotFoundException, ValidationException, InvalidDateRangeException, PastStartDateException,
    VehicleUnavailableException, RequestAlreadyDecidedException, AccessCodeExhaustedException,
    DataIntegrityException,
)
from fleetbook.utils.locks import KeyedLock
from fleetbook.utils.security import generate_access_code
from fleetbook.utils.timeutil import isoformat, to_utc_naive, utcnow

logger = logging.getLogger(__name__)


def serialize_request(r: VehicleRequest) -> dict:
    return {
        "id":          r.id,
        "employeeId":  r.employeeId,
        "vehicleId":   r.vehicleId,
        "startDate":   isoformat(r.startDate),
        "endDate":     isoformat(r.endDate),
        "purpose":     r.purpose,
        "destination": r.destination,
        "status":      r.status.value,
        "accessCode":  r.accessCode,
        "approvedBy":  r.approvedBy,
        "approvedAt":  isoformat(r.approvedAt),
        "createdAt":   isoformat(r.createdAt),
    }


class RequestService:
    """
    Vehicle request lifecycle: pending -> approved | rejected.

    Availability checks and the writes that depend on them run under a
    per-vehicle lock so two callers cannot both claim the same window.
    """

    def __init__(self):
        self._vehicle_locks = KeyedLock()

    # ─── Projection ───────────────────────────────────────────────────────────
    def project(self, db: Session, r: VehicleRequest) -> dict:
        """Join the request with its employee, vehicle and (if any) approver."""
        employee = db.get(User, r.employeeId)
        if employee is None:
            raise DataIntegrityException(f"Request #{r.id} references missing employee #{r.employeeId}")
        vehicle = db.get(Vehicle, r.vehicleId)
        if vehicle is None:
            raise DataIntegrityException(f"Request #{r.id} references missing vehicle #{r.vehicleId}")
        approver = db.get(User, r.approvedBy) if r.approvedBy else None
        if r.approvedBy and approver is None:
            raise DataIntegrityException(f"Request #{r.id} references missing approver #{r.approvedBy}")

        data = serialize_request(r)
        data["employee"] = serialize_user(employee)
        data["vehicle"]  = serialize_vehicle(vehicle)
        data["approver"] = serialize_user(approver) if approver else None
        return data

    # ─── Queries ──────────────────────────────────────────────────────────────
    def list_requests(
        self, db: Session,
        user_id: int | None = None,
        status: RequestStatus | None = None,
    ) -> list[dict]:
        """Most recent first. Filters combine; none means every request."""
        q = db.query(VehicleRequest)
        if user_id is not None:
            q = q.filter(VehicleRequest.employeeId == user_id)
        if status is not None:
            q = q.filter(VehicleRequest.status == status)
        items = q.order_by(VehicleRequest.createdAt.desc(), VehicleRequest.id.desc()).all()
        return [self.project(db, r) for r in items]

    def all_requests(self, db: Session) -> list[dict]:
        return self.list_requests(db)

    def pending_requests(self, db: Session) -> list[dict]:
        return self.list_requests(db, status=RequestStatus.PENDING)

    def user_requests(self, db: Session, user_id: int) -> list[dict]:
        return self.list_requests(db, user_id=user_id)

    def get_request(self, db: Session, request_id: int) -> dict:
        r = db.get(VehicleRequest, request_id)
        if not r:
            raise NotFoundException("Request")
        return self.project(db, r)

    def pending_count(self, db: Session) -> int:
        return db.query(VehicleRequest).filter(VehicleRequest.status == RequestStatus.PENDING).count()

    # ─── Create ───────────────────────────────────────────────────────────────
    def create_request(self, db: Session, data: VehicleRequestCreateRequest) -> dict:
        start, end = to_utc_naive(data.startDate), to_utc_naive(data.endDate)
        if start >= end:
            raise InvalidDateRangeException()
        if start < utcnow():
            raise PastStartDateException()

        if not db.get(User, data.employeeId):
            raise NotFoundException("Employee")
        if not db.get(Vehicle, data.vehicleId):
            raise NotFoundException("Vehicle")

        with self._vehicle_locks.hold(data.vehicleId):
            free = {v.id for v in availability.available_vehicles(db, start, end)}
            if data.vehicleId not in free:
                raise VehicleUnavailableException()

            r = VehicleRequest(
                employeeId=data.employeeId,
                vehicleId=data.vehicleId,
                startDate=start,
                endDate=end,
                purpose=data.purpose,
                destination=data.destination,
                status=RequestStatus.PENDING,
                accessCode=None,
                approvedBy=None,
                approvedAt=None,
            )
            db.add(r)
            db.commit()
            db.refresh(r)

        logger.info(f"Request #{r.id} created: vehicle #{r.vehicleId} for employee #{r.employeeId} "
                    f"({r.startDate.isoformat()} -> {r.endDate.isoformat()})")
        return serialize_request(r)

    # ─── Decide ───────────────────────────────────────────────────────────────
    def decide_request(
        self, db: Session, request_id: int, decision: RequestStatus,
        admin: User, rejection_reason: str | None = None,
    ) -> dict:
        if decision not in (RequestStatus.APPROVED, RequestStatus.REJECTED):
            raise ValidationException("Status must be approved or rejected", field="status")

        r = db.get(VehicleRequest, request_id)
        if not r:
            raise NotFoundException("Request")

        with self._vehicle_locks.hold(r.vehicleId):
            db.refresh(r)
            if r.status != RequestStatus.PENDING:
                raise RequestAlreadyDecidedException(r.status.value)

            if decision == RequestStatus.APPROVED:
                if availability.has_conflict(db, r.vehicleId, r.startDate, r.endDate, exclude_id=r.id):
                    raise VehicleUnavailableException()
                code = self._issue_access_code(db)
                r.status     = RequestStatus.APPROVED
                r.accessCode = code
                r.approvedBy = admin.id
                r.approvedAt = utcnow()
                notification_service.notify(
                    db, r.employeeId,
                    "Vehicle Request Approved!",
                    f"Your vehicle request has been approved. Access code: {code}",
                    NotificationType.SUCCESS,
                )
            else:
                r.status     = RequestStatus.REJECTED
                r.approvedBy = admin.id
                notification_service.notify(
                    db, r.employeeId,
                    "Vehicle Request Rejected",
                    f"Your vehicle request has been rejected. {rejection_reason or ''}".strip(),
                    NotificationType.ERROR,
                )
            db.commit()
            db.refresh(r)

        logger.info(f"Request #{r.id} {r.status.value} by admin #{admin.id}")
        return self.project(db, r)

    def _issue_access_code(self, db: Session) -> str:
        """
        Random 4-digit code not held by another approved request that is
        still running or upcoming.
        """
        now = utcnow()
        active = {
            code for (code,) in db.query(VehicleRequest.accessCode).filter(
                VehicleRequest.status == RequestStatus.APPROVED,
                VehicleRequest.endDate >= now,
                VehicleRequest.accessCode.isnot(None),
            ).all()
        }
        for _ in range(settings.ACCESS_CODE_MAX_ATTEMPTS):
            code = generate_access_code()
            if code not in active:
                return code
        logger.error(f"No free access code after {settings.ACCESS_CODE_MAX_ATTEMPTS} attempts "
                     f"({len(active)} active)")
        raise AccessCodeExhaustedException()


request_service = RequestService()
