"""Unit tests for the vehicle request lifecycle (create, decide, project)."""

import re
import threading
from datetime import timedelta
from itertools import combinations
from unittest.mock import patch

import pytest

from fleetbook.models import (
    Notification, NotificationType, RequestStatus, User, VehicleRequest, VehicleStatus,
)
from fleetbook.schemas.vehicle_request import VehicleRequestCreateRequest
from fleetbook.services import availability
from fleetbook.services.request_service import RequestService
from fleetbook.utils.exceptions import (
    AccessCodeExhaustedException, DataIntegrityException, InvalidDateRangeException,
    NotFoundException, PastStartDateException, RequestAlreadyDecidedException,
    ValidationException, VehicleUnavailableException,
)
from fleetbook.utils.timeutil import utcnow
from tests.conftest import day


@pytest.fixture
def service():
    return RequestService()


def make_body(employee, vehicle, start, end):
    return VehicleRequestCreateRequest(
        employeeId=employee.id, vehicleId=vehicle.id,
        startDate=start, endDate=end,
        purpose="Client visit", destination="Downtown office",
    )


def notifications_for(db, user):
    return db.query(Notification).filter(Notification.userId == user.id).all()


class TestCreateRequest:
    def test_creates_pending_request(self, db, service, employee, vehicle):
        data = service.create_request(db, make_body(employee, vehicle, day(1), day(3)))
        assert data["status"] == "pending"
        assert data["accessCode"] is None
        assert data["approvedBy"] is None
        assert data["approvedAt"] is None
        assert data["employeeId"] == employee.id
        assert data["vehicleId"] == vehicle.id

    def test_no_notification_on_create(self, db, service, employee, vehicle):
        service.create_request(db, make_body(employee, vehicle, day(1), day(3)))
        assert notifications_for(db, employee) == []

    def test_end_equal_to_start_rejected(self, db, service, employee, vehicle):
        with pytest.raises(InvalidDateRangeException):
            service.create_request(db, make_body(employee, vehicle, day(2), day(2)))

    def test_end_before_start_rejected(self, db, service, employee, vehicle):
        with pytest.raises(InvalidDateRangeException):
            service.create_request(db, make_body(employee, vehicle, day(3), day(1)))

    def test_past_start_rejected(self, db, service, employee, vehicle):
        with pytest.raises(PastStartDateException):
            service.create_request(db, make_body(employee, vehicle, utcnow() - timedelta(hours=1), day(1)))

    def test_date_errors_are_validation_errors(self, db, service, employee, vehicle):
        with pytest.raises(ValidationException) as exc:
            service.create_request(db, make_body(employee, vehicle, day(-3), day(-5)))
        assert exc.value.status_code == 400

    def test_unknown_vehicle(self, db, service, employee, vehicle):
        body = make_body(employee, vehicle, day(1), day(3))
        body.vehicleId = 999
        with pytest.raises(NotFoundException):
            service.create_request(db, body)

    def test_unknown_employee(self, db, service, employee, vehicle):
        body = make_body(employee, vehicle, day(1), day(3))
        body.employeeId = 999
        with pytest.raises(NotFoundException):
            service.create_request(db, body)

    def test_vehicle_in_maintenance_is_unavailable(self, db, service, employee, make_vehicle):
        v = make_vehicle("MNT-1", VehicleStatus.MAINTENANCE)
        with pytest.raises(VehicleUnavailableException):
            service.create_request(db, make_body(employee, v, day(1), day(3)))

    def test_pending_requests_do_not_block_each_other(self, db, service, employee, vehicle):
        service.create_request(db, make_body(employee, vehicle, day(1), day(3)))
        data = service.create_request(db, make_body(employee, vehicle, day(2), day(4)))
        assert data["status"] == "pending"


class TestBookingScenario:
    """Request A (days 1-3) approved; B (2-4) conflicts; C (5-7) goes through."""

    @pytest.fixture
    def approved_a(self, db, service, admin, employee, vehicle):
        a = service.create_request(db, make_body(employee, vehicle, day(1), day(3)))
        service.decide_request(db, a["id"], RequestStatus.APPROVED, admin)
        return a

    def test_overlapping_request_conflicts(self, db, service, employee, vehicle, approved_a):
        assert vehicle.id not in {v.id for v in availability.available_vehicles(db, day(2), day(4))}
        with pytest.raises(VehicleUnavailableException) as exc:
            service.create_request(db, make_body(employee, vehicle, day(2), day(4)))
        assert exc.value.status_code == 409

    def test_disjoint_request_succeeds(self, db, service, employee, vehicle, approved_a):
        assert vehicle.id in {v.id for v in availability.available_vehicles(db, day(5), day(7))}
        c = service.create_request(db, make_body(employee, vehicle, day(5), day(7)))
        assert c["status"] == "pending"

    def test_approving_disjoint_request(self, db, service, admin, employee, vehicle, approved_a):
        c = service.create_request(db, make_body(employee, vehicle, day(5), day(7)))
        before = len(notifications_for(db, employee))

        data = service.decide_request(db, c["id"], RequestStatus.APPROVED, admin)

        assert re.fullmatch(r"\d{4}", data["accessCode"])
        assert data["approvedAt"] is not None
        db.expire_all()
        assert len(notifications_for(db, employee)) == before + 1


class TestDecideRequest:
    def test_approve_sets_fields_and_notifies(self, db, service, admin, employee, vehicle):
        r = service.create_request(db, make_body(employee, vehicle, day(1), day(3)))
        data = service.decide_request(db, r["id"], RequestStatus.APPROVED, admin)

        assert data["status"] == "approved"
        assert re.fullmatch(r"\d{4}", data["accessCode"])
        assert 1000 <= int(data["accessCode"]) <= 9999
        assert data["approvedBy"] == admin.id
        assert data["approvedAt"] is not None

        notes = notifications_for(db, employee)
        assert len(notes) == 1
        assert notes[0].type == NotificationType.SUCCESS
        assert notes[0].title == "Vehicle Request Approved!"
        assert data["accessCode"] in notes[0].message
        assert notes[0].read is False

    def test_reject_leaves_code_null_and_notifies(self, db, service, admin, employee, vehicle):
        r = service.create_request(db, make_body(employee, vehicle, day(1), day(3)))
        data = service.decide_request(db, r["id"], RequestStatus.REJECTED, admin, "Vehicle needed for audit")

        assert data["status"] == "rejected"
        assert data["accessCode"] is None
        assert data["approvedAt"] is None
        assert data["approvedBy"] == admin.id

        notes = notifications_for(db, employee)
        assert len(notes) == 1
        assert notes[0].type == NotificationType.ERROR
        assert notes[0].title == "Vehicle Request Rejected"
        assert "Vehicle needed for audit" in notes[0].message

    def test_reject_without_reason(self, db, service, admin, employee, vehicle):
        r = service.create_request(db, make_body(employee, vehicle, day(1), day(3)))
        service.decide_request(db, r["id"], RequestStatus.REJECTED, admin)
        assert notifications_for(db, employee)[0].message == "Your vehicle request has been rejected."

    def test_unknown_request(self, db, service, admin):
        with pytest.raises(NotFoundException):
            service.decide_request(db, 404, RequestStatus.APPROVED, admin)

    def test_pending_is_not_a_decision(self, db, service, admin, employee, vehicle):
        r = service.create_request(db, make_body(employee, vehicle, day(1), day(3)))
        with pytest.raises(ValidationException):
            service.decide_request(db, r["id"], RequestStatus.PENDING, admin)

    @pytest.mark.parametrize("first,second", [
        (RequestStatus.APPROVED, RequestStatus.REJECTED),
        (RequestStatus.REJECTED, RequestStatus.APPROVED),
        (RequestStatus.APPROVED, RequestStatus.APPROVED),
    ])
    def test_second_decision_refused(self, db, service, admin, employee, vehicle, first, second):
        r = service.create_request(db, make_body(employee, vehicle, day(1), day(3)))
        first_result = service.decide_request(db, r["id"], first, admin)

        with pytest.raises(RequestAlreadyDecidedException):
            service.decide_request(db, r["id"], second, admin)

        db.expire_all()
        stored = db.get(VehicleRequest, r["id"])
        assert stored.status == first
        assert stored.accessCode == first_result["accessCode"]
        assert len(notifications_for(db, employee)) == 1

    def test_approving_overlapping_pending_conflicts(self, db, service, admin, employee, vehicle):
        a = service.create_request(db, make_body(employee, vehicle, day(1), day(3)))
        b = service.create_request(db, make_body(employee, vehicle, day(2), day(4)))
        service.decide_request(db, a["id"], RequestStatus.APPROVED, admin)

        with pytest.raises(VehicleUnavailableException):
            service.decide_request(db, b["id"], RequestStatus.APPROVED, admin)

        db.expire_all()
        assert db.get(VehicleRequest, b["id"]).status == RequestStatus.PENDING
        # The conflicting one can still be rejected
        data = service.decide_request(db, b["id"], RequestStatus.REJECTED, admin)
        assert data["status"] == "rejected"

    def test_approved_intervals_never_overlap(self, db, service, admin, employee, vehicle):
        windows = [(1, 3), (2, 4), (3, 5), (4, 6), (6, 8), (9, 10)]
        ids = [service.create_request(db, make_body(employee, vehicle, day(s), day(e)))["id"]
               for s, e in windows]
        for request_id in ids:
            try:
                service.decide_request(db, request_id, RequestStatus.APPROVED, admin)
            except VehicleUnavailableException:
                pass

        db.expire_all()
        approved = db.query(VehicleRequest).filter(VehicleRequest.status == RequestStatus.APPROVED).all()
        assert len(approved) >= 2
        for r1, r2 in combinations(approved, 2):
            assert not availability.intervals_overlap(r1.startDate, r1.endDate, r2.startDate, r2.endDate)

    def test_returns_projection(self, db, service, admin, employee, vehicle):
        r = service.create_request(db, make_body(employee, vehicle, day(1), day(3)))
        data = service.decide_request(db, r["id"], RequestStatus.APPROVED, admin)
        assert data["employee"]["email"] == employee.email
        assert data["vehicle"]["plateNumber"] == vehicle.plateNumber
        assert data["approver"]["id"] == admin.id
        assert "password" not in data["employee"]


class TestConcurrentDecisions:
    def test_simultaneous_overlapping_approvals(self, db, session_factory, service,
                                                admin, employee, vehicle, make_request):
        first  = make_request(employee, vehicle, day(1), day(3))
        second = make_request(employee, vehicle, day(2), day(4))
        admin_id = admin.id
        barrier = threading.Barrier(2)
        approved, refused, unexpected = [], [], []

        def approve(request_id):
            session = session_factory()
            try:
                acting = session.get(User, admin_id)
                barrier.wait()
                service.decide_request(session, request_id, RequestStatus.APPROVED, acting)
                approved.append(request_id)
            except VehicleUnavailableException as exc:
                refused.append(exc.detail["error"]["code"])
            except Exception as exc:
                unexpected.append(exc)
            finally:
                session.close()

        threads = [threading.Thread(target=approve, args=(r.id,)) for r in (first, second)]
        for t in threads:
            t.start()
        for t in threads:
            t.join(timeout=10)

        assert unexpected == []
        assert len(approved) == 1
        assert refused == ["VEHICLE_UNAVAILABLE"]

        db.expire_all()
        statuses = sorted(db.get(VehicleRequest, r.id).status.value for r in (first, second))
        assert statuses == ["approved", "pending"]


class TestAccessCodes:
    def test_skips_codes_held_by_active_approvals(self, db, service, admin, employee,
                                                  make_vehicle, make_request):
        other = make_vehicle("OTH-1")
        make_request(employee, other, day(1), day(2), RequestStatus.APPROVED, admin, access_code="1111")
        target = make_vehicle("TGT-1")
        r = make_request(employee, target, day(1), day(2))

        with patch("fleetbook.services.request_service.generate_access_code",
                   side_effect=["1111", "1111", "2222"]):
            data = service.decide_request(db, r.id, RequestStatus.APPROVED, admin)
        assert data["accessCode"] == "2222"

    def test_expired_approvals_release_their_code(self, db, service, admin, employee,
                                                  make_vehicle, make_request):
        old = make_vehicle("OLD-1")
        make_request(employee, old, day(-5), day(-4), RequestStatus.APPROVED, admin, access_code="1111")
        r = make_request(employee, make_vehicle("NEW-1"), day(1), day(2))

        with patch("fleetbook.services.request_service.generate_access_code", return_value="1111"):
            data = service.decide_request(db, r.id, RequestStatus.APPROVED, admin)
        assert data["accessCode"] == "1111"

    def test_gives_up_after_max_attempts(self, db, service, admin, employee, make_vehicle, make_request):
        make_request(employee, make_vehicle("OTH-1"), day(1), day(2), RequestStatus.APPROVED, admin,
                     access_code="1111")
        r = make_request(employee, make_vehicle("TGT-1"), day(1), day(2))

        with patch("fleetbook.services.request_service.generate_access_code", return_value="1111"):
            with pytest.raises(AccessCodeExhaustedException):
                service.decide_request(db, r.id, RequestStatus.APPROVED, admin)

        db.expire_all()
        assert db.get(VehicleRequest, r.id).status == RequestStatus.PENDING
        assert notifications_for(db, employee) == []


class TestQueries:
    def test_all_requests_newest_first(self, db, service, employee, vehicle, make_request):
        base = utcnow()
        # Inserted out of order on purpose
        r2 = make_request(employee, vehicle, day(3), day(4), created_at=base - timedelta(minutes=2))
        r1 = make_request(employee, vehicle, day(1), day(2), created_at=base - timedelta(minutes=5))
        r3 = make_request(employee, vehicle, day(5), day(6), created_at=base - timedelta(minutes=1))

        data = service.all_requests(db)
        assert [d["id"] for d in data] == [r3.id, r2.id, r1.id]
        stamps = [d["createdAt"] for d in data]
        assert stamps == sorted(stamps, reverse=True)
        assert len(set(stamps)) == len(stamps)

    def test_pending_requests(self, db, service, admin, employee, vehicle, make_request):
        pending = make_request(employee, vehicle, day(1), day(2))
        make_request(employee, vehicle, day(3), day(4), RequestStatus.REJECTED, admin)
        assert [d["id"] for d in service.pending_requests(db)] == [pending.id]
        assert service.pending_count(db) == 1

    def test_user_requests(self, db, service, employee, make_user, vehicle, make_request):
        other = make_user("other@company.com")
        mine = make_request(employee, vehicle, day(1), day(2))
        make_request(other, vehicle, day(3), day(4))
        assert [d["id"] for d in service.user_requests(db, employee.id)] == [mine.id]

    def test_filters_combine(self, db, service, admin, employee, make_user, vehicle, make_request):
        other = make_user("other@company.com")
        make_request(employee, vehicle, day(1), day(2), RequestStatus.REJECTED, admin)
        mine_pending = make_request(employee, vehicle, day(3), day(4))
        make_request(other, vehicle, day(5), day(6))
        data = service.list_requests(db, user_id=employee.id, status=RequestStatus.PENDING)
        assert [d["id"] for d in data] == [mine_pending.id]

    def test_projection_without_approver(self, db, service, employee, vehicle, make_request):
        r = make_request(employee, vehicle, day(1), day(2))
        data = service.get_request(db, r.id)
        assert data["approver"] is None
        assert data["employee"]["id"] == employee.id
        assert data["vehicle"]["id"] == vehicle.id

    def test_get_unknown_request(self, db, service):
        with pytest.raises(NotFoundException):
            service.get_request(db, 12345)

    def test_dangling_employee_is_integrity_violation(self, db, service, employee, vehicle, make_request):
        r = make_request(employee, vehicle, day(1), day(2))
        # SQLite does not enforce foreign keys by default, so the row survives
        db.query(User).filter(User.id == employee.id).delete()
        db.commit()
        with pytest.raises(DataIntegrityException):
            service.get_request(db, r.id)
