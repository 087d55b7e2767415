from datetime import datetime, timedelta

import pytest
from fastapi.testclient import TestClient

import fleetbook.models  # noqa: F401  (registers tables on Base.metadata)
from fleetbook.database import Base, build_engine, build_session_factory, get_db
from fleetbook.main import app
from fleetbook.models import (
    User, UserRole, Vehicle, VehicleStatus, VehicleRequest, RequestStatus,
)
from fleetbook.utils.security import create_access_token, hash_password
from fleetbook.utils.timeutil import utcnow

# bcrypt is slow on purpose; hash once for every fixture user
PASSWORD = "password"
PASSWORD_HASH = hash_password(PASSWORD)


def day(n: int) -> datetime:
    """09:00 UTC, n days from today."""
    return (utcnow() + timedelta(days=n)).replace(hour=9, minute=0, second=0, microsecond=0)


def auth_header(user: User) -> dict:
    return {"Authorization": f"Bearer {create_access_token(user.id, user.role.value)}"}


@pytest.fixture
def engine():
    eng = build_engine("sqlite://")
    Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


# ─── Entities ─────────────────────────────────────────────────────────────────
@pytest.fixture
def make_user(db):
    def _make(email: str, role: UserRole = UserRole.EMPLOYEE, name: str = "Test User") -> User:
        u = User(email=email, password=PASSWORD_HASH, name=name, role=role, department="Ops")
        db.add(u)
        db.commit()
        return u
    return _make


@pytest.fixture
def admin(make_user):
    return make_user("admin@company.com", UserRole.ADMIN, "Admin User")


@pytest.fixture
def employee(make_user):
    return make_user("employee@company.com", UserRole.EMPLOYEE, "John Smith")


@pytest.fixture
def make_vehicle(db):
    def _make(plate: str, status: VehicleStatus = VehicleStatus.AVAILABLE, model: str = "Toyota Camry") -> Vehicle:
        v = Vehicle(model=model, plateNumber=plate, capacity=5, fuelType="Gasoline", status=status)
        db.add(v)
        db.commit()
        return v
    return _make


@pytest.fixture
def vehicle(make_vehicle):
    return make_vehicle("ABC-123")


@pytest.fixture
def make_request(db):
    """Insert a request row directly, bypassing lifecycle validation."""
    def _make(
        employee: User, vehicle: Vehicle, start: datetime, end: datetime,
        status: RequestStatus = RequestStatus.PENDING, approver: User | None = None,
        access_code: str | None = None, created_at: datetime | None = None,
    ) -> VehicleRequest:
        r = VehicleRequest(
            employeeId=employee.id, vehicleId=vehicle.id,
            startDate=start, endDate=end,
            purpose="Client visit", destination="HQ",
            status=status,
            accessCode=access_code if access_code is not None
                       else ("1234" if status == RequestStatus.APPROVED else None),
            approvedBy=approver.id if approver else None,
            approvedAt=utcnow() if status == RequestStatus.APPROVED else None,
        )
        if created_at is not None:
            r.createdAt = created_at
        db.add(r)
        db.commit()
        return r
    return _make
