import logging
from datetime import datetime

from sqlalchemy.orm import Session

from fleetbook.models.user import User, UserRole
from fleetbook.models.vehicle import Vehicle, VehicleStatus
from fleetbook.utils.security import hash_password

logger = logging.getLogger(__name__)

DEMO_PASSWORD = "password"

DEMO_USERS = [
    {"email": "admin@company.com",    "name": "Admin User", "role": UserRole.ADMIN,    "department": "IT"},
    {"email": "employee@company.com", "name": "John Smith", "role": UserRole.EMPLOYEE, "department": "Marketing"},
]

DEMO_VEHICLES = [
    {"model": "Toyota Camry", "plateNumber": "ABC-123", "capacity": 5, "fuelType": "Gasoline",
     "lastMaintenance": datetime(2024, 11, 28),
     "imageUrl": "https://images.unsplash.com/photo-1449824913935-59a10b8d2000?auto=format&fit=crop&w=400&h=200"},
    {"model": "Honda CR-V", "plateNumber": "XYZ-789", "capacity": 7, "fuelType": "Gasoline",
     "lastMaintenance": datetime(2024, 12, 5),
     "imageUrl": "https://images.unsplash.com/photo-1580273916550-e323be2ae537?auto=format&fit=crop&w=400&h=200"},
    {"model": "Ford Focus", "plateNumber": "DEF-456", "capacity": 5, "fuelType": "Gasoline",
     "lastMaintenance": datetime(2024, 12, 1),
     "imageUrl": "https://images.unsplash.com/photo-1552519507-da3b142c6e3d?auto=format&fit=crop&w=400&h=200"},
]


def seed_demo_data(db: Session) -> bool:
    """Insert the demo admin, employee and fleet into an empty database."""
    if db.query(User.id).first() is not None:
        return False

    for u in DEMO_USERS:
        db.add(User(password=hash_password(DEMO_PASSWORD), **u))
    for v in DEMO_VEHICLES:
        db.add(Vehicle(status=VehicleStatus.AVAILABLE, **v))
    db.commit()
    logger.info(f"Seeded {len(DEMO_USERS)} users and {len(DEMO_VEHICLES)} vehicles")
    return True
