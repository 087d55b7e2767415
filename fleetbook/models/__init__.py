"""
Import all models here so that:
1. Base.metadata.create_all sees every table
2. Relationships between models resolve correctly

Order matters: import parent tables before child tables.
"""

from fleetbook.models.user import User, UserRole
from fleetbook.models.vehicle import Vehicle, VehicleStatus
from fleetbook.models.vehicle_request import VehicleRequest, RequestStatus
from fleetbook.models.notification import Notification, NotificationType
from fleetbook.models.vehicle_access import VehicleAccess

__all__ = [
    "User",
    "UserRole",
    "Vehicle",
    "VehicleStatus",
    "VehicleRequest",
    "RequestStatus",
    "Notification",
    "NotificationType",
    "VehicleAccess",
]
