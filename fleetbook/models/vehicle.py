import enum
from sqlalchemy import Column, Integer, String, Text, DateTime, Enum
from sqlalchemy.orm import relationship
from fleetbook.database import Base
from fleetbook.utils.timeutil import utcnow


class VehicleStatus(str, enum.Enum):
    AVAILABLE   = "available"
    IN_USE      = "in_use"
    MAINTENANCE = "maintenance"


class Vehicle(Base):
    __tablename__ = "vehicles"

    id              = Column(Integer, primary_key=True, index=True)
    model           = Column(String(100), nullable=False)
    plateNumber     = Column(String(20), unique=True, nullable=False, index=True)
    capacity        = Column(Integer, nullable=False)
    fuelType        = Column(String(50), nullable=False)
    status          = Column(Enum(VehicleStatus), default=VehicleStatus.AVAILABLE, nullable=False, index=True)
    lastMaintenance = Column(DateTime, nullable=True)
    imageUrl        = Column(Text, nullable=True)
    createdAt       = Column(DateTime, default=utcnow, nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    requests = relationship("VehicleRequest", back_populates="vehicle")

    def __repr__(self):
        return f"<Vehicle id={self.id} plate={self.plateNumber} status={self.status}>"
