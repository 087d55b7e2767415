from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, DateTime
from sqlalchemy.orm import relationship
from fleetbook.database import Base
from fleetbook.utils.timeutil import utcnow


class VehicleAccess(Base):
    """Append-only record of an access attempt at a vehicle (e.g. key safe opened)."""
    __tablename__ = "vehicle_access"

    id         = Column(Integer, primary_key=True, index=True)
    requestId  = Column(Integer, ForeignKey("vehicle_requests.id"), nullable=False, index=True)
    employeeId = Column(Integer, ForeignKey("users.id"), nullable=False)
    vehicleId  = Column(Integer, ForeignKey("vehicles.id"), nullable=False)
    accessTime = Column(DateTime, default=utcnow, nullable=False)
    accessCode = Column(String(20), nullable=False)
    action     = Column(String(100), default="SAFE_OPENED", nullable=False)  # free text
    successful = Column(Boolean, nullable=False)
    location   = Column(String(255), nullable=True)
    createdAt  = Column(DateTime, default=utcnow, nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    request = relationship("VehicleRequest", back_populates="access_logs")

    def __repr__(self):
        return f"<VehicleAccess id={self.id} requestId={self.requestId} successful={self.successful}>"
