import enum
from sqlalchemy import Column, Integer, String, Text, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
from fleetbook.database import Base
from fleetbook.utils.timeutil import utcnow


class RequestStatus(str, enum.Enum):
    PENDING  = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class VehicleRequest(Base):
    __tablename__ = "vehicle_requests"

    id          = Column(Integer, primary_key=True, index=True)
    employeeId  = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    vehicleId   = Column(Integer, ForeignKey("vehicles.id"), nullable=False, index=True)
    startDate   = Column(DateTime, nullable=False)
    endDate     = Column(DateTime, nullable=False)
    purpose     = Column(Text, nullable=False)
    destination = Column(Text, nullable=False)
    status      = Column(Enum(RequestStatus), default=RequestStatus.PENDING, nullable=False, index=True)
    accessCode  = Column(String(4), nullable=True)
    approvedBy  = Column(Integer, ForeignKey("users.id"), nullable=True)
    approvedAt  = Column(DateTime, nullable=True)
    createdAt   = Column(DateTime, default=utcnow, nullable=False, index=True)

    # ─── Relationships ─────────────────────────────────────────────────────────
    employee    = relationship("User", foreign_keys=[employeeId], back_populates="requests")
    vehicle     = relationship("Vehicle", back_populates="requests")
    approver    = relationship("User", foreign_keys=[approvedBy], back_populates="approved_requests")
    access_logs = relationship("VehicleAccess", back_populates="request")

    def __repr__(self):
        return f"<VehicleRequest id={self.id} status={self.status} vehicleId={self.vehicleId}>"
