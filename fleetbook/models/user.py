import enum
from sqlalchemy import Column, Integer, String, DateTime, Enum
from sqlalchemy.orm import relationship
from fleetbook.database import Base
from fleetbook.utils.timeutil import utcnow


class UserRole(str, enum.Enum):
    ADMIN    = "admin"
    EMPLOYEE = "employee"


class User(Base):
    __tablename__ = "users"

    id         = Column(Integer, primary_key=True, index=True)
    email      = Column(String(255), unique=True, nullable=False, index=True)
    password   = Column(String(255), nullable=False)
    name       = Column(String(150), nullable=False)
    role       = Column(Enum(UserRole), default=UserRole.EMPLOYEE, nullable=False)
    department = Column(String(150), nullable=True)
    createdAt  = Column(DateTime, default=utcnow, nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    requests          = relationship("VehicleRequest", foreign_keys="VehicleRequest.employeeId",
                                     back_populates="employee")
    approved_requests = relationship("VehicleRequest", foreign_keys="VehicleRequest.approvedBy",
                                     back_populates="approver")
    notifications     = relationship("Notification", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN

    def __repr__(self):
        return f"<User id={self.id} email={self.email} role={self.role}>"
