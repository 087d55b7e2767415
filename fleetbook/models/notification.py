import enum
from sqlalchemy import Column, Integer, String, Text, Boolean, ForeignKey, DateTime, Enum
from sqlalchemy.orm import relationship
from fleetbook.database import Base
from fleetbook.utils.timeutil import utcnow


class NotificationType(str, enum.Enum):
    SUCCESS = "success"
    ERROR   = "error"
    INFO    = "info"
    WARNING = "warning"


class Notification(Base):
    __tablename__ = "notifications"

    id        = Column(Integer, primary_key=True, index=True)
    userId    = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    title     = Column(String(200), nullable=False)
    message   = Column(Text, nullable=False)
    type      = Column(Enum(NotificationType), default=NotificationType.INFO, nullable=False)
    read      = Column(Boolean, default=False, nullable=False)
    createdAt = Column(DateTime, default=utcnow, nullable=False)

    # ─── Relationships ─────────────────────────────────────────────────────────
    user = relationship("User", back_populates="notifications")

    def __repr__(self):
        return f"<Notification id={self.id} userId={self.userId} type={self.type} read={self.read}>"
