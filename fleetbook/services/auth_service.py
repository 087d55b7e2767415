import logging

from sqlalchemy.orm import Session

from fleetbook.models.user import User, UserRole
from fleetbook.schemas.auth import LoginRequest, RegisterRequest
from fleetbook.utils.security import verify_password, hash_password, create_access_token
from fleetbook.utils.exceptions import UnauthorizedException, DuplicateEntryException
from fleetbook.utils.timeutil import isoformat

logger = logging.getLogger(__name__)


def serialize_user(u: User) -> dict:
    """Public view of a user. The password hash never leaves the service."""
    return {
        "id":         u.id,
        "email":      u.email,
        "name":       u.name,
        "role":       u.role.value,
        "department": u.department,
        "createdAt":  isoformat(u.createdAt),
    }


class AuthService:

    # ─── Login ────────────────────────────────────────────────────────────────
    def login(self, db: Session, data: LoginRequest) -> dict:
        user = db.query(User).filter(User.email == data.email).first()

        if not user or not verify_password(data.password, user.password):
            raise UnauthorizedException("Invalid credentials")

        logger.info(f"{user.email} logged in")
        return {
            "user":        serialize_user(user),
            "accessToken": create_access_token(user.id, user.role.value),
            "tokenType":   "Bearer",
        }

    # ─── Register ─────────────────────────────────────────────────────────────
    def register(self, db: Session, data: RegisterRequest) -> dict:
        if db.query(User).filter(User.email == data.email).first():
            raise DuplicateEntryException("User already exists", field="email")

        # Self-registration only ever yields employees; admins are provisioned.
        user = User(
            email=data.email,
            password=hash_password(data.password),
            name=data.name,
            role=UserRole.EMPLOYEE,
            department=data.department,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Registered employee #{user.id} ({user.email})")
        return {"user": serialize_user(user)}


auth_service = AuthService()
