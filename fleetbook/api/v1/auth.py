from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from fleetbook.database import get_db
from fleetbook.schemas.auth import LoginRequest, RegisterRequest
from fleetbook.services.auth_service import auth_service

router = APIRouter(prefix="/auth")


# ─── POST /auth/login ─────────────────────────────────────────────────────────
@router.post("/login", status_code=status.HTTP_200_OK, summary="Login and receive an access token")
def login(data: LoginRequest, db: Session = Depends(get_db)):
    return auth_service.login(db, data)


# ─── POST /auth/register ──────────────────────────────────────────────────────
@router.post("/register", status_code=status.HTTP_201_CREATED, summary="Register an employee account")
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    """
    Register a new employee.
    - Email must be unique.
    - Password minimum 8 characters.
    """
    return auth_service.register(db, data)
