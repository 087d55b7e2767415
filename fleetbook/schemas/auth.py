from pydantic import BaseModel, EmailStr, field_validator
from typing import Optional


class LoginRequest(BaseModel):
    email:    EmailStr
    password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        if not v: raise ValueError("Password is required")
        return v


class RegisterRequest(BaseModel):
    email:      EmailStr
    password:   str
    name:       str
    department: Optional[str] = None

    @field_validator("password")
    @classmethod
    def check_password(cls, v):
        if len(v) < 8: raise ValueError("Password must be at least 8 characters")
        return v

    @field_validator("name")
    @classmethod
    def check_name(cls, v):
        if not v.strip(): raise ValueError("Name cannot be empty")
        return v.strip()
