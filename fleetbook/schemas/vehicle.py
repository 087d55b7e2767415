from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime
from fleetbook.models.vehicle import VehicleStatus


def _check_plate(v: str) -> str:
    if not v.strip(): raise ValueError("Plate number cannot be empty")
    return v.strip().upper()


# ─── Requests ─────────────────────────────────────────────────────────────────
class VehicleCreateRequest(BaseModel):
    model:           str
    plateNumber:     str
    capacity:        int
    fuelType:        str
    status:          VehicleStatus = VehicleStatus.AVAILABLE
    lastMaintenance: Optional[datetime] = None
    imageUrl:        Optional[str] = None

    @field_validator("capacity")
    @classmethod
    def check_capacity(cls, v):
        if v <= 0: raise ValueError("Capacity must be greater than 0")
        return v

    @field_validator("plateNumber")
    @classmethod
    def check_plate(cls, v):
        return _check_plate(v)

    @field_validator("model", "fuelType")
    @classmethod
    def check_text(cls, v):
        if not v.strip(): raise ValueError("Field cannot be empty")
        return v.strip()


class VehicleUpdateRequest(BaseModel):
    model:           Optional[str] = None
    plateNumber:     Optional[str] = None
    capacity:        Optional[int] = None
    fuelType:        Optional[str] = None
    status:          Optional[VehicleStatus] = None
    lastMaintenance: Optional[datetime] = None
    imageUrl:        Optional[str] = None

    @field_validator("capacity")
    @classmethod
    def check_capacity(cls, v):
        if v is not None and v <= 0: raise ValueError("Capacity must be greater than 0")
        return v

    @field_validator("plateNumber")
    @classmethod
    def check_plate(cls, v):
        return _check_plate(v) if v is not None else v
