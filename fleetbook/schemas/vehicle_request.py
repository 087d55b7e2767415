from pydantic import BaseModel, field_validator
from typing import Optional
from datetime import datetime
from fleetbook.models.vehicle_request import RequestStatus


class VehicleRequestCreateRequest(BaseModel):
    employeeId:  int
    vehicleId:   int
    startDate:   datetime
    endDate:     datetime
    purpose:     str
    destination: str

    @field_validator("purpose", "destination")
    @classmethod
    def check_text(cls, v):
        if not v.strip(): raise ValueError("Field cannot be empty")
        return v.strip()


class RequestDecisionRequest(BaseModel):
    status:          RequestStatus
    rejectionReason: Optional[str] = None

    @field_validator("status")
    @classmethod
    def check_status(cls, v):
        if v == RequestStatus.PENDING: raise ValueError("Status must be approved or rejected")
        return v
