from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class AccessLogCreateRequest(BaseModel):
    requestId:  int
    employeeId: int
    vehicleId:  int
    accessCode: str
    action:     str = "SAFE_OPENED"
    successful: bool
    location:   Optional[str] = None
    accessTime: Optional[datetime] = None
