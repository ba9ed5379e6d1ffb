# bookingapp/schemas/provider.py
from pydantic import BaseModel, Field
from typing import List, Optional


class ProviderCreate(BaseModel):
    name: str
    slug: str = Field(..., pattern=r"^[a-z0-9-]+$")
    work_hours_enabled: bool = True
    slot_interval_minutes: int = Field(15, ge=5, le=120)
    avoid_gaps: bool = False


class ProviderResponse(ProviderCreate):
    id: int
    owner_id: int
    is_active: bool

    class Config:
        from_attributes = True


class StaffCreate(BaseModel):
    name: str
    user_id: Optional[int] = None
    role: str = Field("staff", pattern=r"^(owner|manager|staff)$")
    permissions: Optional[List[str]] = None
    service_ids: List[int] = []


class StaffResponse(BaseModel):
    id: int
    provider_id: int
    user_id: Optional[int]
    name: str
    role: str
    permissions: Optional[List[str]]
    is_active: bool

    class Config:
        from_attributes = True
