# bookingapp/schemas/service.py

from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime


# Shared fields
class ServiceBase(BaseModel):
    name: str
    description: Optional[str] = None
    price: float
    duration_minutes: int = Field(..., gt=0)
    buffer_minutes: int = Field(0, ge=0)
    processing_minutes: int = Field(0, ge=0)
    finishing_minutes: int = Field(0, ge=0)
    is_active: Optional[bool] = True


# Provider creates service
class ServiceCreate(ServiceBase):
    provider_id: int


# What API returns
class ServiceResponse(ServiceBase):
    id: int
    provider_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True
