from pydantic import BaseModel, Field
from datetime import date, time, datetime
from typing import List, Literal, Optional


# --- CREATE ---
class BookingCreate(BaseModel):
    provider_id: int
    staff_id: int
    service_ids: List[int] = Field(..., min_length=1)
    booking_date: date
    start_time: time
    location_type: Literal["at_salon", "at_home"] = "at_salon"
    travel_buffer_minutes: Optional[int] = Field(default=None, ge=0)
    group_booking_id: Optional[str] = None


# --- RESCHEDULE ---
class BookingReschedule(BaseModel):
    booking_date: date
    start_time: time
    staff_id: Optional[int] = None


class GroupReschedule(BaseModel):
    booking_date: date
    start_time: time


# --- RESPONSE ---
class BookingServiceResponse(BaseModel):
    id: int
    service_id: int
    staff_id: int
    start_time: time
    end_time: time

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    id: int
    provider_id: int
    customer_id: Optional[int]
    staff_id: int
    group_booking_id: Optional[str] = None
    booking_date: date
    start_time: time
    end_time: time
    location_type: str
    travel_buffer_minutes: int
    amount: float
    status: str
    services: List[BookingServiceResponse] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
