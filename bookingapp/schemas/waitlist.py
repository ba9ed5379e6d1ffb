# bookingapp/schemas/waitlist.py
from pydantic import BaseModel, EmailStr, model_validator
from datetime import date, time, datetime
from typing import List, Optional


class WaitlistEntryCreate(BaseModel):
    provider_id: int
    customer_name: str
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = None
    service_id: Optional[int] = None
    staff_id: Optional[int] = None
    preferred_date: Optional[date] = None
    preferred_time_start: Optional[time] = None
    preferred_time_end: Optional[time] = None
    notes: Optional[str] = None
    priority: int = 0

    @model_validator(mode="after")
    def check_window(self):
        if self.preferred_time_start and self.preferred_time_end and self.preferred_time_start >= self.preferred_time_end:
            raise ValueError("preferred_time_start must be before preferred_time_end")
        return self


class WaitlistEntryResponse(BaseModel):
    id: int
    provider_id: int
    customer_id: Optional[int]
    customer_name: str
    customer_email: Optional[str]
    customer_phone: Optional[str]
    service_id: Optional[int]
    staff_id: Optional[int]
    preferred_date: Optional[date]
    preferred_time_start: Optional[time]
    preferred_time_end: Optional[time]
    notes: Optional[str]
    priority: int
    status: str
    booking_id: Optional[int] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class WaitlistMatchResponse(BaseModel):
    entry_id: int
    customer_name: str
    priority: int
    created_at: Optional[datetime]
    date: date
    staff_id: int
    service_id: Optional[int]
    slots: List[str]

    class Config:
        from_attributes = True


class QuickBookRequest(BaseModel):
    start_time: time
    booking_date: Optional[date] = None
    staff_id: Optional[int] = None
    service_id: Optional[int] = None
