# bookingapp/schemas/availability.py
from pydantic import BaseModel, Field, conint, model_validator
from typing import List, Literal, Optional
from datetime import time, date, datetime


class WorkHoursRuleCreate(BaseModel):
    weekday: conint(ge=1, le=7) = Field(..., description="1=Mon, 2=Tue, …, 7=Sun")
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_closed: bool = False

    @model_validator(mode="after")
    def check_times(self):
        if self.is_closed:
            return self
        if self.start_time is None or self.end_time is None:
            raise ValueError("start_time and end_time are required unless the day is closed")
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class WorkHoursRuleResponse(WorkHoursRuleCreate):
    id: int
    staff_id: int

    class Config:
        from_attributes = True


class WeeklyScheduleUpdate(BaseModel):
    rules: List[WorkHoursRuleCreate]


class ShiftOverrideCreate(BaseModel):
    shift_date: date
    start_time: time
    end_time: time
    recurrence_pattern: Optional[Literal["daily", "weekly", "biweekly", "monthly"]] = None
    recurrence_end_date: Optional[date] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def check_range(self):
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        if self.recurrence_end_date and self.recurrence_end_date < self.shift_date:
            raise ValueError("recurrence_end_date must be on or after shift_date")
        return self


class ShiftOverrideResponse(ShiftOverrideCreate):
    id: int
    staff_id: int

    class Config:
        from_attributes = True


class TimeBlockCreate(BaseModel):
    start_date: date
    end_date: date
    start_time: Optional[time] = None
    end_time: Optional[time] = None
    is_all_day: bool = False
    block_type: Literal["paid", "unpaid"] = "unpaid"
    reason: Optional[str] = None

    @model_validator(mode="after")
    def check_range(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be <= end_date")
        if self.start_time and self.end_time and self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class TimeBlockResponse(TimeBlockCreate):
    id: int
    staff_id: int
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class SlotResponse(BaseModel):
    time: str
    available: bool
    reason: Optional[str] = None

    class Config:
        from_attributes = True


class AvailabilityResponse(BaseModel):
    date: date
    staff_id: Optional[int] = None
    slots: List[SlotResponse]
