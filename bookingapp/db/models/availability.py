# bookingapp/db/models/availability.py
from sqlalchemy import Column, Integer, Time, Date, ForeignKey, Boolean, DateTime, String, CheckConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from bookingapp.db.base import Base


class WorkHoursRule(Base):
    """
    Recurring weekly work hours for a staff member.
    weekday: 1 (Monday) .. 7 (Sunday)
    is_closed marks the weekday as a day off even if times are present.
    """
    __tablename__ = "work_hours_rules"
    __table_args__ = (
        CheckConstraint('weekday BETWEEN 1 AND 7'),
    )

    id = Column(Integer, primary_key=True, index=True)
    staff_id = Column(Integer, ForeignKey("provider_staff.id", ondelete="CASCADE"), nullable=False, index=True)
    weekday = Column(Integer, nullable=False)   # store 1–7
    start_time = Column(Time, nullable=True)
    end_time = Column(Time, nullable=True)
    is_closed = Column(Boolean, default=False)

    staff = relationship("Staff", back_populates="work_hours")


class ShiftOverride(Base):
    """
    Date-specific work hours that replace the weekly template.
    recurrence_pattern (daily, weekly, biweekly, monthly) repeats the shift from
    shift_date until recurrence_end_date (open ended when NULL).
    """
    __tablename__ = "shift_overrides"

    id = Column(Integer, primary_key=True, index=True)
    staff_id = Column(Integer, ForeignKey("provider_staff.id", ondelete="CASCADE"), nullable=False, index=True)
    shift_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)
    recurrence_pattern = Column(String, nullable=True)
    recurrence_end_date = Column(Date, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    staff = relationship("Staff", back_populates="shifts")


class TimeBlock(Base):
    """
    Unavailable time for a staff member: time off, breaks, personal appointments.
    start_date/start_time and end_date/end_time define the blocked window
    on every day of the range. Whole-day blocks set is_all_day or leave the times NULL.
    """
    __tablename__ = "time_blocks"

    id = Column(Integer, primary_key=True, index=True)
    staff_id = Column(Integer, ForeignKey("provider_staff.id", ondelete="CASCADE"), nullable=False, index=True)
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=True)  # optional for whole day
    end_time = Column(Time, nullable=True)
    is_all_day = Column(Boolean, default=False)
    block_type = Column(String, nullable=False, default="unpaid")  # paid, unpaid
    reason = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    staff = relationship("Staff", back_populates="time_blocks")

    @property
    def whole_day(self) -> bool:
        return bool(self.is_all_day) or self.start_time is None or self.end_time is None
