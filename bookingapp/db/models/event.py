# bookingapp/db/models/event.py
from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, JSON, func
from bookingapp.db.base import Base


class BookingEvent(Base):
    """Outbox row for booking lifecycle events picked up by external consumers."""
    __tablename__ = "booking_events"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True)
    event_type = Column(String, nullable=False, index=True)
    payload = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
