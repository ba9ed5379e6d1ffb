# bookingapp/db/models/waitlist.py
from sqlalchemy import Column, Integer, String, ForeignKey, Date, Time, DateTime, func
from sqlalchemy.orm import relationship
from bookingapp.db.base import Base

OPEN_WAITLIST_STATUSES = ("waiting", "contacted")


class WaitlistEntry(Base):
    """
    A customer asking to be booked when a preferred slot frees up.
    status: waiting -> contacted -> booked, or cancelled at any point.
    """
    __tablename__ = "waitlist_entries"

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("providers.id", ondelete="CASCADE"), nullable=False, index=True)
    customer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    # contact info
    customer_name = Column(String, nullable=False)
    customer_email = Column(String, nullable=True)
    customer_phone = Column(String, nullable=True)

    # preferences
    service_id = Column(Integer, ForeignKey("services.id", ondelete="SET NULL"), nullable=True)
    staff_id = Column(Integer, ForeignKey("provider_staff.id", ondelete="SET NULL"), nullable=True)
    preferred_date = Column(Date, nullable=True)
    preferred_time_start = Column(Time, nullable=True)
    preferred_time_end = Column(Time, nullable=True)
    notes = Column(String, nullable=True)

    priority = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default="waiting")

    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="SET NULL"), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    service = relationship("Service", foreign_keys=[service_id])
    staff = relationship("Staff", foreign_keys=[staff_id])
