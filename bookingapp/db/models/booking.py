# bookingapp/db/models/booking.py
from sqlalchemy import Column, Integer, String, ForeignKey, Date, Time, Float, DateTime
from sqlalchemy.orm import relationship
from datetime import datetime
from bookingapp.db.base import Base

# statuses that no longer hold a staff member's time
INACTIVE_BOOKING_STATUSES = ("cancelled", "no_show")


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)

    provider_id = Column(Integer, ForeignKey("providers.id"), nullable=False)
    customer_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    staff_id = Column(Integer, ForeignKey("provider_staff.id"), nullable=False, index=True)

    # bookings made together for several people share a group id
    group_booking_id = Column(String, nullable=True, index=True)

    booking_date = Column(Date, nullable=False, index=True)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    location_type = Column(String, nullable=False, default="at_salon")  # at_salon, at_home
    travel_buffer_minutes = Column(Integer, nullable=False, default=0)

    amount = Column(Float, nullable=False, default=0)

    status = Column(String, nullable=False, default="pending")

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # relationships
    customer = relationship("User", foreign_keys=[customer_id])
    staff = relationship("Staff", foreign_keys=[staff_id])
    services = relationship(
        "BookingService",
        back_populates="booking",
        cascade="all, delete-orphan",
        order_by="BookingService.start_time",
        lazy="selectin",
    )


class BookingService(Base):
    """One service performed within a booking."""
    __tablename__ = "booking_services"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id", ondelete="CASCADE"), nullable=False)
    service_id = Column(Integer, ForeignKey("services.id"), nullable=False)
    staff_id = Column(Integer, ForeignKey("provider_staff.id"), nullable=False)

    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    booking = relationship("Booking", back_populates="services")
    service = relationship("Service", foreign_keys=[service_id], lazy="joined")
