# bookingapp/db/models/provider.py
from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, DateTime, func
from sqlalchemy.orm import relationship
from bookingapp.db.base import Base


class Provider(Base):
    """
    A tenant business on the marketplace.
    work_hours_enabled: when true, staff without a shift or weekly rule for a
    date are not bookable that day.
    """
    __tablename__ = "providers"

    id = Column(Integer, primary_key=True, index=True)
    owner_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    name = Column(String, nullable=False)
    slug = Column(String, nullable=False, unique=True, index=True)

    # Scheduling policy
    work_hours_enabled = Column(Boolean, nullable=False, default=True)
    slot_interval_minutes = Column(Integer, nullable=False, default=15)
    avoid_gaps = Column(Boolean, nullable=False, default=False)

    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    owner = relationship("User", back_populates="providers")
    staff = relationship("Staff", back_populates="provider", lazy="selectin")
    services = relationship("Service", back_populates="provider", lazy="selectin")
