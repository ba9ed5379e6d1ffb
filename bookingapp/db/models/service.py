# bookingapp/db/models/service.py

from sqlalchemy import Column, DateTime, Integer, String, ForeignKey, Boolean, Float, func
from sqlalchemy.orm import relationship
from bookingapp.db.base import Base
from bookingapp.db.models.staff import staff_services


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)

    provider_id = Column(Integer, ForeignKey("providers.id", ondelete="CASCADE"), nullable=False)

    # Basic details
    name = Column(String, nullable=False)
    description = Column(String, nullable=True)

    # Pricing
    price = Column(Float, nullable=False)

    # Timing (in minutes)
    duration_minutes = Column(Integer, nullable=False, default=60)
    buffer_minutes = Column(Integer, nullable=False, default=0)      # recovery time after the service
    processing_minutes = Column(Integer, nullable=False, default=0)  # staff is free while the client processes
    finishing_minutes = Column(Integer, nullable=False, default=0)   # staff busy again after processing

    # Status
    is_active = Column(Boolean, default=True)

    # Timestamps
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())

    # Relationships
    provider = relationship("Provider", back_populates="services")
    staff = relationship("Staff", secondary=staff_services, back_populates="services", lazy="selectin")

    @property
    def total_minutes(self) -> int:
        """Minutes the service keeps a staff member's calendar occupied."""
        return (
            (self.duration_minutes or 0)
            + (self.buffer_minutes or 0)
            + (self.processing_minutes or 0)
            + (self.finishing_minutes or 0)
        )
