# bookingapp/db/models/staff.py
from sqlalchemy import Column, Integer, String, ForeignKey, Boolean, JSON, Table
from sqlalchemy.orm import relationship
from bookingapp.db.base import Base

# which staff members perform which services
staff_services = Table(
    "staff_services",
    Base.metadata,
    Column("staff_id", Integer, ForeignKey("provider_staff.id", ondelete="CASCADE"), primary_key=True),
    Column("service_id", Integer, ForeignKey("services.id", ondelete="CASCADE"), primary_key=True),
)


class CustomRole(Base):
    """Provider-defined role with an explicit permission list."""
    __tablename__ = "custom_roles"

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("providers.id", ondelete="CASCADE"), nullable=False)
    name = Column(String, nullable=False)
    permissions = Column(JSON, nullable=False, default=list)


class Staff(Base):
    __tablename__ = "provider_staff"

    id = Column(Integer, primary_key=True, index=True)
    provider_id = Column(Integer, ForeignKey("providers.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)

    name = Column(String, nullable=False)
    role = Column(String, nullable=False, default="staff")  # owner, manager, staff

    custom_role_id = Column(Integer, ForeignKey("custom_roles.id", ondelete="SET NULL"), nullable=True)
    permissions = Column(JSON, nullable=True)  # direct grants

    is_active = Column(Boolean, default=True)

    provider = relationship("Provider", back_populates="staff")
    custom_role = relationship("CustomRole", lazy="joined")
    services = relationship("Service", secondary=staff_services, back_populates="staff", lazy="selectin")

    work_hours = relationship("WorkHoursRule", back_populates="staff", lazy="selectin")
    shifts = relationship("ShiftOverride", back_populates="staff", lazy="selectin")
    time_blocks = relationship("TimeBlock", back_populates="staff", lazy="selectin")
