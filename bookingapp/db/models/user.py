# bookingapp/db/models/user.py
from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from bookingapp.db.base import Base


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False)
    password_hash = Column(String, nullable=False)
    role = Column(String, nullable=False, default="customer", server_default="customer")

    phone = Column(String, nullable=True)

    # a provider user owns one or more businesses
    providers = relationship("Provider", back_populates="owner", lazy="selectin")
