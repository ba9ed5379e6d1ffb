from datetime import date, datetime, time

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bookingapp.core.security import get_current_user, hash_password
from bookingapp.db import models
from bookingapp.db.base import Base, get_db
from bookingapp.main import app

# 2030-01-07 is a Monday
MONDAY = date(2030, 1, 7)

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db():
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


class Factory:
    """Small helpers for building rows; every helper commits."""

    def __init__(self, db):
        self.db = db
        self._seq = 0

    def _next(self):
        self._seq += 1
        return self._seq

    def _save(self, obj):
        self.db.add(obj)
        self.db.commit()
        self.db.refresh(obj)
        return obj

    def user(self, role="customer", **kwargs):
        n = self._next()
        kwargs.setdefault("email", f"user{n}@example.com")
        kwargs.setdefault("name", f"User {n}")
        return self._save(models.User(password_hash=hash_password("secret"), role=role, **kwargs))

    def provider(self, owner=None, **kwargs):
        owner = owner or self.user(role="provider")
        kwargs.setdefault("slug", f"provider-{self._next()}")
        kwargs.setdefault("name", "Studio")
        return self._save(models.Provider(owner_id=owner.id, **kwargs))

    def service(self, provider, duration=30, buffer=0, processing=0, finishing=0, price=20.0, **kwargs):
        kwargs.setdefault("name", f"Service {self._next()}")
        return self._save(models.Service(
            provider_id=provider.id,
            duration_minutes=duration,
            buffer_minutes=buffer,
            processing_minutes=processing,
            finishing_minutes=finishing,
            price=price,
            **kwargs,
        ))

    def staff(self, provider, services=(), role="staff", **kwargs):
        kwargs.setdefault("name", f"Staff {self._next()}")
        staff = models.Staff(provider_id=provider.id, role=role, **kwargs)
        staff.services = list(services)
        return self._save(staff)

    def work_hours(self, staff, weekday=1, start="09:00", end="17:00", is_closed=False):
        return self._save(models.WorkHoursRule(
            staff_id=staff.id,
            weekday=weekday,
            start_time=_t(start) if start else None,
            end_time=_t(end) if end else None,
            is_closed=is_closed,
        ))

    def shift(self, staff, shift_date=MONDAY, start="09:00", end="17:00", **kwargs):
        return self._save(models.ShiftOverride(
            staff_id=staff.id, shift_date=shift_date, start_time=_t(start), end_time=_t(end), **kwargs
        ))

    def time_block(self, staff, start_date=MONDAY, end_date=None, start=None, end=None, **kwargs):
        return self._save(models.TimeBlock(
            staff_id=staff.id,
            start_date=start_date,
            end_date=end_date or start_date,
            start_time=_t(start) if start else None,
            end_time=_t(end) if end else None,
            **kwargs,
        ))

    def booking(self, staff, service, start="10:00", booking_date=MONDAY, status="confirmed", **kwargs):
        start_time = _t(start)
        end_minutes = start_time.hour * 60 + start_time.minute + service.duration_minutes
        end_time = time(end_minutes // 60, end_minutes % 60)
        booking = models.Booking(
            provider_id=staff.provider_id,
            staff_id=staff.id,
            booking_date=booking_date,
            start_time=start_time,
            end_time=end_time,
            amount=service.price,
            status=status,
            **kwargs,
        )
        booking.services.append(models.BookingService(
            service_id=service.id, staff_id=staff.id, start_time=start_time, end_time=end_time
        ))
        return self._save(booking)

    def waitlist_entry(self, provider, created_at=None, **kwargs):
        kwargs.setdefault("customer_name", f"Customer {self._next()}")
        kwargs.setdefault("preferred_date", MONDAY)
        return self._save(models.WaitlistEntry(
            provider_id=provider.id,
            created_at=created_at or datetime(2030, 1, 1, 12, 0),
            **kwargs,
        ))


def _t(value):
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


@pytest.fixture
def make(db):
    return Factory(db)


@pytest.fixture
def auth():
    """Holds the user the API should treat as logged in."""
    return {"user": None}


@pytest.fixture
def client(db, auth):
    def override_get_db():
        yield db

    def override_current_user():
        return auth["user"]

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_current_user] = override_current_user
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
