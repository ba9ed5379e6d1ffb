from datetime import date, timedelta

import pytest
from sqlalchemy.exc import OperationalError

from bookingapp.services.scheduling import Interval, calculate_available_slots, load_constraints
from bookingapp.services.scheduling.constraints import shift_recurs_on
from bookingapp.services.scheduling.exceptions import ConstraintLoadError
from tests.conftest import MONDAY


def test_weekly_rule_gives_work_window(make, db):
    provider = make.provider()
    staff = make.staff(provider)
    make.work_hours(staff, weekday=1, start="09:00", end="17:00")

    constraints = load_constraints(db, staff.id, MONDAY)

    assert constraints.work_hours_enabled
    assert constraints.staff_shifts == [Interval(9 * 60, 17 * 60)]
    assert constraints.time_blocks == []
    assert constraints.existing_bookings == []


def test_exact_override_beats_weekly_rule(make, db):
    provider = make.provider()
    staff = make.staff(provider)
    make.work_hours(staff, weekday=1, start="09:00", end="17:00")
    make.shift(staff, shift_date=MONDAY, start="12:00", end="15:00")

    constraints = load_constraints(db, staff.id, MONDAY)

    assert constraints.staff_shifts == [Interval(12 * 60, 15 * 60)]


def test_recurring_override_applies_on_later_dates(make, db):
    provider = make.provider()
    staff = make.staff(provider)
    make.work_hours(staff, weekday=1, start="09:00", end="17:00")
    make.shift(staff, shift_date=MONDAY, start="10:00", end="14:00", recurrence_pattern="weekly")

    next_monday = load_constraints(db, staff.id, MONDAY + timedelta(days=7))
    tuesday = load_constraints(db, staff.id, MONDAY + timedelta(days=8))

    assert next_monday.staff_shifts == [Interval(10 * 60, 14 * 60)]
    # no rule for Tuesday and work hours are enforced
    assert tuesday.staff_shifts == []


def test_closed_weekday_has_no_windows(make, db):
    provider = make.provider()
    staff = make.staff(provider)
    make.work_hours(staff, weekday=1, start="09:00", end="17:00", is_closed=True)

    constraints = load_constraints(db, staff.id, MONDAY)

    assert constraints.staff_shifts == []
    assert calculate_available_slots(constraints, 30, MONDAY) == []


def test_default_window_when_work_hours_not_enforced(make, db):
    provider = make.provider(work_hours_enabled=False)
    staff = make.staff(provider)

    constraints = load_constraints(db, staff.id, MONDAY)

    assert not constraints.work_hours_enabled
    assert constraints.staff_shifts == [Interval(9 * 60, 18 * 60)]


def test_unknown_staff_is_closed(db):
    constraints = load_constraints(db, 999, MONDAY)
    assert constraints.work_hours_enabled
    assert constraints.staff_shifts == []


def test_time_blocks_partial_and_whole_day(make, db):
    provider = make.provider()
    staff = make.staff(provider)
    make.time_block(staff, start="12:00", end="13:00")
    make.time_block(staff, start_date=MONDAY + timedelta(days=1), end_date=MONDAY + timedelta(days=3))

    monday = load_constraints(db, staff.id, MONDAY)
    wednesday = load_constraints(db, staff.id, MONDAY + timedelta(days=2))

    assert monday.time_blocks == [Interval(12 * 60, 13 * 60)]
    assert wednesday.time_blocks == [Interval(0, 24 * 60)]


def test_bookings_carry_service_buffers(make, db):
    provider = make.provider()
    service = make.service(provider, duration=60, buffer=15, processing=20, finishing=10)
    staff = make.staff(provider, services=[service])
    booking = make.booking(staff, service, start="10:00")

    constraints = load_constraints(db, staff.id, MONDAY)

    assert len(constraints.existing_bookings) == 1
    booked = constraints.existing_bookings[0]
    assert (booked.start, booked.end) == (600, 660)
    assert booked.buffer_minutes == 15
    assert booked.processing_minutes == 20
    assert booked.finishing_minutes == 10
    assert booked.booking_id == booking.id


def test_travel_buffer_added_after_last_service(make, db):
    provider = make.provider()
    service = make.service(provider, duration=60, buffer=5)
    staff = make.staff(provider, services=[service])
    make.booking(staff, service, start="10:00", location_type="at_home", travel_buffer_minutes=30)

    booked = load_constraints(db, staff.id, MONDAY).existing_bookings[0]

    assert booked.buffer_minutes == 35


def test_cancelled_and_excluded_bookings_are_ignored(make, db):
    provider = make.provider()
    service = make.service(provider, duration=60)
    staff = make.staff(provider, services=[service])
    make.booking(staff, service, start="09:00", status="cancelled")
    make.booking(staff, service, start="11:00", status="no_show")
    kept = make.booking(staff, service, start="13:00")
    moving = make.booking(staff, service, start="15:00")

    constraints = load_constraints(db, staff.id, MONDAY, exclude_booking_ids=[moving.id])

    assert [b.booking_id for b in constraints.existing_bookings] == [kept.id]


def test_other_staff_bookings_do_not_count(make, db):
    provider = make.provider()
    service = make.service(provider)
    alice = make.staff(provider, services=[service])
    bob = make.staff(provider, services=[service])
    make.booking(bob, service, start="10:00")

    assert load_constraints(db, alice.id, MONDAY).existing_bookings == []


def test_database_failure_raises_constraint_load_error(make, db, monkeypatch):
    provider = make.provider()
    staff = make.staff(provider)

    def broken_query(*args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("database is locked"))

    monkeypatch.setattr(db, "query", broken_query)

    with pytest.raises(ConstraintLoadError):
        load_constraints(db, staff.id, MONDAY)


@pytest.mark.parametrize("pattern,days,expected", [
    ("daily", 1, True),
    ("weekly", 7, True),
    ("weekly", 3, False),
    ("biweekly", 7, False),
    ("biweekly", 14, True),
    ("monthly", 31, True),
    ("weekly", 0, False),
    (None, 7, False),
])
def test_shift_recurrence(make, pattern, days, expected):
    provider = make.provider()
    staff = make.staff(provider)
    override = make.shift(staff, shift_date=date(2030, 1, 7), recurrence_pattern=pattern)

    assert shift_recurs_on(override, date(2030, 1, 7) + timedelta(days=days)) is expected


def test_recurrence_stops_after_end_date(make):
    provider = make.provider()
    staff = make.staff(provider)
    override = make.shift(
        staff, shift_date=MONDAY, recurrence_pattern="weekly", recurrence_end_date=MONDAY + timedelta(days=10)
    )

    assert shift_recurs_on(override, MONDAY + timedelta(days=7))
    assert not shift_recurs_on(override, MONDAY + timedelta(days=14))
