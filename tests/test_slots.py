from bookingapp.services.scheduling import (
    BufferedInterval,
    Constraints,
    Interval,
    SlotOptions,
    calculate_available_slots,
    check_slot,
)
from bookingapp.services.scheduling.slots import (
    BEYOND_WORK_HOURS,
    BOOKING_CONFLICT,
    OUTSIDE_WORK_HOURS,
    TIME_BLOCKED,
    UNUSABLE_GAP,
)
from bookingapp.services.scheduling.timeutils import time_to_minutes


def m(hhmm):
    return time_to_minutes(hhmm)


def times(slots):
    return [s.time for s in slots]


def test_existing_booking_and_buffer_block_overlapping_starts():
    constraints = Constraints(
        staff_shifts=[Interval(m("09:00"), m("17:00"))],
        existing_bookings=[BufferedInterval(m("10:00"), m("11:00"), buffer_minutes=15)],
    )
    slots = calculate_available_slots(constraints, 30, options=SlotOptions(slot_interval=15))
    available = times(slots)

    assert available[:3] == ["09:00", "09:15", "09:30"]
    for blocked in ["09:45", "10:00", "10:15", "10:30", "10:45", "11:00"]:
        assert blocked not in available
    assert "11:15" in available
    assert available[-1] == "16:30"


def test_enforced_work_hours_without_shift_gives_no_slots():
    constraints = Constraints(work_hours_enabled=True, staff_shifts=[])
    assert calculate_available_slots(constraints, 30) == []


def test_full_day_block_gives_no_slots():
    constraints = Constraints(
        staff_shifts=[Interval(m("09:00"), m("17:00"))],
        time_blocks=[Interval(0, 24 * 60)],
    )
    assert calculate_available_slots(constraints, 30) == []
    assert calculate_available_slots(constraints, 30, options=SlotOptions(include_unavailable=True)) == []


def test_partial_time_block_removes_only_overlapping_starts():
    constraints = Constraints(
        staff_shifts=[Interval(m("09:00"), m("12:00"))],
        time_blocks=[Interval(m("10:00"), m("10:30"))],
    )
    available = times(calculate_available_slots(constraints, 30, options=SlotOptions(slot_interval=30)))
    assert available == ["09:00", "09:30", "10:30", "11:00", "11:30"]


def test_every_slot_fits_inside_its_window():
    constraints = Constraints(staff_shifts=[Interval(m("09:00"), m("10:00")), Interval(m("13:00"), m("14:00"))])
    available = times(calculate_available_slots(constraints, 45, options=SlotOptions(slot_interval=15)))
    assert available == ["09:00", "09:15", "13:00", "13:15"]


def test_results_are_sorted_and_repeatable():
    constraints = Constraints(
        staff_shifts=[Interval(m("14:00"), m("16:00")), Interval(m("09:00"), m("11:00"))],
        existing_bookings=[BufferedInterval(m("09:30"), m("10:00"))],
    )
    first = calculate_available_slots(constraints, 30)
    second = calculate_available_slots(constraints, 30)
    assert first == second
    assert times(first) == sorted(times(first))


def test_include_unavailable_reports_reasons():
    constraints = Constraints(
        staff_shifts=[Interval(m("09:00"), m("11:00"))],
        existing_bookings=[BufferedInterval(m("09:30"), m("10:00"))],
        time_blocks=[Interval(m("10:30"), m("11:00"))],
    )
    slots = calculate_available_slots(
        constraints, 30, options=SlotOptions(slot_interval=30, include_unavailable=True)
    )
    by_time = {s.time: s for s in slots}

    assert by_time["09:00"].available
    assert by_time["09:30"].reason == BOOKING_CONFLICT
    assert by_time["10:00"].available
    assert by_time["10:30"].reason == TIME_BLOCKED


def test_travel_buffer_must_fit_before_window_end():
    constraints = Constraints(staff_shifts=[Interval(m("09:00"), m("10:00"))])
    options = SlotOptions(slot_interval=15, travel_buffer=30, include_unavailable=True)
    slots = calculate_available_slots(constraints, 30, options=options)
    by_time = {s.time: s for s in slots}

    assert by_time["09:00"].available
    assert by_time["09:15"].reason == BEYOND_WORK_HOURS
    assert by_time["09:30"].reason == BEYOND_WORK_HOURS


def test_travel_buffer_cannot_run_into_next_booking():
    constraints = Constraints(
        staff_shifts=[Interval(m("09:00"), m("12:00"))],
        existing_bookings=[BufferedInterval(m("10:30"), m("11:00"))],
    )
    options = SlotOptions(slot_interval=30, travel_buffer=30)
    assert times(calculate_available_slots(constraints, 30, options=options)) == ["09:00", "09:30", "11:00"]


def test_processing_time_frees_staff_until_finishing():
    # colour: 30 min apply, 30 min processing, 15 min finishing
    booked = BufferedInterval(m("10:00"), m("10:30"), processing_minutes=30, finishing_minutes=15)
    constraints = Constraints(staff_shifts=[Interval(m("09:00"), m("12:00"))], existing_bookings=[booked])
    available = times(calculate_available_slots(constraints, 30, options=SlotOptions(slot_interval=15)))

    assert "10:30" in available
    assert "10:45" not in available
    assert "11:00" not in available
    assert "11:15" in available


def test_avoid_gaps_rejects_starts_that_strand_short_gaps():
    constraints = Constraints(
        staff_shifts=[Interval(m("09:00"), m("12:00"))],
        existing_bookings=[BufferedInterval(m("10:00"), m("11:00"))],
    )
    plain = times(calculate_available_slots(constraints, 30, options=SlotOptions(slot_interval=15)))
    strict = calculate_available_slots(
        constraints, 30, options=SlotOptions(slot_interval=15, avoid_gaps=True, include_unavailable=True)
    )
    by_time = {s.time: s for s in strict}

    assert "09:15" in plain
    assert by_time["09:15"].reason == UNUSABLE_GAP
    assert by_time["09:00"].available
    assert by_time["09:30"].available


def test_overlapping_windows_do_not_duplicate_starts():
    constraints = Constraints(staff_shifts=[Interval(m("09:00"), m("10:00")), Interval(m("09:30"), m("11:00"))])
    available = times(calculate_available_slots(constraints, 30, options=SlotOptions(slot_interval=30)))
    assert available == ["09:00", "09:30", "10:00", "10:30"]


def test_check_slot_accepts_start_if_any_window_fits():
    # travel fits only in the longer of two windows sharing the start
    constraints = Constraints(staff_shifts=[Interval(m("09:00"), m("10:00")), Interval(m("09:00"), m("11:00"))])
    options = SlotOptions(slot_interval=30, travel_buffer=30)

    listed = times(calculate_available_slots(constraints, 30, options=options))

    assert listed == ["09:00", "09:30", "10:00"]
    assert all(check_slot(constraints, m(t), 30, options).available for t in listed)
    assert check_slot(constraints, m("10:30"), 30, options).reason == BEYOND_WORK_HOURS


def test_gap_threshold_is_the_requested_duration():
    constraints = Constraints(
        staff_shifts=[Interval(m("09:00"), m("12:00"))],
        existing_bookings=[BufferedInterval(m("10:30"), m("11:00"))],
    )
    options = SlotOptions(avoid_gaps=True)

    # 30 minute gap holds another 30 minute service
    assert check_slot(constraints, m("09:30"), 30, options).available
    assert check_slot(constraints, m("09:45"), 30, options).reason == UNUSABLE_GAP
    # the same 30 minute gap is too short for a 45 minute service
    assert check_slot(constraints, m("09:15"), 45, options).reason == UNUSABLE_GAP


def test_check_slot_uses_same_rules():
    constraints = Constraints(
        staff_shifts=[Interval(m("09:00"), m("17:00"))],
        existing_bookings=[BufferedInterval(m("10:00"), m("11:00"), buffer_minutes=15)],
    )
    assert check_slot(constraints, m("09:00"), 30).available
    assert check_slot(constraints, m("11:00"), 30).reason == BOOKING_CONFLICT
    assert check_slot(constraints, m("16:45"), 30).reason == OUTSIDE_WORK_HOURS
    # arbitrary minute, not aligned to the slot grid
    assert check_slot(constraints, m("11:17"), 30).available


def test_check_slot_on_closed_day():
    slot = check_slot(Constraints(work_hours_enabled=True), m("10:00"), 30)
    assert not slot.available
    assert slot.reason == OUTSIDE_WORK_HOURS
