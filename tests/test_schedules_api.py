from tests.conftest import MONDAY

DATE = MONDAY.isoformat()


def _setup(make):
    owner = make.user(role="provider")
    provider = make.provider(owner=owner)
    staff = make.staff(provider)
    return owner, provider, staff


def _slots(client, staff, duration=60):
    res = client.get("/availability", params={"date": DATE, "staff_id": staff.id, "duration": duration})
    return [s["time"] for s in res.json()["slots"]]


def test_weekly_hours_drive_availability(client, make, auth):
    owner, provider, staff = _setup(make)
    auth["user"] = owner

    res = client.put(f"/staff/{staff.id}/work-hours", json={"rules": [
        {"weekday": 1, "start_time": "09:00:00", "end_time": "11:00:00"},
        {"weekday": 7, "is_closed": True},
    ]})

    assert res.status_code == 200
    assert [r["weekday"] for r in res.json()] == [1, 7]
    assert _slots(client, staff)[0] == "09:00"
    assert _slots(client, staff)[-1] == "10:00"


def test_put_replaces_previous_rules(client, make, auth):
    owner, provider, staff = _setup(make)
    make.work_hours(staff, weekday=1)
    auth["user"] = owner

    client.put(f"/staff/{staff.id}/work-hours", json={"rules": [
        {"weekday": 2, "start_time": "09:00:00", "end_time": "17:00:00"},
    ]})

    listed = client.get(f"/staff/{staff.id}/work-hours").json()
    assert [r["weekday"] for r in listed] == [2]
    assert _slots(client, staff) == []


def test_open_day_requires_times(client, make, auth):
    owner, provider, staff = _setup(make)
    auth["user"] = owner

    res = client.put(f"/staff/{staff.id}/work-hours", json={"rules": [{"weekday": 1}]})

    assert res.status_code == 422


def test_shift_override_and_delete(client, make, auth):
    owner, provider, staff = _setup(make)
    make.work_hours(staff, weekday=1, start="09:00", end="17:00")
    auth["user"] = owner

    created = client.post(f"/staff/{staff.id}/shifts", json={
        "shift_date": DATE, "start_time": "13:00:00", "end_time": "15:00:00",
    })
    assert created.status_code == 200
    assert _slots(client, staff) == ["13:00", "13:15", "13:30", "13:45", "14:00"]

    shift_id = created.json()["id"]
    assert client.delete(f"/staff/{staff.id}/shifts/{shift_id}").status_code == 200
    assert _slots(client, staff)[0] == "09:00"
    assert client.delete(f"/staff/{staff.id}/shifts/{shift_id}").status_code == 404


def test_unknown_recurrence_pattern_is_rejected(client, make, auth):
    owner, provider, staff = _setup(make)
    auth["user"] = owner

    res = client.post(f"/staff/{staff.id}/shifts", json={
        "shift_date": DATE, "start_time": "13:00:00", "end_time": "15:00:00", "recurrence_pattern": "yearly",
    })

    assert res.status_code == 422


def test_whole_day_time_block_closes_day(client, make, auth):
    owner, provider, staff = _setup(make)
    make.work_hours(staff, weekday=1)
    auth["user"] = owner

    res = client.post(f"/staff/{staff.id}/time-blocks", json={
        "start_date": DATE, "end_date": DATE, "is_all_day": True, "reason": "Holiday",
    })

    assert res.status_code == 200
    assert _slots(client, staff) == []
    assert len(client.get(f"/staff/{staff.id}/time-blocks").json()) == 1


def test_plain_staff_can_view_but_not_edit(client, make, auth):
    owner, provider, staff = _setup(make)
    user = make.user(role="staff")
    make.staff(provider, role="staff", user_id=user.id)
    auth["user"] = user

    assert client.get(f"/staff/{staff.id}/shifts").status_code == 200
    res = client.post(f"/staff/{staff.id}/time-blocks", json={"start_date": DATE, "end_date": DATE})
    assert res.status_code == 403


def test_unknown_staff_is_404(client, make, auth):
    auth["user"] = make.user(role="provider")
    assert client.get("/staff/999/work-hours").status_code == 404
