import pytest
from fastapi import HTTPException

from bookingapp.core.security import create_access_token, get_current_user


def test_register_and_login(client, db, auth):
    res = client.post("/api/auth/register", json={
        "email": "owner@example.com", "name": "Owner", "password": "pw123456", "role": "provider",
    })
    assert res.status_code == 200
    assert res.json()["role"] == "provider"

    assert client.post("/api/auth/register", json={
        "email": "owner@example.com", "name": "Again", "password": "x",
    }).status_code == 400

    login = client.post("/api/auth/login", params={"email": "owner@example.com", "password": "pw123456"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    auth["user"] = get_current_user(token=token, db=db)
    assert client.get("/api/auth/me").json()["email"] == "owner@example.com"
    assert client.post("/api/auth/login", params={"email": "owner@example.com", "password": "nope"}).status_code == 400


def test_register_cannot_claim_admin(client):
    res = client.post("/api/auth/register", json={
        "email": "x@example.com", "name": "X", "password": "pw", "role": "admin",
    })
    assert res.status_code == 400


def test_token_for_unknown_user_is_rejected(db):
    token = create_access_token({"sub": "ghost@example.com"})
    with pytest.raises(HTTPException) as exc:
        get_current_user(token=token, db=db)
    assert exc.value.status_code == 401


def test_provider_signup_creates_owner_staff(client, make, auth):
    auth["user"] = make.user(role="provider")

    res = client.post("/providers", json={"name": "Cut Above", "slug": "cut-above", "slot_interval_minutes": 30})

    assert res.status_code == 200
    provider_id = res.json()["id"]
    staff = client.get(f"/providers/{provider_id}/staff").json()
    assert [(s["role"], s["user_id"]) for s in staff] == [("owner", auth["user"].id)]

    assert client.post("/providers", json={"name": "Dup", "slug": "cut-above"}).status_code == 400


def test_customers_cannot_open_a_business(client, make, auth):
    auth["user"] = make.user()
    assert client.post("/providers", json={"name": "Nope", "slug": "nope"}).status_code == 403


def test_owner_adds_services_and_staff(client, make, auth):
    owner = make.user(role="provider")
    provider = make.provider(owner=owner)
    auth["user"] = owner

    created = client.post("/services", json={
        "provider_id": provider.id, "name": "Colour", "price": 80.0,
        "duration_minutes": 45, "processing_minutes": 30, "finishing_minutes": 15,
    })
    assert created.status_code == 200
    service_id = created.json()["id"]

    res = client.post(f"/providers/{provider.id}/staff", json={
        "name": "Sam", "role": "manager", "service_ids": [service_id],
    })
    assert res.status_code == 200
    assert res.json()["role"] == "manager"

    bad = client.post(f"/providers/{provider.id}/staff", json={"name": "Lee", "service_ids": [9999]})
    assert bad.status_code == 400

    assert client.delete(f"/services/{service_id}").status_code == 200
    assert client.get(f"/providers/{provider.id}/services").json() == []
