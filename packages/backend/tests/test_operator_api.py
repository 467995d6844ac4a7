"""Operator portal: active-only login and resolution, dashboard."""

import uuid
from datetime import timedelta

import pytest

from bizdir.db.models import utcnow
from conftest import PASSWORD, make_agent, make_operator, make_shop, operator_headers


@pytest.mark.asyncio
async def test_login_active_operator(client, db_session):
    operator = await make_operator(db_session)
    r = await client.post(
        "/api/v1/operator/auth/login",
        json={"identifier": operator.phone, "password": PASSWORD},
    )
    assert r.status_code == 200
    assert r.json()["operator"]["operator_code"] == operator.operator_code
    assert "operator_token" in r.headers.get("set-cookie", "")


@pytest.mark.asyncio
async def test_login_inactive_operator_rejected(client, db_session):
    operator = await make_operator(db_session, is_active=False)
    r = await client.post(
        "/api/v1/operator/auth/login",
        json={"identifier": operator.email, "password": PASSWORD},
    )
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_deactivation_invalidates_existing_token(client, db_session):
    operator = await make_operator(db_session)
    headers = operator_headers(operator)
    assert (await client.get("/api/v1/operator/me", headers=headers)).status_code == 200

    operator.is_active = False
    await db_session.commit()

    r = await client.get("/api/v1/operator/me", headers=headers)
    assert r.status_code == 401


@pytest.mark.asyncio
async def test_operator_cookie_auth(client, db_session):
    operator = await make_operator(db_session)
    token = operator_headers(operator)["Authorization"].split(" ", 1)[1]
    r = await client.get("/api/v1/operator/me", headers={"Cookie": f"operator_token={token}"})
    assert r.status_code == 200


@pytest.mark.asyncio
async def test_dashboard_counts(client, db_session):
    operator = await make_operator(db_session)
    agent = await make_agent(db_session)
    past = utcnow() - timedelta(days=2)
    await make_shop(db_session, agent, payment_status="PAID")
    await make_shop(db_session, agent, payment_status="PAID", is_visible=False)
    await make_shop(db_session, agent, payment_status="PAID", payment_expiry_date=past)
    await make_shop(db_session, agent)

    r = await client.get("/api/v1/operator/dashboard", headers=operator_headers(operator))
    assert r.status_code == 200
    stats = r.json()["stats"]
    assert stats["paid_shops"] == 3
    assert stats["visible_shops"] == 2
    assert stats["hidden_shops"] == 1
    assert stats["expired_shops"] == 1


@pytest.mark.asyncio
async def test_operator_lists_all_shops(client, db_session):
    operator = await make_operator(db_session)
    await make_shop(db_session, await make_agent(db_session))
    await make_shop(db_session, await make_agent(db_session))
    r = await client.get("/api/v1/operator/shops", headers=operator_headers(operator))
    assert r.status_code == 200
    assert r.json()["pagination"]["total"] == 2


@pytest.mark.asyncio
async def test_operator_views_single_shop(client, db_session):
    operator = await make_operator(db_session)
    shop = await make_shop(db_session, await make_agent(db_session), amount=250)

    r = await client.get(f"/api/v1/operator/shops/{shop.id}", headers=operator_headers(operator))
    assert r.status_code == 200
    assert r.json()["shop"]["id"] == str(shop.id)
    assert r.json()["shop"]["amount"] == 250

    r = await client.get(f"/api/v1/operator/shops/{uuid.uuid4()}", headers=operator_headers(operator))
    assert r.status_code == 404
