"""Expiry sweep and renewal payments for admin and agent shops."""

import uuid
from datetime import timedelta

import pytest
from sqlalchemy import select

from bizdir.db.models import AdminShop, RenewalShop, utcnow
from bizdir.services.shop_service import ShopService
from conftest import (
    admin_headers,
    agent_headers,
    make_admin_shop,
    make_admin_user,
    make_agent,
    make_shop,
)


def _days_ago(days: int):
    return utcnow() - timedelta(days=days)


async def _sweep(client, admin) -> dict:
    r = await client.post("/api/v1/admin/shops/check-expiry", headers=admin_headers(admin))
    assert r.status_code == 200
    return r.json()


async def _parked_id(db, column, value) -> uuid.UUID:
    renewal_id = await db.scalar(select(RenewalShop.id).where(column == value))
    assert renewal_id is not None
    return renewal_id


@pytest.mark.asyncio
async def test_check_expiry_parks_expired_shops(client, db_session):
    admin = await make_admin_user(db_session)
    agent = await make_agent(db_session)
    lapsed = await make_admin_shop(db_session, payment_expiry_date=_days_ago(1))
    undated = await make_admin_shop(db_session, created_at=_days_ago(400))
    fresh = await make_admin_shop(db_session)
    expired_agent_shop = await make_shop(
        db_session, agent, payment_status="PAID", payment_expiry_date=_days_ago(3)
    )
    await make_shop(
        db_session, agent, payment_status="PAID", payment_expiry_date=utcnow() + timedelta(days=30)
    )
    await make_shop(db_session, agent)

    r = await client.get("/api/v1/admin/shops/check-expiry", headers=admin_headers(admin))
    assert r.json() == {"success": True, "expired_count": 3, "renew_count": 0}

    assert (await _sweep(client, admin))["moved_count"] == 3
    assert (await _sweep(client, admin))["moved_count"] == 0

    r = await client.get("/api/v1/admin/shops/check-expiry", headers=admin_headers(admin))
    assert r.json() == {"success": True, "expired_count": 0, "renew_count": 3}

    assert await db_session.get(AdminShop, lapsed.id) is None
    assert await db_session.get(AdminShop, undated.id) is None
    assert await db_session.get(AdminShop, fresh.id) is not None

    await db_session.refresh(expired_agent_shop)
    assert expired_agent_shop.payment_status == "PAID"
    assert expired_agent_shop.is_visible is False


@pytest.mark.asyncio
async def test_sweep_needs_edit_rights(client, db_session):
    op_user = await make_admin_user(db_session, role="operator")
    r = await client.get("/api/v1/admin/shops/check-expiry", headers=admin_headers(op_user))
    assert r.status_code == 200
    r = await client.post("/api/v1/admin/shops/check-expiry", headers=admin_headers(op_user))
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_admin_renews_parked_listing(client, db_session):
    admin = await make_admin_user(db_session)
    listing = await make_admin_shop(
        db_session,
        plan_type="FEATURED",
        amount=2388,
        visitor_count=7,
        payment_expiry_date=_days_ago(2),
    )
    listing_id = listing.id
    await _sweep(client, admin)

    r = await client.get("/api/v1/admin/shops/renew-list", headers=admin_headers(admin))
    shops = r.json()["shops"]
    assert r.json()["pagination"]["total"] == 1
    assert shops[0]["original_shop_id"] == str(listing_id)
    assert shops[0]["original_agent_shop_id"] is None

    r = await client.post(
        "/api/v1/admin/shops/renew",
        json={"renew_shop_id": shops[0]["id"], "payment_mode": "UPI"},
        headers=admin_headers(admin),
    )
    assert r.status_code == 200
    data = r.json()
    assert data["shop_id"] == str(listing_id)
    assert data["shop_type"] == "admin"
    assert data["payment"]["renewal_amount"] == 2388
    assert data["payment"]["payment_mode"] == "UPI"
    assert data["payment"]["receipt_no"].startswith("REC")
    assert data["payment"]["agent_id"] is None

    restored = await db_session.get(AdminShop, listing_id)
    assert restored.payment_status == "PAID"
    assert restored.visitor_count == 7
    assert restored.priority_rank == 100
    assert restored.placements["home_page_banner"] is True
    assert restored.placements["hero"] is False

    r = await client.get("/api/v1/admin/shops/renew-list", headers=admin_headers(admin))
    assert r.json()["shops"] == []


@pytest.mark.asyncio
async def test_agent_renewal_rebuilds_earnings(client, db_session):
    admin = await make_admin_user(db_session)
    agent = await make_agent(db_session)
    lapsed = await make_shop(
        db_session, agent, amount=100, payment_status="PAID", payment_expiry_date=_days_ago(5)
    )
    await make_shop(
        db_session, agent, amount=250, payment_status="PAID",
        payment_expiry_date=utcnow() + timedelta(days=100),
    )
    agent.total_earnings = 999
    await db_session.commit()
    await _sweep(client, admin)

    r = await client.get("/api/v1/agent/shops/renew", headers=agent_headers(agent))
    assert r.status_code == 200
    assert r.json()["count"] == 1
    renew_shop_id = r.json()["shops"][0]["id"]
    assert r.json()["shops"][0]["original_agent_shop_id"] == str(lapsed.id)

    r = await client.post(
        "/api/v1/agent/shops/renew",
        json={"renew_shop_id": renew_shop_id, "amount": 500, "receipt_no": "R-77"},
        headers=agent_headers(agent),
    )
    assert r.status_code == 200
    data = r.json()
    # 20% of 500 for the renewed shop plus 20% of 250 for the other
    assert data["total_earnings"] == 150
    assert data["shop"]["id"] == str(lapsed.id)
    assert data["shop"]["amount"] == 500
    assert data["shop"]["agent_commission"] == 100
    assert data["shop"]["is_visible"] is True
    assert data["payment"]["agent_code"] == agent.agent_code
    assert data["payment"]["receipt_no"] == "R-77"

    r = await client.get("/api/v1/agent/shops/renew", headers=agent_headers(agent))
    assert r.json()["count"] == 0


@pytest.mark.asyncio
async def test_agent_cannot_renew_others_or_admin_listings(client, db_session):
    admin = await make_admin_user(db_session)
    owner = await make_agent(db_session)
    intruder = await make_agent(db_session)
    shop = await make_shop(
        db_session, owner, payment_status="PAID", payment_expiry_date=_days_ago(1)
    )
    listing = await make_admin_shop(db_session, payment_expiry_date=_days_ago(1))
    await _sweep(client, admin)

    agent_parked = await _parked_id(db_session, RenewalShop.original_agent_shop_id, shop.id)
    admin_parked = await _parked_id(db_session, RenewalShop.original_shop_id, listing.id)

    r = await client.get("/api/v1/agent/shops/renew", headers=agent_headers(intruder))
    assert r.json()["count"] == 0

    for parked in (agent_parked, admin_parked):
        r = await client.post(
            "/api/v1/agent/shops/renew",
            json={"renew_shop_id": str(parked)},
            headers=agent_headers(intruder),
        )
        assert r.status_code == 403


@pytest.mark.asyncio
async def test_renew_unknown_is_404(client, db_session):
    admin = await make_admin_user(db_session)
    r = await client.post(
        "/api/v1/admin/shops/renew",
        json={"renew_shop_id": str(uuid.uuid4())},
        headers=admin_headers(admin),
    )
    assert r.status_code == 404
    assert r.json()["error"] == "Renew shop not found"


@pytest.mark.asyncio
async def test_payment_confirmation_unparks_shop(client, db_session):
    admin = await make_admin_user(db_session)
    agent = await make_agent(db_session)
    shop = await make_shop(
        db_session, agent, payment_status="PAID", payment_expiry_date=_days_ago(1)
    )
    await _sweep(client, admin)

    r = await client.post(
        f"/api/v1/admin/shops/{shop.id}/mark-payment-done",
        json={"payment_mode": "CASH"},
        headers=admin_headers(admin),
    )
    assert r.status_code == 200
    assert r.json()["shop"]["is_visible"] is True

    r = await client.get("/api/v1/admin/shops/renew-list", headers=admin_headers(admin))
    assert r.json()["pagination"]["total"] == 0


@pytest.mark.asyncio
async def test_expiry_stats_at_a_given_time(db_session):
    agent = await make_agent(db_session)
    await make_shop(
        db_session, agent, payment_status="PAID", payment_expiry_date=utcnow() + timedelta(days=10)
    )
    svc = ShopService(db_session)
    assert (await svc.expiry_stats())["expired_count"] == 0
    later = utcnow() + timedelta(days=11)
    assert (await svc.expiry_stats(now=later))["expired_count"] == 1
    assert await svc.check_expiry(now=later) == 1
