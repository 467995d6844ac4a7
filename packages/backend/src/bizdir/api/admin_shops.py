"""Admin API: shops, payments, plans, renewals, visibility."""

import math
import uuid
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.auth.dependencies import require
from bizdir.auth.roles import Permission
from bizdir.db.engine import get_db
from bizdir.schemas.shop import (
    AgentShopRead,
    PaymentConfirm,
    PlanUpdate,
    RenewalPaymentRead,
    RenewalRequest,
    RenewalShopRead,
    VisibilityUpdate,
)
from bizdir.services.pricing import can_upgrade, get_plan
from bizdir.services.shop_service import ShopService

router = APIRouter(prefix="/admin/shops")

_privileged = Depends(require(Permission.PRIVILEGED))


def _svc(db: AsyncSession = Depends(get_db)) -> ShopService:
    return ShopService(db)


@router.get("", dependencies=[_privileged])
async def list_shops(
    agent_id: Optional[uuid.UUID] = None,
    payment_status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    svc: ShopService = Depends(_svc),
):
    shops, total = await svc.list_agent_shops(
        agent_id=agent_id, payment_status=payment_status, page=page, limit=limit
    )
    return {
        "success": True,
        "shops": [AgentShopRead.model_validate(s) for s in shops],
        "total": total,
        "page": page,
        "limit": limit,
    }


@router.get("/expired", dependencies=[_privileged])
async def expired_shops(svc: ShopService = Depends(_svc)):
    shops = await svc.expired_shops()
    return {"success": True, "shops": [AgentShopRead.model_validate(s) for s in shops]}


@router.post("/{shop_id}/mark-payment-done", dependencies=[_privileged])
async def mark_payment_done(
    shop_id: uuid.UUID, body: PaymentConfirm, svc: ShopService = Depends(_svc)
):
    shop = await svc.get_agent_shop(shop_id)
    shop = await svc.mark_payment_done(shop, body)
    return {"success": True, "shop": AgentShopRead.model_validate(shop)}


@router.put("/{shop_id}/visibility", dependencies=[Depends(require(Permission.EDIT))])
async def set_visibility(
    shop_id: uuid.UUID, body: VisibilityUpdate, svc: ShopService = Depends(_svc)
):
    resolved = await svc.set_visibility(shop_id, body.is_visible)
    return {
        "success": True,
        "shop_id": str(shop_id),
        "shop_type": resolved.kind.value,
        "is_visible": resolved.record.is_visible,
    }


@router.put("/{shop_id}/update-plan", dependencies=[Depends(require(Permission.EDIT))])
async def update_plan(
    shop_id: uuid.UUID, body: PlanUpdate, svc: ShopService = Depends(_svc)
):
    resolved, previous = await svc.update_plan(shop_id, body.plan_type)
    plan = get_plan(body.plan_type)
    return {
        "success": True,
        "message": "Plan updated successfully",
        "shop": {
            "id": str(shop_id),
            "shop_type": resolved.kind.value,
            "plan_type": body.plan_type,
            "plan_amount": plan.amount,
            "amount": resolved.record.amount,
            "previous_plan": previous,
            "is_upgrade": can_upgrade(previous, body.plan_type),
        },
    }


# ─── Renewals ───────────────────────────────────────────

@router.get("/check-expiry", dependencies=[_privileged])
async def expiry_stats(svc: ShopService = Depends(_svc)):
    stats = await svc.expiry_stats()
    return {"success": True, **stats}


@router.post("/check-expiry", dependencies=[Depends(require(Permission.EDIT))])
async def check_expiry(svc: ShopService = Depends(_svc)):
    """Park every expired shop for renewal. Safe to run repeatedly (cron)."""
    moved = await svc.check_expiry()
    return {
        "success": True,
        "message": f"Moved {moved} expired shops to renewal",
        "moved_count": moved,
    }


@router.get("/renew-list", dependencies=[_privileged])
async def renew_list(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    svc: ShopService = Depends(_svc),
):
    shops, total = await svc.list_renewals(page=page, limit=limit)
    return {
        "success": True,
        "shops": [RenewalShopRead.model_validate(s) for s in shops],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if total else 0,
        },
    }


@router.post("/renew", dependencies=[_privileged])
async def renew_shop(body: RenewalRequest, svc: ShopService = Depends(_svc)):
    payment, restored = await svc.renew_shop(body)
    return {
        "success": True,
        "message": "Shop renewed successfully",
        "shop_id": str(restored.record.id),
        "shop_type": restored.kind.value,
        "payment": RenewalPaymentRead.model_validate(payment),
    }
