"""Agent portal API.

Agents authenticate with a bearer token or the `agent_token` cookie.
Login sets the cookie as well as returning the token, so browser
clients and API clients both work.
"""

import math
import uuid
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.auth.dependencies import get_current_agent
from bizdir.auth.jwt import PrincipalKind, issue_token
from bizdir.auth.store import CredentialStore
from bizdir.auth.transport import AGENT_COOKIE
from bizdir.config import settings
from bizdir.db.engine import get_db
from bizdir.db.models import Agent
from bizdir.errors import AuthenticationInvalid
from bizdir.schemas.principal import AgentRead, LoginRequest
from bizdir.schemas.shop import (
    AgentShopCreate,
    AgentShopRead,
    PaymentConfirm,
    RenewalPaymentRead,
    RenewalRequest,
    RenewalShopRead,
)
from bizdir.services.agent_service import AgentService
from bizdir.services.shop_service import ShopService

logger = structlog.get_logger()

router = APIRouter(prefix="/agent")


def set_token_cookie(response: Response, name: str, token: str) -> None:
    response.set_cookie(
        name,
        token,
        max_age=settings.token_expire_days * 24 * 3600,
        httponly=True,
        samesite="lax",
        secure=settings.environment == "production",
    )


# ─── Auth ───────────────────────────────────────────────

@router.post("/auth/login")
async def login(
    body: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)
):
    agent = await CredentialStore(db).authenticate(
        PrincipalKind.AGENT, body.identifier, body.password
    )
    if agent is None:
        logger.info("agent.login_failed")
        raise AuthenticationInvalid("Invalid credentials")

    token = issue_token(PrincipalKind.AGENT, str(agent.id), agent.agent_code, agent.email)
    set_token_cookie(response, AGENT_COOKIE, token)
    logger.info("agent.login", agent_id=str(agent.id))
    return {"success": True, "token": token, "agent": AgentRead.model_validate(agent)}


@router.post("/auth/logout")
async def logout(response: Response):
    response.delete_cookie(AGENT_COOKIE)
    return {"success": True}


@router.get("/me")
async def get_me(agent: Agent = Depends(get_current_agent)):
    return {"success": True, "agent": AgentRead.model_validate(agent)}


@router.get("/dashboard")
async def dashboard(
    agent: Agent = Depends(get_current_agent), db: AsyncSession = Depends(get_db)
):
    stats = await AgentService(db).dashboard(agent)
    return {"success": True, "stats": stats}


@router.get("/payments")
async def payments(
    date: str = Query("all", pattern=r"^(today|week|month|all)$"),
    payment: str = Query("all", pattern=r"^(paid|pending|all)$"),
    agent: Agent = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    shops, analytics = await AgentService(db).payments(
        agent, date_filter=date, payment_filter=payment
    )
    return {
        "success": True,
        "shops": [AgentShopRead.model_validate(s) for s in shops],
        "analytics": analytics,
    }


@router.get("/reports/daily")
async def daily_report(
    agent: Agent = Depends(get_current_agent), db: AsyncSession = Depends(get_db)
):
    report = await AgentService(db).daily_report(agent)
    report["shops"] = [AgentShopRead.model_validate(s) for s in report["shops"]]
    return {"success": True, "report": report}


# ─── Shops ──────────────────────────────────────────────

@router.get("/shops")
async def list_shops(
    payment_status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    agent: Agent = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    shops, total = await ShopService(db).list_agent_shops(
        agent_id=agent.id, payment_status=payment_status, page=page, limit=limit
    )
    return {
        "success": True,
        "shops": [AgentShopRead.model_validate(s) for s in shops],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if total else 0,
        },
    }


@router.post("/shops", status_code=201)
async def create_shop(
    body: AgentShopCreate,
    agent: Agent = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    shop = await ShopService(db).register_shop(agent, body)
    return {"success": True, "shop": AgentShopRead.model_validate(shop)}


@router.get("/shops/renew")
async def list_renewals(
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    agent: Agent = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    """This agent's shops that expired and are waiting for renewal."""
    shops, total = await ShopService(db).list_renewals(
        agent_id=agent.id, page=page, limit=limit
    )
    return {
        "success": True,
        "shops": [RenewalShopRead.model_validate(s) for s in shops],
        "count": total,
    }


@router.post("/shops/renew")
async def renew_shop(
    body: RenewalRequest,
    agent: Agent = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    payment, restored = await ShopService(db).renew_shop(body, agent=agent)
    return {
        "success": True,
        "message": "Shop renewed successfully",
        "shop": AgentShopRead.model_validate(restored.record),
        "payment": RenewalPaymentRead.model_validate(payment),
        "total_earnings": agent.total_earnings,
    }


@router.get("/shops/{shop_id}")
async def get_shop(
    shop_id: uuid.UUID,
    agent: Agent = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    shop = await ShopService(db).get_owned_shop(agent, shop_id)
    return {"success": True, "shop": AgentShopRead.model_validate(shop)}


@router.post("/shops/{shop_id}/mark-payment-done")
async def mark_payment_done(
    shop_id: uuid.UUID,
    body: PaymentConfirm,
    agent: Agent = Depends(get_current_agent),
    db: AsyncSession = Depends(get_db),
):
    svc = ShopService(db)
    shop = await svc.get_owned_shop(agent, shop_id)
    shop = await svc.mark_payment_done(shop, body)
    return {
        "success": True,
        "shop": AgentShopRead.model_validate(shop),
        "total_earnings": agent.total_earnings,
    }
