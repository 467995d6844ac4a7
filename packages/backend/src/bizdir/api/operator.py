"""Operator portal API. Only active operators can log in or be resolved."""

import math
import uuid
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.api.agent import set_token_cookie
from bizdir.auth.dependencies import get_current_operator
from bizdir.auth.jwt import PrincipalKind, issue_token
from bizdir.auth.store import CredentialStore
from bizdir.auth.transport import OPERATOR_COOKIE
from bizdir.db.engine import get_db
from bizdir.db.models import Operator
from bizdir.errors import AuthenticationInvalid
from bizdir.schemas.principal import LoginRequest, OperatorRead
from bizdir.schemas.shop import AgentShopRead
from bizdir.services.operator_service import OperatorService
from bizdir.services.shop_service import ShopService

logger = structlog.get_logger()

router = APIRouter(prefix="/operator")


@router.post("/auth/login")
async def login(
    body: LoginRequest, response: Response, db: AsyncSession = Depends(get_db)
):
    operator = await CredentialStore(db).authenticate(
        PrincipalKind.OPERATOR, body.identifier, body.password
    )
    if operator is None:
        logger.info("operator.login_failed")
        raise AuthenticationInvalid("Invalid credentials")

    token = issue_token(
        PrincipalKind.OPERATOR, str(operator.id), operator.operator_code, operator.email
    )
    set_token_cookie(response, OPERATOR_COOKIE, token)
    logger.info("operator.login", operator_id=str(operator.id))
    return {
        "success": True,
        "token": token,
        "operator": OperatorRead.model_validate(operator),
    }


@router.post("/auth/logout")
async def logout(response: Response):
    response.delete_cookie(OPERATOR_COOKIE)
    return {"success": True}


@router.get("/me")
async def get_me(operator: Operator = Depends(get_current_operator)):
    return {"success": True, "operator": OperatorRead.model_validate(operator)}


@router.get("/dashboard")
async def dashboard(
    operator: Operator = Depends(get_current_operator),
    db: AsyncSession = Depends(get_db),
):
    stats = await OperatorService(db).dashboard(operator)
    return {"success": True, "stats": stats}


@router.get("/shops", dependencies=[Depends(get_current_operator)])
async def list_shops(
    payment_status: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
):
    shops, total = await ShopService(db).list_agent_shops(
        payment_status=payment_status, page=page, limit=limit
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


@router.get("/shops/{shop_id}", dependencies=[Depends(get_current_operator)])
async def get_shop(shop_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    shop = await ShopService(db).get_agent_shop(shop_id)
    return {"success": True, "shop": AgentShopRead.model_validate(shop)}
