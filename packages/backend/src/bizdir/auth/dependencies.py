"""FastAPI auth dependencies.

These are used as Depends() in route handlers. Each one runs the whole
pipeline for its portal:

    transport (header/cookie) → token codec → credential store → role gate

and raises before the handler body runs, so a denied request never
performs a partial write.
"""

from typing import Callable, Iterable, Optional, Union

import structlog
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.auth.jwt import PrincipalKind, verify_token
from bizdir.auth.roles import Permission, Role, authorize
from bizdir.auth.store import CredentialStore, Principal
from bizdir.auth.transport import AGENT_COOKIE, OPERATOR_COOKIE, extract_token
from bizdir.db.engine import get_db
from bizdir.db.models import AdminUser, Agent, Operator
from bizdir.errors import AuthenticationInvalid, AuthenticationMissing, AuthorizationDenied

logger = structlog.get_logger()


async def _resolve(
    request: Request,
    db: AsyncSession,
    kind: PrincipalKind,
    cookie_name: Optional[str] = None,
    allow_query_token: bool = False,
) -> Principal:
    query_token = request.query_params.get("token") if allow_query_token else None
    token = extract_token(request.headers, cookie_name=cookie_name, query_token=query_token)
    if not token:
        raise AuthenticationMissing()

    payload = verify_token(token, kind=kind)
    if payload is None:
        raise AuthenticationInvalid()

    principal = await CredentialStore(db).find_active_principal(kind, payload["sub"])
    if principal is None:
        logger.info("auth.principal_not_found", kind=kind.value, sub=payload["sub"])
        raise AuthenticationInvalid()
    return principal


async def get_current_admin_user(
    request: Request, db: AsyncSession = Depends(get_db)
) -> AdminUser:
    """Back-office user from bearer header or ?token= query parameter."""
    return await _resolve(
        request, db, PrincipalKind.ADMIN_USER, allow_query_token=True
    )


async def get_current_agent(
    request: Request, db: AsyncSession = Depends(get_db)
) -> Agent:
    """Agent from bearer header or `agent_token` cookie."""
    return await _resolve(request, db, PrincipalKind.AGENT, cookie_name=AGENT_COOKIE)


async def get_current_operator(
    request: Request, db: AsyncSession = Depends(get_db)
) -> Operator:
    """Active operator from bearer header or `operator_token` cookie."""
    return await _resolve(
        request, db, PrincipalKind.OPERATOR, cookie_name=OPERATOR_COOKIE
    )


def require(required: Union[Permission, Iterable[Role]]) -> Callable:
    """Build a dependency that authenticates a back-office user and gates on role.

    Usage:
        @router.delete("/pages/{id}")
        async def delete_page(user: AdminUser = Depends(require(Permission.DELETE))):
    """
    if not isinstance(required, Permission):
        required = frozenset(required)

    async def dependency(
        user: AdminUser = Depends(get_current_admin_user),
    ) -> AdminUser:
        decision = authorize(user.role, required)
        if not decision.allowed:
            logger.info("auth.denied", user_id=str(user.id), role=user.role)
            raise AuthorizationDenied(decision.reason)
        return user

    return dependency
