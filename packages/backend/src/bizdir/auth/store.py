"""Credential store: principal lookup and password checks.

All three principal kinds resolve through here, so the "inactive
operators do not exist" rule lives in exactly one place.
"""

import uuid
from typing import Optional, Union

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.auth.jwt import PrincipalKind
from bizdir.auth.password import verify_password
from bizdir.db.models import AdminUser, Agent, Operator

Principal = Union[AdminUser, Agent, Operator]

_MODELS: dict[PrincipalKind, type] = {
    PrincipalKind.ADMIN_USER: AdminUser,
    PrincipalKind.AGENT: Agent,
    PrincipalKind.OPERATOR: Operator,
}


def _parse_id(value: object) -> Optional[uuid.UUID]:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


class CredentialStore:
    """Looks up principals by id or login identifier."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_active_principal(
        self, kind: PrincipalKind, principal_id: object
    ) -> Optional[Principal]:
        """Resolve a decoded token subject to a principal, or None.

        Operators must also be active. An inactive operator resolves to
        None even when its token is still cryptographically valid.
        """
        pid = _parse_id(principal_id)
        if pid is None:
            return None
        principal = await self.db.get(_MODELS[kind], pid)
        if principal is None:
            return None
        if kind is PrincipalKind.OPERATOR and not principal.is_active:
            return None
        return principal

    async def find_by_identifier(
        self, kind: PrincipalKind, identifier: str
    ) -> Optional[Principal]:
        """Find a principal by email (case-insensitive) or phone."""
        identifier = (identifier or "").strip()
        if not identifier:
            return None

        if kind is PrincipalKind.ADMIN_USER:
            q = select(AdminUser).where(AdminUser.email == identifier.lower())
        else:
            model = _MODELS[kind]
            q = select(model).where(
                or_(model.email == identifier.lower(), model.phone == identifier)
            )
            if kind is PrincipalKind.OPERATOR:
                q = q.where(Operator.is_active.is_(True))

        result = await self.db.execute(q)
        return result.scalars().first()

    async def authenticate(
        self, kind: PrincipalKind, identifier: str, password: str
    ) -> Optional[Principal]:
        """Return the principal when identifier and password both match."""
        principal = await self.find_by_identifier(kind, identifier)
        if principal is None:
            return None
        if not verify_password(password, principal.password_hash):
            return None
        return principal
