"""Back-office user service: login, role changes, token refresh."""

import uuid
from typing import Optional

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.auth.jwt import PrincipalKind, issue_token
from bizdir.auth.roles import Role, parse_role
from bizdir.auth.store import CredentialStore
from bizdir.db.models import AdminUser
from bizdir.errors import AuthenticationInvalid, AuthorizationDenied, NotFound, ValidationFailed

logger = structlog.get_logger()


def token_for(user: AdminUser) -> str:
    """Mint a back-office token. The `code` claim carries the user's role."""
    return issue_token(PrincipalKind.ADMIN_USER, str(user.id), user.role, user.email)


class UserService:
    """Business logic for back-office users."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def login(
        self, email: str, password: str, role: Optional[str] = None
    ) -> tuple[AdminUser, str]:
        """Check credentials and, when a role is requested, that the user holds it.

        A role of "user" means no role filter.
        """
        user = await CredentialStore(self.db).authenticate(
            PrincipalKind.ADMIN_USER, email, password
        )
        if user is None:
            logger.info("auth.login_failed", kind="admin_user")
            raise AuthenticationInvalid("Invalid credentials")

        if role and role != Role.USER.value and user.role != role:
            logger.info("auth.role_mismatch", user_id=str(user.id), requested=role)
            raise AuthorizationDenied(f"You do not have {role} access")

        logger.info("auth.login", user_id=str(user.id), role=user.role)
        return user, token_for(user)

    async def list_users(self) -> list[AdminUser]:
        result = await self.db.execute(select(AdminUser).order_by(AdminUser.created_at.desc()))
        return list(result.scalars().all())

    async def get_user(self, user_id: uuid.UUID) -> AdminUser:
        user = await self.db.get(AdminUser, user_id)
        if not user:
            raise NotFound("User not found")
        return user

    async def set_role(self, user_id: uuid.UUID, role: str, acting: AdminUser) -> AdminUser:
        if parse_role(role) is None:
            raise ValidationFailed(f"Unknown role: {role}")
        user = await self.get_user(user_id)
        if user.id == acting.id and role != Role.ADMIN.value:
            raise ValidationFailed("You cannot remove your own admin role")
        old = user.role
        user.role = role
        await self.db.commit()
        logger.info("user.role_changed", user_id=str(user.id), old=old, new=role)
        return user
