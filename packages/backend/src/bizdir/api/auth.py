"""Back-office auth API.

- POST /auth/login          email + password (+ optional role) → token
- GET  /auth/me             current back-office user
- POST /auth/refresh-token  re-mint a token from the user's current role
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.auth.dependencies import get_current_admin_user
from bizdir.auth.roles import role_display_name
from bizdir.db.engine import get_db
from bizdir.db.models import AdminUser
from bizdir.schemas.principal import AdminLoginRequest, AdminUserRead
from bizdir.services.user_service import UserService, token_for

router = APIRouter(prefix="/auth")


def _user_body(user: AdminUser) -> dict:
    return {
        **AdminUserRead.model_validate(user).model_dump(mode="json"),
        "role_name": role_display_name(user.role),
    }


@router.post("/login")
async def login(body: AdminLoginRequest, db: AsyncSession = Depends(get_db)):
    user, token = await UserService(db).login(body.email, body.password, body.role)
    return {"success": True, "token": token, "user": _user_body(user)}


@router.get("/me")
async def get_me(user: AdminUser = Depends(get_current_admin_user)):
    return {"success": True, "user": _user_body(user)}


@router.post("/refresh-token")
async def refresh_token(user: AdminUser = Depends(get_current_admin_user)):
    """The new token reflects the role stored now, not the one in the old token."""
    return {"success": True, "token": token_for(user), "user": _user_body(user)}
