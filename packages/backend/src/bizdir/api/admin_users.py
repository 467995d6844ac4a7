"""Admin API: back-office users and their roles. Admin only."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.auth.dependencies import require
from bizdir.auth.roles import Permission
from bizdir.db.engine import get_db
from bizdir.db.models import AdminUser
from bizdir.schemas.principal import AdminUserRead, RoleUpdate
from bizdir.services.user_service import UserService

router = APIRouter(prefix="/admin/users")

_admin_only = require(Permission.ADMIN_ONLY)


@router.get("", dependencies=[Depends(_admin_only)])
async def list_users(db: AsyncSession = Depends(get_db)):
    users = await UserService(db).list_users()
    return {"success": True, "users": [AdminUserRead.model_validate(u) for u in users]}


@router.put("/{user_id}/role")
async def change_role(
    user_id: uuid.UUID,
    body: RoleUpdate,
    admin: AdminUser = Depends(_admin_only),
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).set_role(user_id, body.role, acting=admin)
    return {"success": True, "user": AdminUserRead.model_validate(user)}
