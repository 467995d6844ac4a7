"""Admin API: operator management. (De)activation needs delete rights."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.auth.dependencies import require
from bizdir.auth.roles import Permission
from bizdir.db.engine import get_db
from bizdir.schemas.principal import OperatorCreate, OperatorRead, OperatorUpdate
from bizdir.services.operator_service import OperatorService

router = APIRouter(prefix="/admin/operators")

_privileged = Depends(require(Permission.PRIVILEGED))


def _svc(db: AsyncSession = Depends(get_db)) -> OperatorService:
    return OperatorService(db)


@router.get("", dependencies=[_privileged])
async def list_operators(
    include_inactive: bool = True, svc: OperatorService = Depends(_svc)
):
    operators = await svc.list_operators(include_inactive=include_inactive)
    return {
        "success": True,
        "operators": [OperatorRead.model_validate(o) for o in operators],
    }


@router.post("", status_code=201, dependencies=[_privileged])
async def create_operator(body: OperatorCreate, svc: OperatorService = Depends(_svc)):
    operator = await svc.create_operator(body)
    return {"success": True, "operator": OperatorRead.model_validate(operator)}


@router.get("/{operator_id}", dependencies=[_privileged])
async def get_operator(operator_id: uuid.UUID, svc: OperatorService = Depends(_svc)):
    operator = await svc.get_operator(operator_id)
    return {"success": True, "operator": OperatorRead.model_validate(operator)}


@router.put("/{operator_id}", dependencies=[Depends(require(Permission.EDIT))])
async def update_operator(
    operator_id: uuid.UUID, body: OperatorUpdate, svc: OperatorService = Depends(_svc)
):
    operator = await svc.update_operator(operator_id, body)
    return {"success": True, "operator": OperatorRead.model_validate(operator)}


@router.delete("/{operator_id}", dependencies=[Depends(require(Permission.DELETE))])
async def deactivate_operator(
    operator_id: uuid.UUID, svc: OperatorService = Depends(_svc)
):
    """Soft delete. The record stays; its tokens stop resolving."""
    operator = await svc.deactivate(operator_id)
    return {"success": True, "operator": OperatorRead.model_validate(operator)}


@router.post(
    "/{operator_id}/reactivate", dependencies=[Depends(require(Permission.DELETE))]
)
async def reactivate_operator(
    operator_id: uuid.UUID, svc: OperatorService = Depends(_svc)
):
    operator = await svc.reactivate(operator_id)
    return {"success": True, "operator": OperatorRead.model_validate(operator)}
