"""Admin API: agent management.

Everything here needs a back-office role. Reads and account actions
are open to admin, editor and operator; profile edits need edit rights.
"""

import math
import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.auth.dependencies import require
from bizdir.auth.roles import Permission
from bizdir.db.engine import get_db
from bizdir.schemas.principal import AgentCreate, AgentRead, AgentUpdate, PasswordReset
from bizdir.services.agent_service import AgentService

router = APIRouter(prefix="/admin/agents")

_privileged = Depends(require(Permission.PRIVILEGED))
_edit = Depends(require(Permission.EDIT))


def _svc(db: AsyncSession = Depends(get_db)) -> AgentService:
    return AgentService(db)


@router.get("", dependencies=[_privileged])
async def list_agents(
    search: str = "",
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    svc: AgentService = Depends(_svc),
):
    agents, total = await svc.list_agents(search=search.strip(), page=page, limit=limit)
    return {
        "success": True,
        "agents": [AgentRead.model_validate(a) for a in agents],
        "pagination": {
            "page": page,
            "limit": limit,
            "total": total,
            "pages": math.ceil(total / limit) if total else 0,
        },
    }


@router.post("", status_code=201, dependencies=[_privileged])
async def create_agent(body: AgentCreate, svc: AgentService = Depends(_svc)):
    agent = await svc.create_agent(body)
    return {"success": True, "agent": AgentRead.model_validate(agent)}


@router.post("/recalculate-stats", dependencies=[_privileged])
async def recalculate_all(svc: AgentService = Depends(_svc)):
    """Rebuild shop counts and earnings for every agent."""
    results = await svc.recalculate_all()
    return {"success": True, "agents_updated": len(results), "results": results}


@router.get("/{agent_id}", dependencies=[_privileged])
async def get_agent(agent_id: uuid.UUID, svc: AgentService = Depends(_svc)):
    agent = await svc.get_agent(agent_id)
    return {"success": True, "agent": AgentRead.model_validate(agent)}


@router.put("/{agent_id}", dependencies=[_edit])
async def update_agent(
    agent_id: uuid.UUID, body: AgentUpdate, svc: AgentService = Depends(_svc)
):
    agent = await svc.update_agent(agent_id, body)
    return {"success": True, "agent": AgentRead.model_validate(agent)}


@router.post("/{agent_id}/reset-password", dependencies=[_privileged])
async def reset_password(
    agent_id: uuid.UUID, body: PasswordReset, svc: AgentService = Depends(_svc)
):
    await svc.reset_password(agent_id, body.new_password)
    return {"success": True, "message": "Password reset successfully"}


@router.post("/{agent_id}/recalculate-earnings", dependencies=[_privileged])
async def recalculate_earnings(agent_id: uuid.UUID, svc: AgentService = Depends(_svc)):
    agent = await svc.get_agent(agent_id)
    result = await svc.recalculate_earnings(agent)
    return {"success": True, **result.as_dict()}
