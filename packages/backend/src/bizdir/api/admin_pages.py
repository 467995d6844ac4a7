"""Admin API: CMS pages."""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.auth.dependencies import require
from bizdir.auth.roles import Permission
from bizdir.db.engine import get_db
from bizdir.schemas.page import PageCreate, PageRead, PageUpdate
from bizdir.services.page_service import PageService

router = APIRouter(prefix="/admin/pages")

_privileged = Depends(require(Permission.PRIVILEGED))


def _svc(db: AsyncSession = Depends(get_db)) -> PageService:
    return PageService(db)


@router.get("", dependencies=[_privileged])
async def list_pages(svc: PageService = Depends(_svc)):
    pages = await svc.list_pages()
    return {"success": True, "pages": [PageRead.model_validate(p) for p in pages]}


@router.post("", status_code=201, dependencies=[_privileged])
async def create_page(body: PageCreate, svc: PageService = Depends(_svc)):
    page = await svc.create_page(body)
    return {"success": True, "page": PageRead.model_validate(page)}


@router.get("/{page_id}", dependencies=[_privileged])
async def get_page(page_id: uuid.UUID, svc: PageService = Depends(_svc)):
    page = await svc.get_page(page_id)
    return {"success": True, "page": PageRead.model_validate(page)}


@router.put("/{page_id}", dependencies=[Depends(require(Permission.EDIT))])
async def update_page(
    page_id: uuid.UUID, body: PageUpdate, svc: PageService = Depends(_svc)
):
    page = await svc.update_page(page_id, body)
    return {"success": True, "page": PageRead.model_validate(page)}


@router.delete("/{page_id}", dependencies=[Depends(require(Permission.DELETE))])
async def delete_page(page_id: uuid.UUID, svc: PageService = Depends(_svc)):
    await svc.delete_page(page_id)
    return {"success": True, "message": "Page deleted"}


@router.post("/{page_id}/duplicate", status_code=201, dependencies=[_privileged])
async def duplicate_page(page_id: uuid.UUID, svc: PageService = Depends(_svc)):
    page = await svc.duplicate_page(page_id)
    return {"success": True, "page": PageRead.model_validate(page)}
