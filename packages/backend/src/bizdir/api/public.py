"""Public site API: no authentication.

- POST /shops/{shop_id}/visit   count a visit on any kind of shop
- GET  /pages/{slug}            a published CMS page
"""

import uuid

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.db.engine import get_db
from bizdir.schemas.page import PageRead
from bizdir.services.page_service import PageService
from bizdir.services.shop_service import ShopService

router = APIRouter()


@router.post("/shops/{shop_id}/visit")
async def record_visit(shop_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    resolved = await ShopService(db).record_visit(shop_id)
    return {
        "success": True,
        "shop_type": resolved.kind.value,
        "counted": resolved.counts_visits,
        "visitor_count": resolved.visitor_count,
    }


@router.get("/pages/{slug}")
async def get_page(slug: str, db: AsyncSession = Depends(get_db)):
    page = await PageService(db).get_published_by_slug(slug)
    return {"success": True, "page": PageRead.model_validate(page)}
