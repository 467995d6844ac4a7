"""CMS page service."""

import uuid

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.db.models import Page
from bizdir.errors import NotFound, ValidationFailed
from bizdir.schemas.page import PageCreate, PageUpdate
from bizdir.services.slugs import next_copy_slug

logger = structlog.get_logger()


class PageService:
    """Business logic for CMS pages."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def slug_exists(self, slug: str) -> bool:
        result = await self.db.execute(select(Page.id).where(Page.slug == slug))
        return result.first() is not None

    async def list_pages(self) -> list[Page]:
        result = await self.db.execute(select(Page).order_by(Page.updated_at.desc()))
        return list(result.scalars().all())

    async def get_page(self, page_id: uuid.UUID) -> Page:
        page = await self.db.get(Page, page_id)
        if not page:
            raise NotFound("Page not found")
        return page

    async def get_published_by_slug(self, slug: str) -> Page:
        result = await self.db.execute(
            select(Page).where(Page.slug == slug, Page.is_published.is_(True))
        )
        page = result.scalars().first()
        if not page:
            raise NotFound("Page not found")
        return page

    async def create_page(self, body: PageCreate) -> Page:
        if await self.slug_exists(body.slug):
            raise ValidationFailed("A page with this slug already exists")
        page = Page(**body.model_dump())
        self.db.add(page)
        await self.db.commit()
        logger.info("page.created", page_id=str(page.id), slug=page.slug)
        return page

    async def update_page(self, page_id: uuid.UUID, body: PageUpdate) -> Page:
        page = await self.get_page(page_id)
        changes = body.model_dump(exclude_unset=True, exclude_none=True)
        if "slug" in changes and changes["slug"] != page.slug:
            if await self.slug_exists(changes["slug"]):
                raise ValidationFailed("A page with this slug already exists")
        for key, value in changes.items():
            setattr(page, key, value)
        await self.db.commit()
        return page

    async def delete_page(self, page_id: uuid.UUID) -> None:
        page = await self.get_page(page_id)
        await self.db.delete(page)
        await self.db.commit()
        logger.info("page.deleted", page_id=str(page_id), slug=page.slug)

    async def duplicate_page(self, page_id: uuid.UUID) -> Page:
        """Copy a page as an unpublished draft under the next free -copy slug."""
        original = await self.get_page(page_id)
        slug = await next_copy_slug(original.slug, self.slug_exists)
        copy = Page(
            title=f"{original.title} (Copy)",
            slug=slug,
            content=original.content,
            seo_title=original.seo_title,
            seo_description=original.seo_description,
            is_published=False,
            design_settings=dict(original.design_settings or {}),
        )
        self.db.add(copy)
        await self.db.commit()
        logger.info("page.duplicated", source=str(original.id), slug=slug)
        return copy
