"""Pydantic schemas for CMS pages."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

SLUG_PATTERN = r"^[a-z0-9-]+$"


class PageCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1, max_length=100, pattern=SLUG_PATTERN)
    content: str = ""
    seo_title: Optional[str] = Field(None, max_length=200)
    seo_description: Optional[str] = None
    is_published: bool = False
    design_settings: dict = Field(default_factory=dict)


class PageUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    slug: Optional[str] = Field(None, min_length=1, max_length=100, pattern=SLUG_PATTERN)
    content: Optional[str] = None
    seo_title: Optional[str] = Field(None, max_length=200)
    seo_description: Optional[str] = None
    is_published: Optional[bool] = None
    design_settings: Optional[dict] = None


class PageRead(BaseModel):
    id: uuid.UUID
    title: str
    slug: str
    content: str
    seo_title: Optional[str] = None
    seo_description: Optional[str] = None
    is_published: bool
    design_settings: dict
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
