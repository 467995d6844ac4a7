"""Pydantic schemas for shops and payments."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

PLAN_PATTERN = r"^(BASIC|PREMIUM|FEATURED|LEFT_BAR|RIGHT_BAR|BANNER|HERO)$"


class AgentShopCreate(BaseModel):
    shop_name: str = Field(..., min_length=1, max_length=200)
    owner_name: str = Field(..., min_length=1, max_length=100)
    mobile: str = Field(..., pattern=r"^(\+?\d{1,3}[-.\s]?)?(\d{10})$")
    email: Optional[str] = Field(None, pattern=r"^\S+@\S+\.\S+$")
    category: str = Field(..., min_length=1, max_length=100)
    pincode: str = Field(..., pattern=r"^\d{6}$")
    area: str = Field(..., min_length=1, max_length=100)
    address: str = Field(..., min_length=1, max_length=500)
    district: Optional[str] = Field(None, max_length=100)
    photo_url: str = ""
    additional_photos: list[str] = Field(default_factory=list, max_length=9)
    latitude: float = Field(..., ge=-90, le=90)
    longitude: float = Field(..., ge=-180, le=180)
    plan_type: str = Field(default="BASIC", pattern=PLAN_PATTERN)
    amount: Optional[int] = Field(None, ge=0)


class PaymentConfirm(BaseModel):
    payment_mode: str = Field(default="CASH", pattern=r"^(CASH|UPI)$")
    receipt_no: Optional[str] = Field(None, max_length=50)
    amount: Optional[int] = Field(None, ge=0)
    plan_type: Optional[str] = Field(None, pattern=PLAN_PATTERN)
    district: Optional[str] = Field(None, max_length=100)


class VisibilityUpdate(BaseModel):
    is_visible: bool


class PlanUpdate(BaseModel):
    plan_type: str = Field(..., pattern=PLAN_PATTERN)


class RenewalRequest(BaseModel):
    renew_shop_id: uuid.UUID
    payment_mode: str = Field(default="CASH", pattern=r"^(CASH|UPI)$")
    receipt_no: Optional[str] = Field(None, max_length=50)
    amount: Optional[int] = Field(None, ge=0)


class AgentShopRead(BaseModel):
    id: uuid.UUID
    agent_id: uuid.UUID
    shop_name: str
    owner_name: str
    mobile: str
    email: Optional[str] = None
    category: str
    pincode: str
    area: str
    address: str
    district: Optional[str] = None
    photo_url: str
    additional_photos: list[str]
    shop_url: str
    latitude: float
    longitude: float
    payment_status: str
    payment_mode: str
    receipt_no: str
    amount: int
    plan_type: str
    agent_commission: int
    last_payment_date: Optional[datetime] = None
    payment_expiry_date: Optional[datetime] = None
    is_visible: bool
    visitor_count: int
    created_at: datetime

    model_config = {"from_attributes": True}


class RenewalShopRead(BaseModel):
    id: uuid.UUID
    shop_name: str
    owner_name: str
    mobile: str
    category: str
    pincode: str
    address: str
    district: Optional[str] = None
    plan_type: str
    amount: int
    original_shop_id: Optional[uuid.UUID] = None
    original_agent_shop_id: Optional[uuid.UUID] = None
    expired_date: datetime
    last_payment_date: Optional[datetime] = None
    created_at: datetime

    model_config = {"from_attributes": True}


class RenewalPaymentRead(BaseModel):
    id: uuid.UUID
    shop_name: str
    owner_name: str
    agent_id: Optional[uuid.UUID] = None
    agent_name: str
    agent_code: str
    renewal_amount: int
    renewal_date: datetime
    receipt_no: str
    payment_mode: str
    original_shop_id: Optional[uuid.UUID] = None
    original_agent_shop_id: Optional[uuid.UUID] = None

    model_config = {"from_attributes": True}
