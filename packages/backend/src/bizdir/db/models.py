"""SQLAlchemy ORM models: single source of truth for the database schema.

Declarative mapping with SQLAlchemy 2.0 style (Mapped[] + mapped_column).
Column types are the portable ones (Uuid, JSON) so the same models run on
PostgreSQL in production and SQLite in tests.

Principals: AdminUser, Agent, Operator. Each stores a bcrypt hash in
password_hash, which no response schema ever exposes.

Shops come in three shapes that coexist in the database:
- AdminShop: created from the back-office, has a visitor counter
- LegacyShop: imported business listings, no visitor counter
- AgentShop: registered by a field agent, owns the commission data

RenewalShop parks expired listings until they are paid again; every
renewal is logged in RenewalPayment.
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_uuid() -> uuid.UUID:
    return uuid.uuid4()


PAYMENT_PENDING = "PENDING"
PAYMENT_PAID = "PAID"


# ══════════════════════════════════════════════════════════════
# Principals
# ══════════════════════════════════════════════════════════════


class AdminUser(Base):
    """A back-office account. `role` drives the role gate."""

    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[Optional[str]] = mapped_column(String(20), unique=True, nullable=True)
    password_hash: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default="user")
    is_email_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


class Agent(Base):
    """A field agent who registers shops and earns commission on paid ones.

    total_shops and total_earnings are derived counters; the recalculation
    in AgentService rebuilds them from agent_shops.
    """

    __tablename__ = "agents"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    agent_code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    panel_text: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    panel_text_color: Mapped[str] = mapped_column(String(10), nullable=False, default="black")
    total_shops: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_earnings: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )

    shops: Mapped[list["AgentShop"]] = relationship(back_populates="agent")


class Operator(Base):
    """Back-office field operator. Inactive operators cannot authenticate."""

    __tablename__ = "operators"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    operator_code: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )


# ══════════════════════════════════════════════════════════════
# Shops
# ══════════════════════════════════════════════════════════════


class AgentShop(Base):
    """A shop registered in the field by an agent."""

    __tablename__ = "agent_shops"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    agent_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("agents.id"), nullable=False, index=True
    )
    shop_name: Mapped[str] = mapped_column(String(200), nullable=False)
    owner_name: Mapped[str] = mapped_column(String(100), nullable=False)
    mobile: Mapped[str] = mapped_column(String(20), nullable=False)
    email: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    category: Mapped[str] = mapped_column(String(100), nullable=False)
    pincode: Mapped[str] = mapped_column(String(6), nullable=False)
    area: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    district: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    photo_url: Mapped[str] = mapped_column(Text, nullable=False, default="")
    additional_photos: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    shop_url: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    latitude: Mapped[float] = mapped_column(Float, nullable=False)
    longitude: Mapped[float] = mapped_column(Float, nullable=False)

    payment_status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=PAYMENT_PENDING, index=True
    )
    payment_mode: Mapped[str] = mapped_column(String(10), nullable=False, default="NONE")
    receipt_no: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    plan_type: Mapped[str] = mapped_column(String(20), nullable=False, default="BASIC")
    agent_commission: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    last_payment_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    payment_expiry_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    visitor_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, index=True
    )

    agent: Mapped["Agent"] = relationship(back_populates="shops")


class AdminShop(Base):
    """A shop listing managed from the back-office."""

    __tablename__ = "shops"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    shop_name: Mapped[str] = mapped_column(String(200), nullable=False)
    owner_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    mobile: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    address: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    pincode: Mapped[str] = mapped_column(String(6), nullable=False, default="")
    district: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    payment_status: Mapped[str] = mapped_column(
        String(10), nullable=False, default=PAYMENT_PENDING
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    plan_type: Mapped[str] = mapped_column(String(20), nullable=False, default="BASIC")
    priority_rank: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    placements: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    last_payment_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    payment_expiry_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    visitor_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


class LegacyShop(Base):
    """Imported business listing. Predates visit tracking: no counter column."""

    __tablename__ = "legacy_shops"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(120), unique=True, nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    pincode: Mapped[str] = mapped_column(String(6), nullable=False, default="")
    is_visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


# ══════════════════════════════════════════════════════════════
# Renewals
# ══════════════════════════════════════════════════════════════


class RenewalShop(Base):
    """An expired listing waiting for its renewal payment.

    Exactly one of original_shop_id / original_agent_shop_id is set.
    An expired AdminShop is removed from `shops` and restored from this
    snapshot on renewal. An expired AgentShop stays in place, hidden, and
    is only pointed at from here.
    """

    __tablename__ = "renew_shops"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    shop_name: Mapped[str] = mapped_column(String(200), nullable=False)
    owner_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    mobile: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    category: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    pincode: Mapped[str] = mapped_column(String(6), nullable=False, default="")
    address: Mapped[str] = mapped_column(String(500), nullable=False, default="")
    district: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    plan_type: Mapped[str] = mapped_column(String(20), nullable=False, default="BASIC")
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=100)
    visitor_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    original_shop_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, nullable=True, unique=True
    )
    original_agent_shop_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("agent_shops.id"), nullable=True, unique=True
    )
    expired_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    last_payment_date: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


class RenewalPayment(Base):
    """Ledger row for one renewal. Never updated after insert."""

    __tablename__ = "renewal_payments"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    shop_name: Mapped[str] = mapped_column(String(200), nullable=False)
    owner_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    mobile: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    agent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("agents.id"), nullable=True, index=True
    )
    agent_name: Mapped[str] = mapped_column(String(100), nullable=False, default="")
    agent_code: Mapped[str] = mapped_column(String(50), nullable=False, default="")
    renewal_amount: Mapped[int] = mapped_column(Integer, nullable=False)
    renewal_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, index=True
    )
    receipt_no: Mapped[str] = mapped_column(String(50), nullable=False)
    payment_mode: Mapped[str] = mapped_column(String(10), nullable=False, default="CASH")
    original_shop_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    original_agent_shop_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )


# ══════════════════════════════════════════════════════════════
# Content
# ══════════════════════════════════════════════════════════════


class Page(Base):
    """A CMS page rendered at /{slug} on the public site."""

    __tablename__ = "pages"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=new_uuid)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    slug: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    seo_title: Mapped[Optional[str]] = mapped_column(String(200), nullable=True)
    seo_description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    design_settings: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow
    )
