"""Shop service: registration, payments, plans, renewals, visibility, visits.

A shop id arriving from the public site may belong to any of the three
shop tables. resolve_shop() checks them in a fixed order and the first
match wins:

    AdminShop → LegacyShop → AgentShop

Each kind says whether it carries a visitor counter. LegacyShop does
not, so a visit to a legacy listing is acknowledged but not counted.
"""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional, Union

import structlog
from sqlalchemy import and_, delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.config import settings
from bizdir.db.models import (
    PAYMENT_PAID,
    PAYMENT_PENDING,
    AdminShop,
    Agent,
    AgentShop,
    LegacyShop,
    RenewalPayment,
    RenewalShop,
    utcnow,
)
from bizdir.errors import AuthorizationDenied, NotFound, ValidationFailed
from bizdir.schemas.shop import AgentShopCreate, PaymentConfirm, RenewalRequest
from bizdir.services.agent_service import AgentService
from bizdir.services.pricing import Plan, commission_for, get_plan
from bizdir.services.slugs import generate_shop_slug

logger = structlog.get_logger()

ShopRecord = Union[AdminShop, LegacyShop, AgentShop]


class ShopKind(str, enum.Enum):
    ADMIN = "admin"
    LEGACY = "legacy"
    AGENT = "agent"


@dataclass(frozen=True)
class ShopModel:
    kind: ShopKind
    model: type
    counts_visits: bool


LOOKUP_ORDER: tuple[ShopModel, ...] = (
    ShopModel(ShopKind.ADMIN, AdminShop, counts_visits=True),
    ShopModel(ShopKind.LEGACY, LegacyShop, counts_visits=False),
    ShopModel(ShopKind.AGENT, AgentShop, counts_visits=True),
)


@dataclass
class ResolvedShop:
    kind: ShopKind
    record: ShopRecord
    counts_visits: bool

    @property
    def visitor_count(self) -> Optional[int]:
        if not self.counts_visits:
            return None
        return self.record.visitor_count or 0


def _receipt_no(now: datetime) -> str:
    return f"REC{int(now.timestamp() * 1000)}"


def _apply_plan(shop: AdminShop, plan: Plan) -> None:
    shop.priority_rank = plan.priority_rank
    shop.placements = plan.placements()


class ShopService:
    """Business logic for shops across all three shop tables."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Lookup ─────────────────────────────────────────

    async def resolve_shop(self, shop_id: uuid.UUID) -> Optional[ResolvedShop]:
        for entry in LOOKUP_ORDER:
            record = await self.db.get(entry.model, shop_id)
            if record is not None:
                return ResolvedShop(entry.kind, record, entry.counts_visits)
        return None

    async def get_agent_shop(self, shop_id: uuid.UUID) -> AgentShop:
        shop = await self.db.get(AgentShop, shop_id)
        if not shop:
            raise NotFound("Shop not found")
        return shop

    async def get_owned_shop(self, agent: Agent, shop_id: uuid.UUID) -> AgentShop:
        shop = await self.get_agent_shop(shop_id)
        if shop.agent_id != agent.id:
            raise AuthorizationDenied("Shop belongs to another agent")
        return shop

    # ─── Registration ───────────────────────────────────

    async def register_shop(self, agent: Agent, body: AgentShopCreate) -> AgentShop:
        """Create a PENDING shop for an agent with a unique public URL."""
        plan = get_plan(body.plan_type)
        shop_id = uuid.uuid4()
        data = body.model_dump(exclude={"amount"})
        shop = AgentShop(
            id=shop_id,
            agent_id=agent.id,
            shop_url=generate_shop_slug(body.shop_name, str(shop_id)),
            amount=body.amount or plan.amount,
            payment_status=PAYMENT_PENDING,
            **data,
        )
        if shop.email:
            shop.email = shop.email.strip().lower()
        self.db.add(shop)
        await self.db.flush()

        await AgentService(self.db).recount_shops(agent)
        await self.db.commit()
        logger.info("shop.registered", shop_id=str(shop.id), agent_id=str(agent.id))
        return shop

    async def list_agent_shops(
        self,
        agent_id: Optional[uuid.UUID] = None,
        payment_status: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[AgentShop], int]:
        q = select(AgentShop)
        if agent_id is not None:
            q = q.where(AgentShop.agent_id == agent_id)
        if payment_status:
            q = q.where(AgentShop.payment_status == payment_status.upper())

        total = await self.db.scalar(select(func.count()).select_from(q.subquery()))
        result = await self.db.execute(
            q.order_by(AgentShop.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    # ─── Payments ───────────────────────────────────────

    async def mark_payment_done(
        self,
        shop: AgentShop,
        body: PaymentConfirm,
        now: Optional[datetime] = None,
    ) -> AgentShop:
        """PENDING → PAID. Sets commission and a 365-day validity window.

        Re-confirming an already PAID shop updates its payment details. A
        shop parked for renewal is unparked and shown again.
        The agent's earnings are rebuilt from scratch afterwards either way.
        """
        now = now or utcnow()
        plan = get_plan(body.plan_type or shop.plan_type)
        was_pending = shop.payment_status == PAYMENT_PENDING

        shop.payment_status = PAYMENT_PAID
        shop.payment_mode = body.payment_mode
        shop.receipt_no = body.receipt_no or shop.receipt_no or _receipt_no(now)
        shop.amount = body.amount or shop.amount or plan.amount
        if body.plan_type:
            shop.plan_type = body.plan_type
        if body.district:
            shop.district = body.district
        shop.agent_commission = commission_for(shop.amount)
        shop.last_payment_date = now
        shop.payment_expiry_date = now + timedelta(days=settings.payment_validity_days)
        unparked = await self.db.execute(
            delete(RenewalShop).where(RenewalShop.original_agent_shop_id == shop.id)
        )
        if unparked.rowcount:
            shop.is_visible = True
        await self.db.flush()

        agent = await self.db.get(Agent, shop.agent_id)
        if agent is not None:
            await AgentService(self.db).recalculate_earnings(agent)
        else:
            await self.db.commit()

        logger.info(
            "shop.payment_confirmed",
            shop_id=str(shop.id),
            amount=shop.amount,
            commission=shop.agent_commission,
            was_pending=was_pending,
        )
        return shop

    async def expired_shops(self, now: Optional[datetime] = None) -> list[AgentShop]:
        """PAID shops whose validity window has passed."""
        now = now or utcnow()
        result = await self.db.execute(
            select(AgentShop)
            .where(
                AgentShop.payment_status == PAYMENT_PAID,
                AgentShop.payment_expiry_date.is_not(None),
                AgentShop.payment_expiry_date < now,
            )
            .order_by(AgentShop.payment_expiry_date)
        )
        return list(result.scalars().all())

    # ─── Plans ──────────────────────────────────────────

    async def update_plan(
        self, shop_id: uuid.UUID, plan_type: str
    ) -> tuple[ResolvedShop, str]:
        """Move a shop to another plan. Returns the shop and its previous plan.

        Admin shops take the plan's price, rank and placements. Agent shops
        only reprice while PENDING; a paid amount is never rewritten.
        """
        resolved = await self.resolve_shop(shop_id)
        if resolved is None:
            raise NotFound("Shop not found")
        if resolved.kind is ShopKind.LEGACY:
            raise ValidationFailed("Legacy listings do not have a plan")

        shop = resolved.record
        plan = get_plan(plan_type)
        previous = shop.plan_type
        shop.plan_type = plan_type
        if resolved.kind is ShopKind.ADMIN:
            shop.amount = plan.amount
            _apply_plan(shop, plan)
        elif shop.payment_status == PAYMENT_PENDING:
            shop.amount = plan.amount
        await self.db.commit()

        logger.info(
            "shop.plan_changed",
            shop_id=str(shop_id),
            shop_type=resolved.kind.value,
            old_plan=previous,
            new_plan=plan_type,
        )
        return resolved, previous

    # ─── Renewals ───────────────────────────────────────

    def _expired_admin_shops_query(self, now: datetime):
        # No expiry date means the listing is valid for a year from creation
        created_cutoff = now - timedelta(days=settings.payment_validity_days)
        return select(AdminShop).where(
            or_(
                AdminShop.payment_expiry_date < now,
                and_(
                    AdminShop.payment_expiry_date.is_(None),
                    AdminShop.created_at < created_cutoff,
                ),
            )
        )

    def _unparked_agent_shops_query(self, now: datetime):
        parked = select(RenewalShop.original_agent_shop_id).where(
            RenewalShop.original_agent_shop_id.is_not(None)
        )
        return select(AgentShop).where(
            AgentShop.payment_status == PAYMENT_PAID,
            AgentShop.payment_expiry_date.is_not(None),
            AgentShop.payment_expiry_date < now,
            AgentShop.id.not_in(parked),
        )

    async def expiry_stats(self, now: Optional[datetime] = None) -> dict:
        """How many shops the next check_expiry() would park, and how many are parked."""
        now = now or utcnow()

        async def count(q) -> int:
            return await self.db.scalar(select(func.count()).select_from(q.subquery())) or 0

        expired = await count(self._expired_admin_shops_query(now))
        expired += await count(self._unparked_agent_shops_query(now))
        return {
            "expired_count": expired,
            "renew_count": await count(select(RenewalShop)),
        }

    async def check_expiry(self, now: Optional[datetime] = None) -> int:
        """Park every expired shop for renewal. Returns how many were parked.

        Expired admin shops are removed from the public listing table and
        kept as a snapshot. Expired agent shops stay PAID (the commission
        was earned) but are hidden until renewed.
        """
        now = now or utcnow()
        validity = timedelta(days=settings.payment_validity_days)
        moved = 0

        result = await self.db.execute(self._expired_admin_shops_query(now))
        for shop in result.scalars().all():
            self.db.add(
                RenewalShop(
                    shop_name=shop.shop_name,
                    owner_name=shop.owner_name,
                    mobile=shop.mobile,
                    category=shop.category,
                    pincode=shop.pincode,
                    address=shop.address,
                    district=shop.district,
                    plan_type=shop.plan_type,
                    amount=shop.amount,
                    visitor_count=shop.visitor_count,
                    original_shop_id=shop.id,
                    expired_date=shop.payment_expiry_date or shop.created_at + validity,
                    last_payment_date=shop.last_payment_date or shop.created_at,
                    created_at=shop.created_at,
                )
            )
            await self.db.delete(shop)
            moved += 1

        result = await self.db.execute(self._unparked_agent_shops_query(now))
        for shop in result.scalars().all():
            self.db.add(
                RenewalShop(
                    shop_name=shop.shop_name,
                    owner_name=shop.owner_name,
                    mobile=shop.mobile,
                    category=shop.category,
                    pincode=shop.pincode,
                    address=shop.address,
                    district=shop.district,
                    plan_type=shop.plan_type,
                    amount=shop.amount,
                    visitor_count=shop.visitor_count,
                    original_agent_shop_id=shop.id,
                    expired_date=shop.payment_expiry_date,
                    last_payment_date=shop.last_payment_date,
                    created_at=shop.created_at,
                )
            )
            shop.is_visible = False
            moved += 1

        await self.db.commit()
        logger.info("shops.expiry_checked", parked=moved)
        return moved

    async def list_renewals(
        self,
        agent_id: Optional[uuid.UUID] = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[RenewalShop], int]:
        """Parked shops, most recently expired first. `agent_id` keeps only that agent's."""
        q = select(RenewalShop)
        if agent_id is not None:
            q = q.join(AgentShop, RenewalShop.original_agent_shop_id == AgentShop.id).where(
                AgentShop.agent_id == agent_id
            )
        total = await self.db.scalar(select(func.count()).select_from(q.subquery()))
        result = await self.db.execute(
            q.order_by(RenewalShop.expired_date.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def renew_shop(
        self,
        body: RenewalRequest,
        agent: Optional[Agent] = None,
        now: Optional[datetime] = None,
    ) -> tuple[RenewalPayment, ResolvedShop]:
        """Take a renewal payment for a parked shop and put it back live.

        With `agent`, only that agent's own shops can be renewed. The
        renewed agent shop carries the renewal amount and commission, and
        the owner's earnings are rebuilt from PAID shops afterwards.
        """
        renewal = await self.db.get(RenewalShop, body.renew_shop_id)
        if renewal is None:
            raise NotFound("Renew shop not found")

        agent_shop = None
        if renewal.original_agent_shop_id is not None:
            agent_shop = await self.db.get(AgentShop, renewal.original_agent_shop_id)
        if agent is not None and (agent_shop is None or agent_shop.agent_id != agent.id):
            raise AuthorizationDenied("This shop does not belong to you")

        now = now or utcnow()
        expiry = now + timedelta(days=settings.payment_validity_days)
        amount = body.amount or renewal.amount or get_plan(renewal.plan_type).amount
        receipt_no = body.receipt_no or _receipt_no(now)

        owner = agent
        if agent_shop is not None:
            agent_shop.payment_status = PAYMENT_PAID
            agent_shop.payment_mode = body.payment_mode
            agent_shop.receipt_no = receipt_no
            agent_shop.amount = amount
            agent_shop.agent_commission = commission_for(amount)
            agent_shop.last_payment_date = now
            agent_shop.payment_expiry_date = expiry
            agent_shop.is_visible = True
            restored = ResolvedShop(ShopKind.AGENT, agent_shop, counts_visits=True)
            if owner is None:
                owner = await self.db.get(Agent, agent_shop.agent_id)
        else:
            shop = AdminShop(
                id=renewal.original_shop_id,
                shop_name=renewal.shop_name,
                owner_name=renewal.owner_name,
                mobile=renewal.mobile,
                category=renewal.category,
                address=renewal.address,
                pincode=renewal.pincode,
                district=renewal.district,
                payment_status=PAYMENT_PAID,
                amount=amount,
                plan_type=renewal.plan_type,
                last_payment_date=now,
                payment_expiry_date=expiry,
                visitor_count=renewal.visitor_count,
                created_at=now,
            )
            _apply_plan(shop, get_plan(renewal.plan_type))
            self.db.add(shop)
            restored = ResolvedShop(ShopKind.ADMIN, shop, counts_visits=True)

        payment = RenewalPayment(
            shop_name=renewal.shop_name,
            owner_name=renewal.owner_name,
            mobile=renewal.mobile,
            agent_id=owner.id if owner else None,
            agent_name=owner.name if owner else "",
            agent_code=owner.agent_code if owner else "",
            renewal_amount=amount,
            renewal_date=now,
            receipt_no=receipt_no,
            payment_mode=body.payment_mode,
            original_shop_id=renewal.original_shop_id,
            original_agent_shop_id=renewal.original_agent_shop_id,
        )
        self.db.add(payment)
        await self.db.delete(renewal)
        await self.db.flush()

        if owner is not None and agent_shop is not None:
            await AgentService(self.db).recalculate_earnings(owner)
        else:
            await self.db.commit()

        logger.info(
            "shop.renewed",
            shop_id=str(restored.record.id),
            shop_type=restored.kind.value,
            amount=amount,
            agent_id=str(owner.id) if owner else None,
        )
        return payment, restored

    # ─── Visibility & visits ────────────────────────────

    async def set_visibility(self, shop_id: uuid.UUID, is_visible: bool) -> ResolvedShop:
        resolved = await self.resolve_shop(shop_id)
        if resolved is None:
            raise NotFound("Shop not found")
        resolved.record.is_visible = is_visible
        await self.db.commit()
        return resolved

    async def record_visit(self, shop_id: uuid.UUID) -> ResolvedShop:
        """Increment the visitor counter of whichever shop owns this id."""
        resolved = await self.resolve_shop(shop_id)
        if resolved is None:
            raise NotFound("Shop not found")

        if resolved.counts_visits:
            model = type(resolved.record)
            await self.db.execute(
                update(model)
                .where(model.id == shop_id)
                .values(visitor_count=model.visitor_count + 1)
            )
            await self.db.commit()
            await self.db.refresh(resolved.record)
        return resolved
