"""Agent service: accounts, earnings, dashboard stats and payment reports.

Earnings are never trusted incrementally. Every path that changes a
shop's payment state ends in recalculate_earnings(), which rebuilds
total_earnings from the agent's PAID shops via pricing.commission_for().
Two concurrent recalculations for the same agent are last-write-wins.
"""

import calendar
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Optional

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.auth.password import hash_password
from bizdir.db.models import PAYMENT_PAID, PAYMENT_PENDING, Agent, AgentShop, utcnow
from bizdir.errors import NotFound, ValidationFailed
from bizdir.schemas.principal import AgentCreate, AgentUpdate
from bizdir.services.pricing import commission_for, effective_amount, total_commission

logger = structlog.get_logger()


@dataclass
class EarningsResult:
    agent_id: uuid.UUID
    old_earnings: int
    new_earnings: int
    paid_shops_count: int
    commissions: list[int] = field(default_factory=list)

    def as_dict(self) -> dict:
        return {
            "agent_id": str(self.agent_id),
            "old_earnings": self.old_earnings,
            "new_earnings": self.new_earnings,
            "paid_shops_count": self.paid_shops_count,
        }


def start_of_day(now: datetime) -> datetime:
    return now.replace(hour=0, minute=0, second=0, microsecond=0)


def one_month_before(day: datetime) -> datetime:
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def payment_window_start(date_filter: str, now: datetime) -> Optional[datetime]:
    """Start of the `today` / `week` / `month` window; None for `all`."""
    today = start_of_day(now)
    if date_filter == "today":
        return today
    if date_filter == "week":
        return today - timedelta(days=7)
    if date_filter == "month":
        return one_month_before(today)
    return None


def payment_summary(shops: list[AgentShop]) -> dict:
    paid = [s for s in shops if s.payment_status == PAYMENT_PAID]
    pending = [s for s in shops if s.payment_status == PAYMENT_PENDING]
    return {
        "total_shops": len(shops),
        "paid_count": len(paid),
        "pending_count": len(pending),
        "total_amount": sum(effective_amount(s.amount) for s in paid),
        "total_commission": total_commission(s.amount for s in paid),
        "pending_amount": sum(effective_amount(s.amount) for s in pending),
        "cash_payments": sum(1 for s in paid if s.payment_mode == "CASH"),
        "upi_payments": sum(1 for s in paid if s.payment_mode == "UPI"),
    }


class AgentService:
    """Business logic for agents."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ─── Accounts ───────────────────────────────────────

    async def create_agent(self, body: AgentCreate) -> Agent:
        email = body.email.strip().lower()
        code = body.agent_code.strip().upper()
        q = select(Agent).where(
            or_(Agent.email == email, Agent.phone == body.phone, Agent.agent_code == code)
        )
        if (await self.db.execute(q)).scalars().first():
            raise ValidationFailed(
                "Agent with this email, phone, or agent code already exists"
            )

        agent = Agent(
            name=body.name.strip(),
            phone=body.phone,
            email=email,
            password_hash=hash_password(body.password),
            agent_code=code,
            panel_text=body.panel_text,
            panel_text_color=body.panel_text_color,
            total_shops=0,
            total_earnings=0,
        )
        self.db.add(agent)
        await self.db.commit()
        logger.info("agent.created", agent_id=str(agent.id), agent_code=code)
        return agent

    async def list_agents(
        self, search: str = "", page: int = 1, limit: int = 20
    ) -> tuple[list[Agent], int]:
        q = select(Agent)
        if search:
            pattern = f"%{search}%"
            q = q.where(
                or_(
                    Agent.name.ilike(pattern),
                    Agent.email.ilike(pattern),
                    Agent.phone.ilike(pattern),
                    Agent.agent_code.ilike(pattern),
                )
            )
        total = await self.db.scalar(select(func.count()).select_from(q.subquery()))
        result = await self.db.execute(
            q.order_by(Agent.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        return list(result.scalars().all()), total or 0

    async def get_agent(self, agent_id: uuid.UUID) -> Agent:
        agent = await self.db.get(Agent, agent_id)
        if not agent:
            raise NotFound("Agent not found")
        return agent

    async def update_agent(self, agent_id: uuid.UUID, body: AgentUpdate) -> Agent:
        agent = await self.get_agent(agent_id)
        changes = body.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()

        clash_filters = []
        if "email" in changes:
            clash_filters.append(Agent.email == changes["email"])
        if "phone" in changes:
            clash_filters.append(Agent.phone == changes["phone"])
        if clash_filters:
            q = select(Agent).where(or_(*clash_filters), Agent.id != agent.id)
            if (await self.db.execute(q)).scalars().first():
                raise ValidationFailed("Agent with this email or phone already exists")

        for key, value in changes.items():
            setattr(agent, key, value)
        await self.db.commit()
        return agent

    async def reset_password(self, agent_id: uuid.UUID, new_password: str) -> Agent:
        agent = await self.get_agent(agent_id)
        agent.password_hash = hash_password(new_password)
        await self.db.commit()
        logger.info("agent.password_reset", agent_id=str(agent.id))
        return agent

    # ─── Earnings ───────────────────────────────────────

    async def recalculate_earnings(self, agent: Agent) -> EarningsResult:
        """Rebuild total_earnings from all PAID shops of this agent."""
        result = await self.db.execute(
            select(AgentShop.amount).where(
                AgentShop.agent_id == agent.id,
                AgentShop.payment_status == PAYMENT_PAID,
            )
        )
        commissions = [commission_for(amount) for amount in result.scalars().all()]
        new_total = sum(commissions)

        old_total = agent.total_earnings or 0
        agent.total_earnings = new_total
        await self.db.commit()

        logger.info(
            "earnings.recalculated",
            agent_id=str(agent.id),
            old_earnings=old_total,
            new_earnings=new_total,
            paid_shops=len(commissions),
        )
        return EarningsResult(
            agent_id=agent.id,
            old_earnings=old_total,
            new_earnings=new_total,
            paid_shops_count=len(commissions),
            commissions=commissions,
        )

    async def recount_shops(self, agent: Agent) -> int:
        count = await self.db.scalar(
            select(func.count(AgentShop.id)).where(AgentShop.agent_id == agent.id)
        )
        agent.total_shops = count or 0
        return agent.total_shops

    async def recalculate_all(self) -> list[dict]:
        """Rebuild shop counts and earnings for every agent."""
        result = await self.db.execute(select(Agent).order_by(Agent.created_at))
        summaries = []
        for agent in result.scalars().all():
            shops = await self.recount_shops(agent)
            earnings = await self.recalculate_earnings(agent)
            summaries.append({**earnings.as_dict(), "total_shops": shops})
        return summaries

    # ─── Dashboard ──────────────────────────────────────

    async def dashboard(self, agent: Agent, now: Optional[datetime] = None) -> dict:
        now = now or utcnow()
        today = start_of_day(now)
        tomorrow = today + timedelta(days=1)
        month_start = today.replace(day=1)

        async def count(*conditions) -> int:
            value = await self.db.scalar(
                select(func.count(AgentShop.id)).where(
                    AgentShop.agent_id == agent.id, *conditions
                )
            )
            return value or 0

        shops_today = await count(
            AgentShop.created_at >= today, AgentShop.created_at < tomorrow
        )
        shops_this_month = await count(AgentShop.created_at >= month_start)
        await self.recount_shops(agent)
        earnings = await self.recalculate_earnings(agent)

        return {
            "total_shops_today": shops_today,
            "total_shops_this_month": shops_this_month,
            "total_shops_overall": agent.total_shops,
            "total_earnings": earnings.new_earnings,
            "agent_code": agent.agent_code,
            "agent_name": agent.name,
            "panel_text": agent.panel_text,
            "panel_text_color": agent.panel_text_color,
        }


    # ─── Reports ────────────────────────────────────────

    async def _shops_since(
        self, agent: Agent, since: Optional[datetime], until: Optional[datetime] = None
    ) -> list[AgentShop]:
        q = select(AgentShop).where(AgentShop.agent_id == agent.id)
        if since is not None:
            q = q.where(AgentShop.created_at >= since)
        if until is not None:
            q = q.where(AgentShop.created_at < until)
        result = await self.db.execute(q.order_by(AgentShop.created_at.desc()))
        return list(result.scalars().all())

    async def payments(
        self,
        agent: Agent,
        date_filter: str = "all",
        payment_filter: str = "all",
        now: Optional[datetime] = None,
    ) -> tuple[list[AgentShop], dict]:
        """Shops registered in the date window, plus payment analytics.

        The analytics always cover the whole window; `payment_filter`
        (paid / pending / all) narrows only the returned shop list.
        """
        now = now or utcnow()
        shops = await self._shops_since(agent, payment_window_start(date_filter, now))
        analytics = payment_summary(shops)
        if payment_filter != "all":
            status = payment_filter.upper()
            shops = [s for s in shops if s.payment_status == status]
        return shops, analytics

    async def daily_report(self, agent: Agent, now: Optional[datetime] = None) -> dict:
        now = now or utcnow()
        today = start_of_day(now)
        shops = await self._shops_since(agent, today, today + timedelta(days=1))
        summary = payment_summary(shops)
        return {
            "date": today.date().isoformat(),
            "total_shops": summary["total_shops"],
            "paid_count": summary["paid_count"],
            "pending_count": summary["pending_count"],
            "total_amount_collected": summary["total_amount"],
            "total_commission": summary["total_commission"],
            "shops": shops,
        }
