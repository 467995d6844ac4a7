"""Operator service: operator accounts and the operator dashboard.

Operators are never deleted. deactivate() and reactivate() flip
is_active, and the credential store refuses inactive operators on every
request, so an outstanding token stops working immediately. Both are
delete-level actions; update_operator() never touches is_active.
"""

import uuid
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bizdir.auth.password import hash_password
from bizdir.db.models import PAYMENT_PAID, AgentShop, Operator, utcnow
from bizdir.errors import NotFound, ValidationFailed
from bizdir.schemas.principal import OperatorCreate, OperatorUpdate

logger = structlog.get_logger()


class OperatorService:
    """Business logic for operators."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_operator(self, body: OperatorCreate) -> Operator:
        email = body.email.strip().lower()
        code = body.operator_code.strip().upper()
        q = select(Operator).where(
            or_(
                Operator.email == email,
                Operator.phone == body.phone,
                Operator.operator_code == code,
            )
        )
        if (await self.db.execute(q)).scalars().first():
            raise ValidationFailed(
                "Operator with this email, phone, or operator code already exists"
            )

        operator = Operator(
            name=body.name.strip(),
            phone=body.phone,
            email=email,
            password_hash=hash_password(body.password),
            operator_code=code,
            is_active=True,
        )
        self.db.add(operator)
        await self.db.commit()
        logger.info("operator.created", operator_id=str(operator.id), operator_code=code)
        return operator

    async def list_operators(
        self, include_inactive: bool = True
    ) -> list[Operator]:
        q = select(Operator).order_by(Operator.created_at.desc())
        if not include_inactive:
            q = q.where(Operator.is_active.is_(True))
        result = await self.db.execute(q)
        return list(result.scalars().all())

    async def get_operator(self, operator_id: uuid.UUID) -> Operator:
        operator = await self.db.get(Operator, operator_id)
        if not operator:
            raise NotFound("Operator not found")
        return operator

    async def update_operator(
        self, operator_id: uuid.UUID, body: OperatorUpdate
    ) -> Operator:
        operator = await self.get_operator(operator_id)
        changes = body.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()

        clash_filters = []
        if "email" in changes:
            clash_filters.append(Operator.email == changes["email"])
        if "phone" in changes:
            clash_filters.append(Operator.phone == changes["phone"])
        if clash_filters:
            q = select(Operator).where(or_(*clash_filters), Operator.id != operator.id)
            if (await self.db.execute(q)).scalars().first():
                raise ValidationFailed("Operator with this email or phone already exists")

        for key, value in changes.items():
            setattr(operator, key, value)
        await self.db.commit()
        return operator

    async def deactivate(self, operator_id: uuid.UUID) -> Operator:
        operator = await self.get_operator(operator_id)
        operator.is_active = False
        await self.db.commit()
        logger.info("operator.deactivated", operator_id=str(operator.id))
        return operator

    async def reactivate(self, operator_id: uuid.UUID) -> Operator:
        operator = await self.get_operator(operator_id)
        operator.is_active = True
        await self.db.commit()
        logger.info("operator.reactivated", operator_id=str(operator.id))
        return operator

    async def dashboard(self, operator: Operator, now: Optional[datetime] = None) -> dict:
        """Counts over PAID agent shops: total, visible, hidden, expired."""
        now = now or utcnow()

        async def count(*conditions) -> int:
            value = await self.db.scalar(
                select(func.count(AgentShop.id)).where(
                    AgentShop.payment_status == PAYMENT_PAID, *conditions
                )
            )
            return value or 0

        return {
            "operator_code": operator.operator_code,
            "operator_name": operator.name,
            "paid_shops": await count(),
            "visible_shops": await count(AgentShop.is_visible.is_(True)),
            "hidden_shops": await count(AgentShop.is_visible.is_(False)),
            "expired_shops": await count(
                AgentShop.payment_expiry_date.is_not(None),
                AgentShop.payment_expiry_date < now,
            ),
        }
