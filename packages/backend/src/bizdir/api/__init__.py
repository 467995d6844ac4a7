"""API route aggregation.

Every router is mounted under /api/v1. Authentication is not applied
here: each portal has its own principal kind, so handlers declare the
dependency they need (get_current_agent, get_current_operator, or a
require(...) role gate for the back-office).
"""

from fastapi import APIRouter

from bizdir.api.admin_agents import router as admin_agents_router
from bizdir.api.admin_operators import router as admin_operators_router
from bizdir.api.admin_pages import router as admin_pages_router
from bizdir.api.admin_shops import router as admin_shops_router
from bizdir.api.admin_users import router as admin_users_router
from bizdir.api.agent import router as agent_router
from bizdir.api.auth import router as auth_router
from bizdir.api.health import router as health_router
from bizdir.api.operator import router as operator_router
from bizdir.api.public import router as public_router

api_router = APIRouter(prefix="/api/v1")

# Open routes
api_router.include_router(health_router, tags=["health"])
api_router.include_router(public_router, tags=["public"])
api_router.include_router(auth_router, tags=["auth"])

# Back-office (role-gated per handler)
api_router.include_router(admin_agents_router, tags=["admin", "agents"])
api_router.include_router(admin_operators_router, tags=["admin", "operators"])
api_router.include_router(admin_users_router, tags=["admin", "users"])
api_router.include_router(admin_shops_router, tags=["admin", "shops"])
api_router.include_router(admin_pages_router, tags=["admin", "pages"])

# Field portals
api_router.include_router(agent_router, tags=["agent"])
api_router.include_router(operator_router, tags=["operator"])
