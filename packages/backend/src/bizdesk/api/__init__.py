"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Authentication is applied at the include_router level using
FastAPI's dependencies parameter. This protects every route in each
router without modifying individual handlers; the per-route
require_permission() dependencies then add authorization on top.
Health and auth routers are open (auth's /me authenticates itself).
"""

from fastapi import APIRouter, Depends

from bizdesk.api.auth import router as auth_router
from bizdesk.api.crm import router as crm_router
from bizdesk.api.finance import router as finance_router
from bizdesk.api.health import router as health_router
from bizdesk.api.hr import router as hr_router
from bizdesk.api.posts import router as posts_router
from bizdesk.api.projects import router as projects_router
from bizdesk.api.users import router as users_router
from bizdesk.auth.dependencies import get_current_actor

# All protected routers require a valid access credential
_auth = [Depends(get_current_actor)]

api_router = APIRouter(prefix="/api/v1")

# Open routes — no auth required
api_router.include_router(health_router, tags=["health"])
api_router.include_router(auth_router, tags=["auth"])

# Protected routes
api_router.include_router(users_router, tags=["users", "roles", "org"], dependencies=_auth)
api_router.include_router(posts_router, tags=["posts"], dependencies=_auth)
api_router.include_router(crm_router, tags=["crm"], dependencies=_auth)
api_router.include_router(projects_router, tags=["projects"], dependencies=_auth)
api_router.include_router(hr_router, tags=["hr"], dependencies=_auth)
api_router.include_router(finance_router, tags=["finance"], dependencies=_auth)
