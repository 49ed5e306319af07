"""API route aggregation.

All routers registered here get mounted in main.py.

Learn: Auth is applied at the include_router level using FastAPI's
dependencies parameter, so every task route rejects a missing or bad
token before the handler runs. The auth router is open (register and
login can't require a token); /me asks for one itself.
"""

from fastapi import APIRouter, Depends

from tasktrack.api.auth import router as auth_router
from tasktrack.api.tasks import router as tasks_router
from tasktrack.auth.dependencies import get_current_user

# All protected routers require authentication
_auth = [Depends(get_current_user)]

api_router = APIRouter(prefix="/api")

# Open routes — no auth required
api_router.include_router(auth_router, tags=["auth"])

# Protected routes — require a valid JWT
api_router.include_router(tasks_router, tags=["tasks"], dependencies=_auth)
