"""Health check endpoint.

Learn: Simple GET endpoint that verifies the server is running and the
database is reachable. Always 200: a dead database shows up as
databaseStatus "Disconnected" and status "degraded", so load balancers
can tell "process up" from "fully healthy".
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from tasktrack import __version__
from tasktrack.db.engine import ping

router = APIRouter()


@router.get("/health")
async def health_check(request: Request):
    """Check server health and database connectivity."""
    ctx = request.app.state.ctx
    db_ok = await ping(ctx.engine)

    return {
        "status": "healthy" if db_ok else "degraded",
        "message": "Server is running",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": ctx.settings.environment,
        "databaseStatus": "Connected" if db_ok else "Disconnected",
        "version": __version__,
    }
