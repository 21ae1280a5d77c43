"""
Ordering API main application.
Entry point for the FastAPI server.
"""

from fastapi import FastAPI
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded
from sqlalchemy import text

from shared.config.settings import settings
from shared.infrastructure.db import SessionLocal
from shared.security.rate_limit import limiter, rate_limit_exceeded_handler
from ordering_api.core import configure_cors, lifespan, register_middlewares
from ordering_api.routers import billing_router, orders_router, staff_router


app = FastAPI(
    title="Table Ordering API",
    description="Table sessions, order submissions, receipts and payment recording",
    version="0.1.0",
    lifespan=lifespan,
)

# Rate limiting
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

register_middlewares(app)
configure_cors(app)

app.include_router(orders_router)
app.include_router(staff_router)
app.include_router(billing_router)


# =============================================================================
# Health Check
# =============================================================================


@app.get("/api/health")
def health_check():
    """Basic health check endpoint."""
    return {
        "status": "healthy",
        "service": "ordering-api",
        "environment": settings.environment,
    }


@app.get("/api/health/detailed")
def detailed_health_check():
    """Health check that verifies database connectivity."""
    checks = {
        "service": "ordering-api",
        "environment": settings.environment,
        "dependencies": {},
    }

    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
        checks["dependencies"]["database"] = {"status": "healthy"}
        checks["status"] = "healthy"
    except Exception as e:
        checks["dependencies"]["database"] = {"status": "unhealthy", "error": str(e)}
        checks["status"] = "degraded"
        return JSONResponse(content=checks, status_code=503)

    return checks
