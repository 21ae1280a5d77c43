"""
CORS configuration.
The customer app (opened from the table QR code) and the staff screens are
served from their own origins.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from shared.config.settings import settings
from shared.infrastructure.correlation import REQUEST_ID_HEADER


# Local dev servers of the customer and staff apps
DEV_ORIGINS = (
    "http://localhost:3000",
    "http://localhost:5173",
    "http://127.0.0.1:3000",
    "http://127.0.0.1:5173",
)


def get_cors_origins() -> list[str]:
    """ALLOWED_ORIGINS (comma-separated) when set, the dev servers otherwise."""
    configured = [origin.strip() for origin in settings.allowed_origins.split(",")]
    configured = [origin for origin in configured if origin]
    return configured or list(DEV_ORIGINS)


def configure_cors(app: FastAPI) -> None:
    # No cookies or auth headers cross origins: the API is keyed by table number
    app.add_middleware(
        CORSMiddleware,
        allow_origins=get_cors_origins(),
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Content-Type", "Accept", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
        max_age=0 if settings.environment == "development" else 600,
    )
