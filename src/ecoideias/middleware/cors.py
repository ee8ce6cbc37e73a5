"""CORS middleware configuration."""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ecoideias.config import Settings

# Headers the browser client sends to the function endpoints
_ALLOWED_HEADERS = ["authorization", "x-client-info", "apikey", "content-type", "x-request-id"]


def setup_cors(app: FastAPI, settings: Settings) -> None:
    """Allow the SPA origins to call the API and the function endpoints."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=_ALLOWED_HEADERS,
        expose_headers=["X-Request-Id", "Content-Disposition", "X-RateLimit-Remaining", "X-RateLimit-Limit"],
    )
