import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.health import router as health_router
from app.api.proposals import router as proposals_router
from app.core.config import settings
from app.telemetry_usage import add_usage_event_middleware

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)

app = FastAPI(title="Alvo Propostas API", version="0.1.0")

# The proposal form is served from another origin during development.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
if settings.USAGE_LOGGING:
    add_usage_event_middleware(app)

app.include_router(health_router, prefix="")  # public
app.include_router(proposals_router, prefix="/v1")
