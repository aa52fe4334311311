"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from upsell.config import settings
from upsell.database import init_db
from upsell.routers import changesets, health, oauth, offers

logging.basicConfig(level=settings.log_level.upper())
LOG = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables on startup."""
    init_db()
    LOG.info(f"{settings.app_name} {settings.app_version} started")
    yield


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="Offer and changeset API for the Shopify post-purchase upsell extension",
    lifespan=lifespan
)

# The extension fetches from Shopify's checkout origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router, prefix="/api", tags=["Health"])
app.include_router(offers.router, prefix="/api", tags=["Offers"])
app.include_router(changesets.router, prefix="/api", tags=["Changesets"])
app.include_router(oauth.router, prefix="/api/oauth", tags=["OAuth"])


@app.api_route("/")
async def api_root():
    """API information endpoint."""
    return {
        "message": f"Welcome to {settings.app_name}",
        "version": settings.app_version,
        "docs": "/docs",
        "redoc": "/redoc"
    }
