"""Main FastAPI application

There is no module level app; serve the factory with

    uvicorn --factory app.main:create_app
"""
from typing import Optional
from fastapi import FastAPI
from contextlib import asynccontextmanager
import logging

from app.config import Settings
from app.middleware.cors import setup_cors
from app.middleware.error_handler import ErrorHandlerMiddleware
from app.services.hubspot_service import HubspotClient
from app.routers import forms

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, hubspot_client: Optional[HubspotClient] = None) -> FastAPI:
    """
    Build the application

    Settings are read from the environment when not given; a missing HubSpot
    value raises here, before the server starts.

    Args:
        settings: Explicit settings, mainly for tests
        hubspot_client: Client to use instead of one built from settings
    """
    if settings is None:
        settings = Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan events"""
        owns_client = app.state.hubspot_client is None
        if owns_client:
            app.state.hubspot_client = HubspotClient(settings)
            logger.info(f"HubSpot client ready for portal {settings.hubspot_portal_id}")
        yield
        if owns_client:
            await app.state.hubspot_client.aclose()
            app.state.hubspot_client = None
            logger.info("HubSpot client closed")

    app = FastAPI(
        title="HubSpot Form Relay API",
        description="Renders HubSpot forms and relays their submissions",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.hubspot_client = hubspot_client

    # Setup CORS
    setup_cors(app, settings)

    # Add error handling middleware
    app.add_middleware(ErrorHandlerMiddleware, expose_errors=settings.expose_errors)

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy", "service": "hubspot-form-relay"}

    @app.get("/")
    async def root():
        """Root endpoint"""
        return {
            "message": "HubSpot Form Relay API",
            "version": "1.0.0",
            "default_form_id": settings.hubspot_form_id,
            "docs": "/docs"
        }

    app.include_router(forms.router, prefix="/api/forms", tags=["Forms"])

    return app


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app.main:create_app", factory=True, host="0.0.0.0", port=8000)
