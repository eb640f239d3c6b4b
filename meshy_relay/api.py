from contextlib import asynccontextmanager
import logging
import os
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from meshy_relay.ai_clients.meshy_client import MeshyClient
from meshy_relay.config import Settings, get_settings
from meshy_relay.routers import text_to_3d

logger = logging.getLogger(__name__)

async def relay_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Renders every HTTPException as {"error": <detail>}, the shape the browser client reads."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)

def create_app(settings: Optional[Settings] = None, meshy_client: Optional[MeshyClient] = None) -> FastAPI:
    """Builds the relay app. The Meshy client is created from settings unless one is passed in."""
    settings = settings or get_settings()
    if meshy_client is None:
        meshy_client = MeshyClient(
            api_key=settings.meshy_api_key,
            base_url=settings.meshy_api_base_url,
            timeout=settings.MESHY_API_TIMEOUT_SECONDS,
            download_timeout=settings.MESHY_DOWNLOAD_TIMEOUT_SECONDS,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Meshy relay forwarding to {meshy_client.base_url}")
        yield
        await meshy_client.aclose()
        logger.info("Meshy relay shut down")

    app = FastAPI(
        title="Meshy Relay",
        description="Relay for the Meshy text-to-3D API that keeps the API key on the server",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.meshy_client = meshy_client

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(StarletteHTTPException, relay_error_handler)

    app.include_router(text_to_3d.router, prefix="/api", tags=["text-to-3d"])

    @app.get("/health")
    async def health_check():
        """Health check endpoint for monitoring."""
        return {"status": "healthy"}

    # Serve the browser client last so the API routes take precedence
    if settings.public_dir and os.path.isdir(settings.public_dir):
        logger.info(f"Serving static files from {settings.public_dir}")
        app.mount("/", StaticFiles(directory=settings.public_dir, html=True), name="public")

    return app
