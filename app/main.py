# =============================================================================
# app/main.py - FastAPI Application Entry Point
# =============================================================================
# This is the main entry point for the Transformo API.
# It configures the FastAPI application with middleware, routers, and handlers.
#
# Usage:
#   uvicorn app.main:app --reload
# =============================================================================

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.config import settings
from app.exceptions import TransformoException, transformo_exception_handler
from app.routers import (
    business,
    content,
    content_assets,
    health,
    image_regeneration,
    integrations,
    n8n,
    uploads,
    video_upload,
)
from app.auth import routes as auth_routes

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.DEBUG else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Log startup configuration; nothing to tear down on shutdown."""
    logger.info(f"Starting Transformo API in {settings.ENVIRONMENT} mode")
    logger.info(f"CORS origins: {settings.cors_origins_list}")
    if not settings.N8N_CALLBACK_SECRET:
        logger.warning("N8N_CALLBACK_SECRET is not set; workflow endpoints will reject requests")

    yield

    logger.info("Shutting down Transformo API")


# Create FastAPI application
app = FastAPI(
    title="Transformo API",
    description="""
## Content Automation API

Transformo turns a voice recording or a video into a bundle of ready-to-publish
content: blog post, newsletter, social posts and images.

### How It Works

1. **Record or Upload** - Create a recording or a video upload project
2. **Transcribe** - n8n transcribes the media and calls back with the transcript
3. **Generate** - Content creation runs automatically after transcription
4. **Review** - Edit, regenerate images and approve each asset
5. **Schedule** - Once everything is approved, schedule assets for publishing

### Integrations

| Integration | Providers |
|-------------|-----------|
| **Email** | MailerLite, Mailchimp, Brevo |
| **Blog** | WordPress, Wix |
| **AI Avatar** | HeyGen |
""",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Auth", "description": "Verify Supabase access tokens"},
        {"name": "Health", "description": "API health and readiness checks"},
        {"name": "n8n", "description": "Workflow callbacks and credential lookups"},
        {"name": "Content", "description": "Recordings, content listing and editing"},
        {"name": "Video Upload", "description": "Resumable video upload projects"},
        {"name": "Content Assets", "description": "Review, approve and schedule assets"},
        {"name": "Image Regeneration", "description": "Generate a new image for an asset"},
        {"name": "Uploads", "description": "Multipart audio and image uploads"},
        {"name": "Integrations", "description": "Email, blog and AI avatar settings"},
        {"name": "Business", "description": "Business profile settings"},
    ],
)


# =============================================================================
# Middleware
# =============================================================================

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list if settings.is_production else ["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Exception Handlers
# =============================================================================

@app.exception_handler(TransformoException)
async def handle_transformo_exception(request: Request, exc: TransformoException):
    """Handle custom Transformo exceptions."""
    return await transformo_exception_handler(request, exc)


@app.exception_handler(Exception)
async def handle_general_exception(request: Request, exc: Exception):
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error on {request.url.path}: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "success": False,
            "error": "Internal server error",
            "code": "INTERNAL_ERROR",
        }
    )


# =============================================================================
# Routers
# =============================================================================

app.include_router(auth_routes.router, prefix="/api/v1/auth", tags=["Auth"])
app.include_router(health.router, prefix="/api/v1", tags=["Health"])

# Machine-to-machine endpoints called by n8n
app.include_router(n8n.router, prefix="/api/n8n", tags=["n8n"])

app.include_router(content.router, prefix="/api/content", tags=["Content"])
app.include_router(video_upload.router, prefix="/api/video-upload", tags=["Video Upload"])
app.include_router(content_assets.router, prefix="/api/content-assets", tags=["Content Assets"])
app.include_router(
    image_regeneration.router,
    prefix="/api/image-regeneration",
    tags=["Image Regeneration"]
)
app.include_router(uploads.router, prefix="/api", tags=["Uploads"])
app.include_router(integrations.router, prefix="/api", tags=["Integrations"])
app.include_router(business.router, prefix="/api/business", tags=["Business"])


# =============================================================================
# Root Endpoint
# =============================================================================

@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint - returns API info.
    """
    return {
        "name": "Transformo API",
        "version": "1.0.0",
        "docs": "/docs",
        "health": "/api/v1/health",
    }
