# =============================================================================
# app/ - Transformo HTTP Layer
# =============================================================================
# - main.py: FastAPI app, CORS, the TransformoException envelope, routers
# - config.py: Settings shared with the Celery worker
# - dependencies.py: caller business lookup and upload rate limiting
# - auth/: Supabase JWT verification
# - routers/: user endpoints under /api and n8n endpoints under /api/n8n
#
# Routers validate and map errors; content, asset and integration rules
# live in core/services.
# =============================================================================
