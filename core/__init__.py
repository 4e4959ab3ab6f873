# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the business logic behind the HTTP surface:
# - models/: Pydantic schemas for data validation
# - services/: Content, asset, callback, upload, integration and business
#   operations on top of Supabase and the n8n workflows
#
# Services raise app.exceptions errors; routers turn them into responses.
# =============================================================================
