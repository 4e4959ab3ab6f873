# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Typed Supabase wrapper for database operations
# - n8n.py: Outbound webhook client for the n8n workflows
# - email_providers.py: MailerLite / Mailchimp / Brevo key validation
# - blog_providers.py: WordPress / Wix credential validation
# - file_validation.py: Upload MIME/size/magic-byte checks
# - webhook_security.py: HMAC webhook signatures
# - content_status.py: Derived content status and allowed actions
# - rate_limit.py: Redis fixed-window rate limiting
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.n8n import N8nClient, N8nError, N8nNotConfiguredError
from lib.content_status import DerivedStatus, determine_content_status
from lib.rate_limit import RateLimiter, RATE_LIMIT_PRESETS

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Workflows
    "N8nClient",
    "N8nError",
    "N8nNotConfiguredError",
    # Status
    "DerivedStatus",
    "determine_content_status",
    # Rate limiting
    "RateLimiter",
    "RATE_LIMIT_PRESETS",
]
