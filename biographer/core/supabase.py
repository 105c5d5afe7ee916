"""
Supabase Client Factory

Service-role client used by the pipelines and the API routes.
"""

from supabase import create_client, Client
from functools import lru_cache

from .config import settings
from .exceptions import ConfigurationError
from .logging_config import get_logger

logger = get_logger("core.supabase")


@lru_cache()
def get_supabase_admin() -> Client:
    """Get Supabase client with the service key.

    The pipelines write panels and flip statuses on behalf of users, so they
    need the service role rather than the anon key.
    """
    if not settings.supabase_url or not settings.supabase_service_key:
        raise ConfigurationError("SUPABASE_URL and SUPABASE_SERVICE_KEY must be set")
    logger.info("Supabase admin client initialized")
    return create_client(settings.supabase_url, settings.supabase_service_key)
