# marketplace/core/supabase_client.py
from functools import lru_cache

from supabase import Client, create_client

from marketplace.core.config import get_settings


@lru_cache
def supabase_admin() -> Client:
    """
    Service-role client backing SupabaseDocumentStore.

    Every collection is read and written through it, including the
    maintenance scan, which has to see rows of all users regardless of RLS.
    Keep the key server-side.

    Raises:
        RuntimeError: SUPABASE_SERVICE_ROLE_KEY is not configured.
    """
    settings = get_settings()
    key = settings.SUPABASE_SERVICE_ROLE_KEY
    if not key:
        raise RuntimeError("SUPABASE_SERVICE_ROLE_KEY is required for the supabase store backend")
    return create_client(settings.SUPABASE_URL, key)
