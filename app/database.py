"""Database connection and utilities"""
from functools import lru_cache
from supabase import create_client, Client
from app.config import get_settings


@lru_cache()
def get_supabase_admin() -> Client:
    """
    Service role client (bypasses RLS - use carefully)

    Created on first use so importing the app never needs credentials.
    Queries made with it must filter on the owning user themselves.
    """
    settings = get_settings()
    return create_client(
        settings.supabase_url,
        settings.supabase_service_role_key
    )
