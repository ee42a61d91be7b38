"""
Supabase client for VideoCapsule.

The delivery scheduler, the schedule API and the setup script all act on
behalf of the application, so they share one service-role client.
"""

from functools import lru_cache
from typing import Optional

from supabase import create_client, Client

from backend.config import config

# Postgres "undefined_table"
MISSING_TABLE_CODE = "42P01"


class SupabaseClientError(Exception):
    """Raised when the Supabase client cannot be created."""
    pass


@lru_cache(maxsize=1)
def get_supabase_admin_client() -> Client:
    """
    Service-role client, created once per process.

    Row Level Security does not apply to this client.
    """
    missing = [
        name for name, value in (
            ("SUPABASE_URL", config.SUPABASE_URL),
            ("SUPABASE_SERVICE_KEY", config.SUPABASE_SERVICE_KEY),
        )
        if not value
    ]
    if missing:
        raise SupabaseClientError(
            f"{' and '.join(missing)} not configured. "
            "Set them in your .env file or environment variables."
        )

    return create_client(config.SUPABASE_URL, config.SUPABASE_SERVICE_KEY)


def check_table(table: Optional[str] = None) -> Optional[str]:
    """
    Probe a table with a one-row select.

    Returns None when the table answers, otherwise a short reason.
    """
    table = table or config.SCHEDULED_VIDEOS_TABLE
    try:
        get_supabase_admin_client().table(table).select("id").limit(1).execute()
    except SupabaseClientError as e:
        return str(e)
    except Exception as e:
        if MISSING_TABLE_CODE in str(e) or "does not exist" in str(e):
            return f"table '{table}' does not exist"
        return f"connection failed: {e}"
    return None
