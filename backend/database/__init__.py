"""
VideoCapsule Database Layer

This module provides the Supabase client and the stores for scheduled
deliveries and their video blobs.
"""

from .client import get_supabase_admin_client, check_table, SupabaseClientError
from .deliveries import DeliveryStore
from .media import MediaStore

__all__ = [
    "get_supabase_admin_client",
    "check_table",
    "SupabaseClientError",
    "DeliveryStore",
    "MediaStore",
]
