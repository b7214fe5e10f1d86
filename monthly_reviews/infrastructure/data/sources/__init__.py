"""Data sources: HTTP clients for hosted services."""

from monthly_reviews.infrastructure.data.sources.supabase_client import SupabaseClient

__all__ = ["SupabaseClient"]
