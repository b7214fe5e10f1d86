"""Storage adapters implementing `ReviewBackend`."""

from monthly_reviews.infrastructure.data.repositories.local_repository import LocalJsonBackend
from monthly_reviews.infrastructure.data.repositories.supabase_repository import SupabaseBackend

__all__ = ["LocalJsonBackend", "SupabaseBackend"]
