from .supabase_remote_store import SupabaseRemoteStore, SupabaseSubscription, parse_change

__all__ = ["SupabaseRemoteStore", "SupabaseSubscription", "parse_change"]
