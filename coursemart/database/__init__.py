from .client import close_service_client, create_supabase_client, get_service_client


__all__ = ["close_service_client", "create_supabase_client", "get_service_client"]
