"""Admin reporting endpoints."""
