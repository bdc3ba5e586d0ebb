"""Student-facing dashboard and feedback endpoints."""
