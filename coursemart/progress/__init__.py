"""Progress reconciliation, filtering, export and progress views."""
