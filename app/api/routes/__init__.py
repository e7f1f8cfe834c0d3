"""Per-resource route modules."""
