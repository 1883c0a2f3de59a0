"""Per-kind CLI command groups."""
