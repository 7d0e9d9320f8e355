"""Pure domain rules (no storage access)."""
