"""Per-kind page caches."""
