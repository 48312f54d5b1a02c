"""Library modules for the per-day commit report pipeline."""
