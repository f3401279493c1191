"""Draw result providers."""
