"""Package data shipped with beagle (default pipeline definition)."""
