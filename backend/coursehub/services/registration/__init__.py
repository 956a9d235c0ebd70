"""Two-phase registration protocol."""
