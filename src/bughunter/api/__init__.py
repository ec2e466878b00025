"""HTTP API for the analysis gateway."""
