"""Error taxonomy and retry classification."""
