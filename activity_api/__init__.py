"""HTTP query surface for the activity engine."""
