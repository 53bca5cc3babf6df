"""Personal finance dashboard."""
