"""Feature services of the TRON wallet core."""
