"""Trust and access control engine for location-bound activities."""
