"""Bootstrap wiring: composes ports, adapters and services."""
