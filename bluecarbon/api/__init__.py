"""HTTP API for the Blue Carbon registry (FastAPI)."""
