"""HTTP surface of the staffing service (FastAPI)."""
