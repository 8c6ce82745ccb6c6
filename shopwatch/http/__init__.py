"""HTTP shell (FastAPI) for the assumption service."""
