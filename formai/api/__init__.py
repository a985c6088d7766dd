"""HTTP surface for formai (FastAPI router, schemas, middleware)."""
