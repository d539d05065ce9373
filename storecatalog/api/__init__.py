"""API layer: routers, schemas and middleware."""
