"""HTTP API — FastAPI routers, dependencies and error handlers."""
