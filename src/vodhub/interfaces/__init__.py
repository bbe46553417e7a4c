"""Interface layer: FastAPI app, routers, CLI."""
