"""HTTP surface: FastAPI app and endpoints."""
