"""FastAPI routers."""

from .routes import build_ml_router, build_trust_score_router

__all__ = ["build_ml_router", "build_trust_score_router"]
