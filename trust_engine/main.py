"""Application entrypoint for the trust scoring FastAPI service."""

from typing import Optional

from fastapi import FastAPI
import uvicorn

from .api import build_ml_router, build_trust_score_router
from .core import AppSettings, get_logger, load_settings, setup_logging
from .ml.training_feed import TrainingFeed
from .repositories import (
    InMemoryLoanOutcomeRepository,
    InMemoryScoreRepository,
    ModelStateRepository,
)
from .scoring.engine import build_engine
from .services.ai_providers import Transport
from .services.trust_score_service import TrustScoreService


setup_logging()
logger = get_logger(__name__)


def create_app(
    settings: Optional[AppSettings] = None,
    model_state_repository: Optional[ModelStateRepository] = None,
    transport: Optional[Transport] = None,
) -> FastAPI:
    """Create and configure a FastAPI application instance."""
    settings = settings or load_settings()
    setup_logging(settings.log_level)
    app = FastAPI(title=settings.app_name, debug=settings.debug)

    engine = build_engine(settings, repository=model_state_repository, transport=transport)
    score_repository = InMemoryScoreRepository()
    service = TrustScoreService(engine=engine, repository=score_repository)
    feed = TrainingFeed(
        adaptive=engine.adaptive,
        outcome_repository=InMemoryLoanOutcomeRepository(),
        score_repository=score_repository,
        sample_threshold=settings.adaptive_sample_threshold,
    )

    app.state.settings = settings
    app.state.trust_score_service = service
    app.state.training_feed = feed

    app.include_router(build_trust_score_router(service))
    app.include_router(build_ml_router(feed))

    @app.get("/health", summary="Health check")
    def health() -> dict:
        return {"status": "ok", "scorer": engine.which_scorer()["selected"]}

    @app.on_event("startup")
    async def _pretrain_adaptive_model() -> None:
        """Pre-train the adaptive model when enabled."""
        if not settings.pretrain_on_startup:
            logger.info("Adaptive pre-training disabled by scoring.pretrain_on_startup=false")
            return
        try:
            feed.initialize_model()
        except Exception:
            logger.exception("Adaptive model pre-training failed during startup.")

    logger.info(
        "Application initialized: %s ai_provider=%s demo_mode=%s",
        settings.app_name,
        settings.ai_provider,
        settings.demo_mode,
    )
    return app


app = create_app()


def run() -> None:
    """Start the ASGI server for local development."""
    settings = load_settings()
    try:
        uvicorn.run("trust_engine.main:app", host=settings.host, port=settings.port, reload=settings.debug)
    except Exception:
        logger.exception("Failed to start uvicorn server.")
        raise


if __name__ == "__main__":
    run()
