from fastapi import FastAPI

from toilet_moderation.config import get_settings
from toilet_moderation.logging import configure_logging
from toilet_moderation.reports.router import router as reports_router
from toilet_moderation.restrictions.router import router as restrictions_router
from toilet_moderation.storage.store import build_store
from toilet_moderation.violations.router import router as violations_router


def create_app(store=None) -> FastAPI:
    settings = get_settings()
    logger = configure_logging(settings.log_level)

    app = FastAPI(title="Toilet Map Moderation")
    app.state.store = store or build_store(settings.storage_backend, settings.data_dir)
    logger.info("Using %s store", type(app.state.store).__name__)

    app.include_router(reports_router)
    app.include_router(violations_router)
    app.include_router(restrictions_router)

    @app.get("/")
    def root():
        return {"message": "Toilet map moderation service"}

    return app


app = create_app()


def run():
    import uvicorn

    uvicorn.run("toilet_moderation.main:app", host="0.0.0.0", port=8000)
