from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from app.cache import build_cache
from app.logging_setup import configure_logging, logging_middleware
from app.registry import CoordinateSystemRegistry
from app.settings import Settings, load_settings
from app.transform_api import router as transform_router


@asynccontextmanager
async def _lifespan(app: FastAPI):
    yield
    await app.state.cache.close()


def create_app(
    settings: Optional[Settings] = None, registry: Optional[CoordinateSystemRegistry] = None
) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings)
    app = FastAPI(title="geoshift", lifespan=_lifespan)
    app.middleware("http")(logging_middleware)

    @app.get("/health")
    def health():
        return {"status": "ok"}

    app.include_router(transform_router)

    app.state.settings = settings
    # registry population starts in the background here; lookups block until it finishes
    app.state.registry = registry or CoordinateSystemRegistry(
        catalog_path=settings.catalog_path,
        datum_grids=settings.datum_grids,
        timeout=settings.registry_timeout,
    )
    app.state.cache = build_cache(settings)
    return app


app = create_app()
