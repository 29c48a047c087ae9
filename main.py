import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tourhub.config import get_settings
from tourhub.interfaces.api.routes import register_routes
from tourhub.services import Services, build_services


def create_app(services: Services | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``services`` lets callers supply an already wired composition root; when
    omitted the default database is initialised and used.
    """

    settings = get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owns_engine = services is None
        if owns_engine:
            from tourhub.infrastructure.database import (
                SessionLocal,
                engine,
                initialize_database,
            )

            initialize_database()
            app.state.services = build_services(
                SessionLocal,
                realtime_buffer_size=settings.realtime_buffer_size,
                notification_cache_limit=settings.notification_cache_limit,
            )
        else:
            app.state.services = services
        yield
        if owns_engine:
            app.state.services.change_feed.close()
            engine.dispose()

    app = FastAPI(title="tourhub", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
