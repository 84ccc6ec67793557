# marketplace/main.py
from contextlib import asynccontextmanager

import redis
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api.routes import router as api_router
from .cache import EstateIdCache
from .config import Settings
from .db import Base, make_engine, make_session_factory
from .ranges import RangeCatalog
from .scheduler import RefillScheduler
from .utils import logger
from . import models  # noqa: F401 ensure models are imported so tables are known


def create_app(settings: Settings = None, engine=None, redis_client=None, scheduler=None, on_fill=None) -> FastAPI:
    """Build the application with its collaborators.

    Anything not passed in is built from `settings` (which defaults to the
    environment).
    """
    settings = settings or Settings.from_env()
    engine = engine or make_engine(settings.database_url, settings.db_pool_size, settings.db_max_overflow)
    session_factory = make_session_factory(engine)
    redis_client = redis_client or redis.from_url(settings.redis_url, decode_responses=True)
    scheduler = scheduler or RefillScheduler(workers=settings.refill_workers)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        # Ensure database tables are created on startup
        Base.metadata.create_all(bind=engine)
        scheduler.start()
        try:
            yield
        finally:
            scheduler.shutdown()
            engine.dispose()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = session_factory
    app.state.catalog = RangeCatalog.load(settings.fixture_dir)
    app.state.estate_cache = EstateIdCache(
        redis_client, session_factory, scheduler, key_prefix=settings.cache_key_prefix, on_fill=on_fill
    )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        logger.info("Invalid request to %s: %s", request.url.path, exc.errors())
        return JSONResponse(status_code=400, content={"detail": "Bad request"})

    app.include_router(api_router)
    return app
