import os
from typing import Optional
from fastapi import FastAPI, Request
import logging
from pythonjsonlogger import jsonlogger
from .config import DatabaseSettings
from .coordinator import FriendCoordinator
from .database import create_engine, create_schema, create_session_factory
from .metrics import init_metrics
from .routes import router

# setup structured logging
logger = logging.getLogger('friendsystem')
handler = logging.StreamHandler()
formatter = jsonlogger.JsonFormatter('%(asctime)s %(levelname)s %(name)s %(message)s')
handler.setFormatter(formatter)
logger.addHandler(handler)
logger.setLevel(logging.INFO)


def create_app(
    settings: Optional[DatabaseSettings] = None,
    coordinator: Optional[FriendCoordinator] = None,
) -> FastAPI:
    """Build the HTTP front end; the engine is created on startup unless a coordinator is injected."""
    app = FastAPI(title="FriendSystem API", version="0.1.0")
    app.state.coordinator = coordinator
    app.state.engine = None

    app.include_router(router, prefix="/api")

    @app.get('/healthz')
    async def healthz():
        return {'status': 'ok'}

    @app.middleware('http')
    async def log_requests(request: Request, call_next):
        logger.info({'msg': 'request_start', 'method': request.method, 'path': request.url.path})
        response = await call_next(request)
        logger.info({'msg': 'request_end', 'status': response.status_code})
        return response

    @app.on_event("startup")
    async def startup():
        if app.state.coordinator is not None:
            return
        db_settings = settings or DatabaseSettings()
        engine = create_engine(db_settings)
        if db_settings.create_schema:
            await create_schema(engine)
        app.state.engine = engine
        app.state.coordinator = FriendCoordinator(
            create_session_factory(engine),
            max_attempts=db_settings.max_attempts,
        )
        metrics_port = os.getenv('METRICS_PORT')
        if metrics_port:
            init_metrics(int(metrics_port))
        logger.info({'msg': 'startup_complete'})

    @app.on_event("shutdown")
    async def shutdown():
        if app.state.engine is not None:
            await app.state.engine.dispose()
            app.state.engine = None
            app.state.coordinator = None
        logger.info({'msg': 'shutdown_complete'})

    return app


app = create_app()
