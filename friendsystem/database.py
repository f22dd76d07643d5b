"""
Engine and session factory construction
Nothing here is created at import time; callers build the engine and inject it
"""
import logging

from sqlalchemy import event, pool
from sqlalchemy.ext.asyncio import AsyncEngine, async_sessionmaker, create_async_engine

from .config import DatabaseSettings
from .models import Base

logger = logging.getLogger(__name__)


def _serialize_sqlite_writers(engine: AsyncEngine) -> None:
    @event.listens_for(engine.sync_engine, 'connect')
    def do_connect(dbapi_connection, connection_record):
        # stop the driver from emitting its own deferred BEGIN
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, 'begin')
    def do_begin(conn):
        # take the write lock up front so read-then-write is serialized
        conn.exec_driver_sql('BEGIN IMMEDIATE')


def create_engine(settings: DatabaseSettings) -> AsyncEngine:
    """Build an AsyncEngine with serializable transactions for the configured backend"""
    if settings.is_sqlite:
        engine = create_async_engine(
            settings.url,
            future=True,
            echo=False,
            poolclass=pool.NullPool,
            connect_args={'timeout': settings.statement_timeout},
        )
        _serialize_sqlite_writers(engine)
    else:
        engine = create_async_engine(
            settings.url,
            future=True,
            echo=False,
            isolation_level='SERIALIZABLE',
            pool_size=settings.pool_size,
            max_overflow=settings.max_overflow,
            pool_timeout=settings.pool_timeout,
            pool_pre_ping=True,
            connect_args={'command_timeout': settings.statement_timeout},
        )
    logger.info(f"Created engine for {engine.url.render_as_string(hide_password=True)}")
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(engine, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create the friend and request tables if they are absent"""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Friend system tables ensured")
