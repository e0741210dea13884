from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from app.config import Settings

SQLITE_MEMORY_URL = "sqlite+aiosqlite:///:memory:"


def build_engine(settings: Settings) -> AsyncEngine:
    """
    Engine async. Sin DATABASE_URL cae a SQLite en memoria (una sola
    conexión compartida para que todas las sesiones vean el mismo esquema).
    """
    url = settings.database_url or SQLITE_MEMORY_URL
    if url.startswith("sqlite"):
        engine = create_async_engine(
            url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool if ":memory:" in url else None,
        )
        _emit_sqlite_begin(engine)
        return engine
    return create_async_engine(
        url,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


def _emit_sqlite_begin(engine: AsyncEngine) -> None:
    """
    El driver sqlite3 difiere el BEGIN y rompe los SAVEPOINT; SQLAlchemy
    toma el control de la transacción.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
