# goodie/database.py
from collections.abc import Iterator

from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine, Session

# ---------------------------------------------------------
# Engine lifecycle
#
# The engine is a process-wide resource: created once by the
# application lifespan (init_engine) and disposed on shutdown.
# Handlers never import it directly; they receive a Session
# through the get_session dependency.
#
# Postgres connections get:
# - sslmode=require   : enforce SSL when running in the cloud
# - pool_pre_ping=True: validate connections before using them
# ---------------------------------------------------------

_engine: Engine | None = None


def _with_sslmode(db_url: str) -> str:
    """Append sslmode=require to Postgres URLs that don't set it."""
    if not db_url.startswith("postgres") or "sslmode=" in db_url:
        return db_url
    if "?" in db_url:
        return db_url + "&sslmode=require"
    return db_url + "?sslmode=require"


def init_engine(db_url: str, **engine_kwargs) -> Engine:
    """
    Create the shared engine. Calling it again replaces the old one.

    Extra keyword arguments are forwarded to create_engine (tests use
    this to pass a StaticPool for in-memory SQLite).
    """
    global _engine

    if _engine is not None:
        _engine.dispose()

    if db_url.startswith("postgres"):
        engine_kwargs.setdefault("pool_size", 2)
        engine_kwargs.setdefault("max_overflow", 0)

    _engine = create_engine(
        _with_sslmode(db_url),
        echo=False,        # set to True if you want to debug SQL queries
        pool_pre_ping=True,
        **engine_kwargs,
    )
    return _engine


def get_engine() -> Engine:
    if _engine is None:
        raise RuntimeError("Database engine is not initialized. Call init_engine() first.")
    return _engine


def dispose_engine() -> None:
    global _engine

    if _engine is not None:
        _engine.dispose()
        _engine = None


def create_db_and_tables() -> None:
    """
    Create all tables defined in SQLModel metadata if they do not exist.

    This is called once on application startup.
    """
    SQLModel.metadata.create_all(get_engine())


def get_session() -> Iterator[Session]:
    """
    FastAPI dependency that yields a SQLModel Session.

    Usage:

        from fastapi import Depends

        @router.get("/example")
        def example_endpoint(session: Session = Depends(get_session)):
            ...
    """
    with Session(get_engine()) as session:
        yield session
