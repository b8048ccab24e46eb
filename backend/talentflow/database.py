from pathlib import Path

from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def to_async_url(database_url: str) -> str:
    """Convert sqlite:/// to sqlite+aiosqlite:///"""
    return database_url.replace("sqlite:///", "sqlite+aiosqlite:///")


def create_engine(database_url: str) -> AsyncEngine:
    return create_async_engine(to_async_url(database_url), echo=False)


async def init_db(engine: AsyncEngine):
    # Register tables on the metadata before create_all
    import talentflow.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def ensure_sqlite_directory(database_url: str) -> None:
    """Create the parent directory of a file-backed SQLite database."""
    prefix = "sqlite:///"
    if not database_url.startswith(prefix):
        return
    path = database_url[len(prefix):]
    if path and path != ":memory:":
        Path(path).parent.mkdir(parents=True, exist_ok=True)
