"""Per-probe database connections."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncConnection, create_async_engine
from sqlalchemy.pool import NullPool


@asynccontextmanager
async def open_connection(url: str) -> AsyncGenerator[AsyncConnection, None]:
    """
    Open a dedicated connection for one probe.

    NullPool keeps nothing alive between scrapes: the engine is disposed
    on every exit path, so each probe sees a fresh connection.
    """
    engine = create_async_engine(url, echo=False, poolclass=NullPool)
    try:
        async with engine.connect() as conn:
            yield conn
    finally:
        await engine.dispose()
