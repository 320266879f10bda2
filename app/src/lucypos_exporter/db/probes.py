"""Database health probes: audit lag and synchronization errors."""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import Select, func, select
from sqlalchemy.exc import SQLAlchemyError

from lucypos_exporter.db.models import AuditEntry, IncomingBatch, OutgoingBatch
from lucypos_exporter.db.session import open_connection
from lucypos_exporter.errors import NoRowsError, QueryError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SyncStatus:
    """Outcome of the sync error probe."""

    errored: bool
    message: str = ""


def audit_lag_statement(dialect_name: str) -> Select:
    """
    Build the newest-audit query for a dialect.

    MySQL converts with UNIX_TIMESTAMP so the session time zone applies;
    other backends return the raw DATETIME for conversion in Python.
    """
    newest = func.max(AuditEntry.time)
    if dialect_name in ("mysql", "mariadb"):
        return select(func.unix_timestamp(newest))
    return select(newest)


def _to_unix(value: datetime | Decimal | float) -> float:
    if not isinstance(value, datetime):
        return float(value)
    # Naive timestamps outside MySQL are read as UTC
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.timestamp()


async def probe_audit_lag(url: str) -> float:
    """Return the newest audit log timestamp as unix seconds."""
    try:
        async with open_connection(url) as conn:
            result = await conn.execute(audit_lag_statement(conn.dialect.name))
            last_audit = result.scalar()
    except (SQLAlchemyError, OSError) as e:
        raise QueryError(f"Audit query failed: {e}") from e

    if last_audit is None:
        raise NoRowsError("Audit table is empty")

    return _to_unix(last_audit)


async def probe_sync_error(url: str) -> SyncStatus:
    """
    Check the sync schema for errored batches.

    Outgoing batches are checked first; the incoming table is only queried
    when no outgoing batch is in error.
    """
    try:
        async with open_connection(url) as conn:
            for table in (OutgoingBatch, IncomingBatch):
                result = await conn.execute(
                    select(table.batch_id, table.sql_message)
                    .where(table.error_flag == 1)
                    .order_by(table.batch_id)
                    .limit(1)
                )
                row = result.first()
                if row is not None:
                    logger.info(f"Errored batch {row.batch_id} in {table.__tablename__}")
                    return SyncStatus(errored=True, message=row.sql_message or "")
    except (SQLAlchemyError, OSError) as e:
        raise QueryError(f"Sync error query failed: {e}") from e

    return SyncStatus(errored=False)
