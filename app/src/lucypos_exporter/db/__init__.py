"""Database access for the health probes."""

from lucypos_exporter.db.probes import SyncStatus, probe_audit_lag, probe_sync_error
from lucypos_exporter.db.session import open_connection

__all__ = ["SyncStatus", "open_connection", "probe_audit_lag", "probe_sync_error"]
