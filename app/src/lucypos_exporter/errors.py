"""Errors raised by scrape probes."""


class ProbeError(Exception):
    """Base class for a probe that could not produce a measurement."""


class DirectoryUnreadable(ProbeError):
    """The backup directory could not be listed."""


class NoBackupArtifactFound(ProbeError):
    """No regular file with the backup extension exists in the directory."""


class QueryError(ProbeError):
    """Connecting to the database or running the statement failed."""


class NoRowsError(ProbeError):
    """The query returned no usable row."""


class ProbeTimeout(ProbeError):
    """The probe did not finish within its time budget."""

    def __init__(self, probe: str, timeout: float):
        super().__init__(f"{probe} probe timed out after {timeout:.1f}s")
        self.probe = probe
        self.timeout = timeout
