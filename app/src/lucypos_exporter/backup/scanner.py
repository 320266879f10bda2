"""
Backup freshness scanner.

Finds the newest backup archive in a directory. Only file metadata is read,
never file contents.
"""

import logging
import stat
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional

from lucypos_exporter.errors import DirectoryUnreadable, NoBackupArtifactFound

logger = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".tar"


@dataclass(frozen=True)
class BackupEntry:
    """Metadata of one directory entry."""

    name: str
    size_bytes: int
    modified_at: datetime
    is_file: bool = True

    @property
    def modified_timestamp(self) -> float:
        """Modification time as unix seconds."""
        return self.modified_at.timestamp()


def list_entries(directory: Path) -> List[BackupEntry]:
    """
    List a directory with the metadata the scanner needs.

    Entries come back sorted by name. Symlinks are not followed, so a link
    to an archive is not a regular file. Entries removed between listing
    and stat are skipped.
    """
    try:
        items = sorted(directory.iterdir(), key=lambda p: p.name)
    except OSError as e:
        raise DirectoryUnreadable(f"Cannot list backup directory {directory}: {e}") from e

    entries = []
    for item in items:
        try:
            st = item.lstat()
        except FileNotFoundError:
            logger.debug(f"Entry vanished while scanning: {item}")
            continue
        except OSError as e:
            logger.warning(f"Cannot stat {item}: {e}")
            continue

        entries.append(
            BackupEntry(
                name=item.name,
                size_bytes=st.st_size,
                modified_at=datetime.fromtimestamp(st.st_mtime, tz=timezone.utc),
                is_file=stat.S_ISREG(st.st_mode),
            )
        )
    return entries


def find_backup(entries: List[BackupEntry], extension: str = DEFAULT_EXTENSION) -> Optional[BackupEntry]:
    """Return the newest regular file with the given extension, or None."""
    # sorted() is stable, ties keep listing order
    ordered = sorted(entries, key=lambda e: e.modified_at, reverse=True)
    for entry in ordered:
        if entry.is_file and Path(entry.name).suffix == extension:
            return entry
    return None


def scan_backups(directory: Path | str, extension: str = DEFAULT_EXTENSION) -> BackupEntry:
    """
    Find the backup archive to report for a directory.

    Raises:
        DirectoryUnreadable: the directory cannot be listed
        NoBackupArtifactFound: no regular file carries the extension
    """
    directory = Path(directory)
    entries = list_entries(directory)

    backup = find_backup(entries, extension)
    if backup is None:
        raise NoBackupArtifactFound(
            f"No {extension} file among {len(entries)} entries in {directory}"
        )

    logger.debug(f"Last backup is {backup.name} ({backup.size_bytes} bytes)")
    return backup
