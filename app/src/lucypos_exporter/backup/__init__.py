"""Backup directory inspection."""

from lucypos_exporter.backup.scanner import BackupEntry, list_entries, scan_backups

__all__ = ["BackupEntry", "list_entries", "scan_backups"]
