"""Lifecycle notifications emitted by BackupOrchestrator."""

import logging
from datetime import datetime, timedelta

from .models import BackupErrorEvent

logger = logging.getLogger(__name__)


class BackupListener:
    """
    Observer for table export lifecycle events.

    Subclass and override the hooks of interest. Hooks are called from the
    thread exporting the table, so with backup_all_tables they may run
    concurrently for different tables.
    """

    def on_start_backup(self, table_name: str, start_time: datetime) -> None:
        """Called before a table's upload and scan start."""

    def on_end_backup(self, table_name: str, duration: timedelta) -> None:
        """Called once both the scan and the upload of a table have finished."""

    def on_error(self, event: BackupErrorEvent) -> None:
        """Called for each scan or upload failure."""


class LoggingBackupListener(BackupListener):
    """Writes lifecycle events to the package logger."""

    def on_start_backup(self, table_name: str, start_time: datetime) -> None:
        logger.info(f"Starting backup of {table_name} at {start_time.isoformat()}")

    def on_end_backup(self, table_name: str, duration: timedelta) -> None:
        logger.info(f"Finished backup of {table_name} in {duration.total_seconds():.3f}s")

    def on_error(self, event: BackupErrorEvent) -> None:
        logger.error(f"Backup of {event.table} failed during {event.stage}: {event.error}")
