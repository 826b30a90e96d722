"""
Backup Orchestration

BackupOrchestrator exports tables to S3 as newline-delimited DynamoDB JSON:

    ListTables -> select tables -> per table:
        DescribeTable -> Limit
        Scan pages -> (Data Pipeline re-keying) -> JSON lines -> StreamSink
        StreamSink -> S3 upload_fileobj -> <backup_path>/<table>.json

Within a table the scan runs on the calling thread and the upload on its
own thread; the two only meet at the table's StreamSink. backup_all_tables
runs every selected table at once, one worker per table.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, Iterable, List, Optional

from ..config import BackupConfig
from ..core import DynamoDBGateway, S3StreamUploader, StreamSink
from ..exceptions import (
    BackupFailedError,
    DynamoDBBackupError,
    SinkClosedError,
    UploadError,
)
from ..listeners import BackupListener
from ..models import BackupErrorEvent, BackupSummary, TableBackupResult
from ..utils import build_object_key, serialize_item, to_data_pipeline_format, utc_now
from .scan import ScanPaginator
from .tables import TableEnumerator, ThroughputSampler

logger = logging.getLogger(__name__)

PACKAGE_LOGGER = "dynamodb_backup"


class OutcomeCollector:
    """Thread-safe fan-in of per-table results for one multi-table run."""

    def __init__(self, backup_path: str):
        self._lock = threading.Lock()
        self.summary = BackupSummary(backup_path=backup_path)

    def record(self, result: TableBackupResult) -> None:
        with self._lock:
            self.summary.results[result.table_name] = result
            if not result.succeeded:
                self.summary.failure_order.append(result.table_name)


class BackupOrchestrator:
    """
    Exports DynamoDB tables to S3.

    Example:
        orchestrator = BackupOrchestrator(BackupConfig(bucket="my-backups"))
        orchestrator.add_listener(LoggingBackupListener())
        summary = orchestrator.backup_all_tables()
    """

    def __init__(
        self,
        config: BackupConfig,
        gateway: Optional[DynamoDBGateway] = None,
        uploader: Optional[S3StreamUploader] = None,
        listeners: Optional[Iterable[BackupListener]] = None
    ):
        """Initialize the orchestrator.

        Args:
            config: Backup configuration
            gateway: DynamoDB gateway (built from config if None)
            uploader: S3 uploader (built from config if None)
            listeners: Lifecycle observers
        """
        self.config = config
        self.gateway = gateway or DynamoDBGateway(config)
        self.uploader = uploader or S3StreamUploader(config)
        self.listeners: List[BackupListener] = list(listeners or [])

        if config.enable_debug_logging:
            logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG)

    def add_listener(self, listener: BackupListener) -> None:
        self.listeners.append(listener)

    def _notify(self, hook: str, *args: Any) -> None:
        for listener in self.listeners:
            getattr(listener, hook)(*args)

    def _report_error(self, table_name: str, error: Exception, stage: str) -> None:
        self._notify('on_error', BackupErrorEvent(table=table_name, error=error, stage=stage))

    # ------------------------------------------------------------------
    # Table selection
    # ------------------------------------------------------------------

    def list_tables(self) -> List[str]:
        """All table names in the account/region. Raises ServiceError."""
        return TableEnumerator(self.gateway).list_tables()

    def select_tables(self, all_tables: List[str]) -> List[str]:
        """
        Tables to export: (all_tables - excluded) intersected with included.

        Included tables that do not exist are ignored; an excluded table is
        never exported even if it is also included. Service order is kept.
        """
        excluded = set(self.config.excluded_tables)
        tables = [name for name in all_tables if name not in excluded]
        if self.config.included_tables is not None:
            included = set(self.config.included_tables)
            tables = [name for name in tables if name in included]
        return tables

    # ------------------------------------------------------------------
    # Record formatting
    # ------------------------------------------------------------------

    def format_item(self, item: Dict[str, Any]) -> str:
        """Render one raw item as an archive line (without the newline).

        Raises:
            FormatError: On an unknown type tag or unserializable value
        """
        if self.config.save_data_pipeline_format:
            item = to_data_pipeline_format(item)
        return serialize_item(item, self.config.base64_binary)

    # ------------------------------------------------------------------
    # Single table
    # ------------------------------------------------------------------

    def backup_table(self, table_name: str, backup_path: Optional[str] = None) -> TableBackupResult:
        """
        Export one table to <backup_path>/<table_name>.json.

        Args:
            table_name: Table to export
            backup_path: Key prefix (config.get_backup_path() if None)

        Returns:
            TableBackupResult with the scan and upload outcomes. Failures are
            recorded there and reported through on_error, not raised.

        Raises:
            ConfigurationError: If no destination bucket is configured
        """
        if backup_path is None:
            backup_path = self.config.get_backup_path()
        # Fail before any work when the destination is unusable
        self.uploader.check_destination()

        object_key = build_object_key(backup_path, table_name)
        started_at = utc_now()
        result = TableBackupResult(table_name=table_name, object_key=object_key, started_at=started_at)

        logger.info(f"Backing up {table_name} to {object_key}")
        self._notify('on_start_backup', table_name, started_at)

        sink = StreamSink(name=table_name)
        upload_thread = threading.Thread(
            target=self._run_upload,
            args=(sink, object_key, result),
            name=f"upload-{table_name}",
            daemon=True
        )
        upload_thread.start()

        try:
            self._run_scan(table_name, sink, result)
        except Exception as e:
            logger.error(f"Scan of {table_name} raised unexpectedly: {e}")
            self._record_scan_error(result, e)
        finally:
            sink.close()
            upload_thread.join()

        result.duration = utc_now() - started_at
        self._notify('on_end_backup', table_name, result.duration)

        if result.succeeded:
            logger.info(
                f"Backed up {result.items_exported} items from {table_name} "
                f"in {result.duration.total_seconds():.3f}s"
            )
        return result

    def _run_upload(self, sink: StreamSink, object_key: str, result: TableBackupResult) -> None:
        table_name = result.table_name
        try:
            self.uploader.upload(sink, object_key)
            if not sink.drained:
                raise UploadError(f"Upload of {object_key} finished before the stream ended", key=object_key)
        except Exception as e:
            error = e if isinstance(e, DynamoDBBackupError) else UploadError(
                f"Upload of {object_key} failed: {e}", key=object_key, original_error=e
            )
            logger.error(f"Upload of {table_name} failed: {error}")
            result.upload_error = error
            # Release the producer before any listener runs
            sink.abort(error)
            self._report_error(table_name, error, 'upload')

    def _run_scan(self, table_name: str, sink: StreamSink, result: TableBackupResult) -> None:
        sampler = ThroughputSampler(
            self.gateway,
            self.config.read_percentage,
            self.config.read_capacity_override
        )
        try:
            page_limit = sampler.limit_for(table_name)
        except DynamoDBBackupError as e:
            self._record_scan_error(result, e)
            return
        result.page_limit = page_limit

        items_exported = 0

        def on_page(items: List[Dict[str, Any]]) -> None:
            nonlocal items_exported
            for item in items:
                sink.append(self.format_item(item) + "\n")
                items_exported += 1

        def on_done(error: Optional[Exception]) -> None:
            if error is not None:
                self._record_scan_error(result, error)

        paginator = ScanPaginator(self.gateway)
        paginator.scan(table_name, page_limit, on_page, on_done)

        result.pages_scanned = paginator.pages_delivered
        result.items_exported = items_exported

    def _record_scan_error(self, result: TableBackupResult, error: Exception) -> None:
        # The upload already reported the failure that closed the sink
        if isinstance(error, SinkClosedError) and result.upload_error is not None:
            return
        result.scan_error = error
        self._report_error(result.table_name, error, 'scan')

    # ------------------------------------------------------------------
    # All tables
    # ------------------------------------------------------------------

    def backup_all_tables(self) -> BackupSummary:
        """
        Export every selected table concurrently, one worker per table.

        Returns:
            BackupSummary with every table's result

        Raises:
            ServiceError: If listing tables fails (no table is started)
            ConfigurationError: If no destination bucket is configured
            BackupFailedError: If stop_on_failure is set and any table failed.
                Sibling tables still run to completion first.
        """
        backup_path = self.config.get_backup_path()
        self.uploader.check_destination()
        tables = self.select_tables(self.list_tables())
        collector = OutcomeCollector(backup_path)

        logger.info(f"Backing up {len(tables)} tables to {backup_path}")

        if tables:
            with ThreadPoolExecutor(max_workers=len(tables), thread_name_prefix="dynamodb-backup") as executor:
                futures = {
                    executor.submit(self.backup_table, table_name, backup_path): table_name
                    for table_name in tables
                }
                for future in as_completed(futures):
                    collector.record(self._future_result(futures[future], future, backup_path))

        summary = collector.summary
        logger.info(
            f"Backup to {backup_path} finished: {len(summary.succeeded_tables)} succeeded, "
            f"{len(summary.failed_tables)} failed"
        )

        if self.config.stop_on_failure and not summary.succeeded:
            first = summary.first_failure
            raise BackupFailedError(first.table_name, summary, first.error)
        return summary

    def _future_result(self, table_name: str, future, backup_path: str) -> TableBackupResult:
        try:
            return future.result()
        except Exception as e:
            logger.error(f"Backup of {table_name} raised unexpectedly: {e}")
            self._report_error(table_name, e, 'scan')
            return TableBackupResult(
                table_name=table_name,
                object_key=build_object_key(backup_path, table_name),
                started_at=utc_now(),
                scan_error=e
            )
