"""
Backup Result Models

Outcome records produced by the orchestrator:

- TableBackupResult: one table's scan and upload outcome
- BackupSummary: every table's result from a multi-table run
- BackupErrorEvent: payload of the error notification
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class BackupStatus(str, Enum):
    """Final status of a table export."""
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class BackupErrorEvent(BaseModel):
    """Error notification for one table; either the scan or the upload failed."""

    table: str = Field(..., description="Table whose export failed")
    error: Exception = Field(..., description="The scan or upload error")
    stage: str = Field(..., description="'scan' or 'upload'")

    model_config = ConfigDict(arbitrary_types_allowed=True)


class TableBackupResult(BaseModel):
    """Outcome of exporting one table."""

    table_name: str = Field(..., description="Exported table")
    object_key: str = Field(..., description="Destination object key")
    started_at: datetime = Field(..., description="UTC start time")
    duration: Optional[timedelta] = Field(default=None, description="Wall time of scan and upload")
    page_limit: Optional[int] = Field(default=None, description="Scan Limit derived from read capacity")
    pages_scanned: int = Field(default=0, description="Non-empty pages delivered by the scan")
    items_exported: int = Field(default=0, description="Items written to the archive")
    scan_error: Optional[Exception] = Field(default=None, description="Failure of describe/scan/format")
    upload_error: Optional[Exception] = Field(default=None, description="Failure of the S3 upload")

    # Assigned from both the scan and upload threads: assignment stays unvalidated
    model_config = ConfigDict(arbitrary_types_allowed=True)

    @property
    def error(self) -> Optional[Exception]:
        """The scan error if any, else the upload error."""
        return self.scan_error or self.upload_error

    @property
    def succeeded(self) -> bool:
        return self.scan_error is None and self.upload_error is None

    @property
    def status(self) -> BackupStatus:
        return BackupStatus.SUCCEEDED if self.succeeded else BackupStatus.FAILED


class BackupSummary(BaseModel):
    """Outcome of a multi-table backup, keyed by table name."""

    backup_path: str = Field(..., description="Key prefix shared by every archive of the run")
    results: Dict[str, TableBackupResult] = Field(default_factory=dict)
    failure_order: List[str] = Field(
        default_factory=list,
        description="Failed tables in the order their failures were recorded"
    )

    @property
    def succeeded(self) -> bool:
        return not self.failure_order

    @property
    def failed_tables(self) -> List[str]:
        return list(self.failure_order)

    @property
    def succeeded_tables(self) -> List[str]:
        return [name for name, result in self.results.items() if result.succeeded]

    @property
    def first_failure(self) -> Optional[TableBackupResult]:
        if not self.failure_order:
            return None
        return self.results[self.failure_order[0]]
