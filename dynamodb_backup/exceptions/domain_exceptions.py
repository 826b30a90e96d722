"""
Domain-Specific Exceptions for DynamoDB Backup

All exceptions extend DynamoDBBackupError and are grouped by where in the
export pipeline they originate:

1. Service Errors (DynamoDB and S3 transport/API failures)
2. Format Errors (records that cannot be written to the archive)
3. Configuration Errors (problems detected before any table starts)
4. Pipeline Errors (sink misuse and aggregate failures)
"""

from typing import Any, Optional

from .base import DynamoDBBackupError


# =============================================================================
# Service Errors
# =============================================================================

class ServiceError(DynamoDBBackupError):
    """Raised when a call to DynamoDB or S3 fails.

    Used for:
    - ListTables, DescribeTable and Scan failures
    - Network connectivity issues and timeouts
    - Unknown error codes returned by the service
    """

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        table_name: Optional[str] = None,
        error_code: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        """Initialize service error.

        Args:
            message: Human-readable error message
            operation: The service operation that failed (e.g. "Scan")
            table_name: Table the operation targeted, if any
            error_code: Error code reported by the service, if any
            original_error: The original exception that caused this error
        """
        self.operation = operation
        self.table_name = table_name
        self.error_code = error_code
        super().__init__(message, original_error)
        self.add_context(operation=operation, table_name=table_name, error_code=error_code)


class ThrottlingError(ServiceError):
    """Raised for throttling and transient service failures.

    Nothing in the export pipeline retries these; retries belong to the
    boto3 client configuration.
    """


class TableNotFoundError(ServiceError):
    """Raised when the table being described or scanned does not exist."""


class AccessDeniedError(ServiceError):
    """Raised for authentication and authorization failures."""


class UploadError(ServiceError):
    """Raised when streaming an archive object to S3 fails."""

    def __init__(
        self,
        message: str,
        bucket: Optional[str] = None,
        key: Optional[str] = None,
        error_code: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.bucket = bucket
        self.key = key
        super().__init__(message, operation='Upload', error_code=error_code, original_error=original_error)
        self.add_context(bucket=bucket, key=key)


# =============================================================================
# Format Errors
# =============================================================================

class FormatError(DynamoDBBackupError):
    """Raised when a record cannot be rendered into the archive format.

    Format errors are fatal to the table being exported: dropping an
    attribute would silently corrupt the exported row.
    """


class UnknownTypeTagError(FormatError):
    """Raised when an AttributeValue carries a type tag outside the known set."""

    def __init__(self, tag: str):
        self.tag = tag
        super().__init__(f"Unknown AttributeValue key: {tag}", context={'tag': tag})


class SerializationError(FormatError):
    """Raised when a record contains a value that cannot be written as JSON."""


# =============================================================================
# Configuration Errors
# =============================================================================

class ConfigurationError(DynamoDBBackupError):
    """Raised when the backup cannot start with the given configuration.

    Used for:
    - Missing destination bucket
    - boto3 session/client creation failures (bad credentials or region)
    """


# =============================================================================
# Pipeline Errors
# =============================================================================

class SinkClosedError(DynamoDBBackupError):
    """Raised when appending to a stream sink that is closed or aborted."""


class BackupFailedError(DynamoDBBackupError):
    """Raised by a multi-table backup when stop_on_failure is set and a table failed.

    Attributes:
        table_name: The first table whose failure was recorded
        summary: BackupSummary with every table's outcome
    """

    def __init__(self, table_name: str, summary: Any, original_error: Optional[Exception] = None):
        self.table_name = table_name
        self.summary = summary
        message = f"Backup of table '{table_name}' failed: {original_error}"
        super().__init__(message, original_error, {'table_name': table_name})
