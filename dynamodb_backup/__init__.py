"""
DynamoDB Backup

Streams DynamoDB tables into S3 as newline-delimited DynamoDB JSON, scanning
at a fraction of each table's provisioned read capacity, optionally in the
AWS Data Pipeline import format.
"""

from .config import BackupConfig
from .exceptions import (
    AccessDeniedError,
    BackupFailedError,
    ConfigurationError,
    DynamoDBBackupError,
    FormatError,
    SerializationError,
    ServiceError,
    SinkClosedError,
    TableNotFoundError,
    ThrottlingError,
    UnknownTypeTagError,
    UploadError,
)
from .models import (
    BackupErrorEvent,
    BackupStatus,
    BackupSummary,
    TableBackupResult,
)
from .listeners import BackupListener, LoggingBackupListener
from .core import (
    DynamoDBGateway,
    S3StreamUploader,
    StreamSink,
)
from .handlers import (
    BackupOrchestrator,
    ScanPaginator,
    TableEnumerator,
    ThroughputSampler,
    sample_limit,
)
from .utils import to_data_pipeline_format

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "BackupConfig",

    # Exceptions
    "AccessDeniedError",
    "BackupFailedError",
    "ConfigurationError",
    "DynamoDBBackupError",
    "FormatError",
    "SerializationError",
    "ServiceError",
    "SinkClosedError",
    "TableNotFoundError",
    "ThrottlingError",
    "UnknownTypeTagError",
    "UploadError",

    # Results
    "BackupErrorEvent",
    "BackupStatus",
    "BackupSummary",
    "TableBackupResult",

    # Lifecycle observers
    "BackupListener",
    "LoggingBackupListener",

    # Collaborators
    "DynamoDBGateway",
    "S3StreamUploader",
    "StreamSink",

    # Export pipeline
    "BackupOrchestrator",
    "ScanPaginator",
    "TableEnumerator",
    "ThroughputSampler",
    "sample_limit",
    "to_data_pipeline_format",
]
