# Base exception class
from .base import DynamoDBBackupError

from .domain_exceptions import (
    AccessDeniedError,
    BackupFailedError,
    ConfigurationError,
    FormatError,
    SerializationError,
    ServiceError,
    SinkClosedError,
    TableNotFoundError,
    ThrottlingError,
    UnknownTypeTagError,
    UploadError,
)

__all__ = [
    # Base exception
    "DynamoDBBackupError",

    # Domain exceptions (alphabetically ordered)
    "AccessDeniedError",
    "BackupFailedError",
    "ConfigurationError",
    "FormatError",
    "SerializationError",
    "ServiceError",
    "SinkClosedError",
    "TableNotFoundError",
    "ThrottlingError",
    "UnknownTypeTagError",
    "UploadError",
]
