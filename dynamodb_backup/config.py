import os
from datetime import datetime, timezone
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, field_validator

# Load environment variables from .env file if it exists
load_dotenv()

DEFAULT_READ_PERCENTAGE = 0.25
BACKUP_PATH_PREFIX = "DynamoDB-backup-"
BACKUP_PATH_TIME_FORMAT = "%Y-%m-%d-%H-%M-%S"


def _env_list(name: str) -> Optional[List[str]]:
    value = os.getenv(name)
    if value is None:
        return None
    return [part.strip() for part in value.split(",") if part.strip()]


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


class BackupConfig(BaseModel):
    """Configuration for DynamoDB table exports to S3."""

    aws_access_key_id: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_ACCESS_KEY_ID"),
        description="AWS access key ID"
    )

    aws_secret_access_key: Optional[str] = Field(
        default_factory=lambda: os.getenv("AWS_SECRET_ACCESS_KEY"),
        description="AWS secret access key"
    )

    region_name: str = Field(
        default_factory=lambda: os.getenv("AWS_REGION", "us-east-1"),
        description="AWS region name"
    )

    # Endpoints (for local development)
    endpoint_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("DYNAMODB_ENDPOINT_URL"),
        description="DynamoDB endpoint URL"
    )

    s3_endpoint_url: Optional[str] = Field(
        default_factory=lambda: os.getenv("S3_ENDPOINT_URL"),
        description="S3 endpoint URL"
    )

    # Destination
    bucket: Optional[str] = Field(
        default_factory=lambda: os.getenv("DYNAMODB_BACKUP_BUCKET"),
        description="S3 bucket receiving the table archives"
    )

    backup_path: Optional[str] = Field(
        default_factory=lambda: os.getenv("DYNAMODB_BACKUP_PATH"),
        description="Key prefix for the archives; a UTC timestamped prefix is used when unset"
    )

    # Table selection
    excluded_tables: List[str] = Field(
        default_factory=lambda: _env_list("DYNAMODB_BACKUP_EXCLUDED_TABLES") or [],
        description="Tables never exported"
    )

    included_tables: Optional[List[str]] = Field(
        default_factory=lambda: _env_list("DYNAMODB_BACKUP_INCLUDED_TABLES"),
        description="Tables to export; all tables when unset"
    )

    # Throughput
    read_percentage: float = Field(
        default_factory=lambda: float(os.getenv("DYNAMODB_BACKUP_READ_PERCENTAGE", DEFAULT_READ_PERCENTAGE)),
        description="Fraction of provisioned read capacity used as the scan page size"
    )

    read_capacity_override: Optional[int] = Field(
        default=None,
        ge=1,
        description="Read capacity assumed for tables that report none (on-demand billing)"
    )

    # Behaviour
    stop_on_failure: bool = Field(
        default_factory=lambda: _env_flag("DYNAMODB_BACKUP_STOP_ON_FAILURE"),
        description="Fail the multi-table backup when any table fails"
    )

    base64_binary: bool = Field(
        default_factory=lambda: _env_flag("DYNAMODB_BACKUP_BASE64_BINARY"),
        description="Write binary attribute values as base64 text"
    )

    save_data_pipeline_format: bool = Field(
        default_factory=lambda: _env_flag("DYNAMODB_BACKUP_DATA_PIPELINE_FORMAT"),
        description="Re-key AttributeValue type tags for AWS Data Pipeline imports"
    )

    # Connection settings
    max_pool_connections: int = Field(
        default=50,
        description="Maximum number of connections in the connection pool"
    )

    retries: int = Field(
        default=3,
        description="Number of retry attempts for failed requests"
    )

    timeout_seconds: float = Field(
        default=30.0,
        description="Request timeout in seconds"
    )

    # Logging settings
    enable_debug_logging: bool = Field(
        default_factory=lambda: _env_flag("DYNAMODB_DEBUG_LOGGING"),
        description="Enable debug logging for backup operations"
    )

    @field_validator('region_name')
    @classmethod
    def validate_region(cls, v):
        """Validate AWS region name."""
        if not v:
            raise ValueError("AWS region name is required")
        return v

    @field_validator('read_percentage')
    @classmethod
    def validate_read_percentage(cls, v):
        """Validate the sampled fraction of read capacity."""
        if not 0 < v <= 1:
            raise ValueError("read_percentage must be greater than 0 and at most 1")
        return v

    @field_validator('excluded_tables', 'included_tables', mode='before')
    @classmethod
    def split_table_list(cls, v):
        """Accept comma-separated strings for table lists."""
        if isinstance(v, str):
            return [part.strip() for part in v.split(",") if part.strip()]
        return v

    def get_backup_path(self, now: Optional[datetime] = None) -> str:
        """Get the key prefix for this backup run.

        Args:
            now: Timestamp used for the default prefix (current UTC time if None)

        Returns:
            The configured backup_path, or DynamoDB-backup-YYYY-MM-DD-HH-mm-ss
        """
        if self.backup_path:
            return self.backup_path
        now = now or datetime.now(timezone.utc)
        return BACKUP_PATH_PREFIX + now.strftime(BACKUP_PATH_TIME_FORMAT)

    @classmethod
    def from_env(cls) -> 'BackupConfig':
        """Create configuration from environment variables.

        Returns:
            BackupConfig instance
        """
        return cls()

    @classmethod
    def for_local_development(cls, bucket: str = "dynamodb-backups") -> 'BackupConfig':
        """Create configuration for DynamoDB Local / LocalStack.

        Args:
            bucket: Destination bucket name

        Returns:
            BackupConfig instance configured for local development
        """
        return cls(
            aws_access_key_id="local",
            aws_secret_access_key="local",
            region_name="us-east-1",
            endpoint_url="http://localhost:4566",
            s3_endpoint_url="http://localhost:4566",
            bucket=bucket,
            enable_debug_logging=True
        )

    model_config = ConfigDict(
        validate_assignment=True
    )
