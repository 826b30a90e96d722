"""S3 uploader streaming archive objects from a pull-based source."""

import logging
from typing import Any

from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError

from ..config import BackupConfig
from ..exceptions import ConfigurationError, UploadError
from .session import create_client

logger = logging.getLogger(__name__)


class S3StreamUploader:
    """
    Uploads file-like sources to the configured bucket.

    upload_fileobj handles multipart uploads for non-seekable sources and
    aborts the multipart upload if the transfer fails.
    """

    def __init__(self, config: BackupConfig, client=None):
        self.config = config
        self._client = client

    @property
    def client(self):
        """Lazy initialization of the low-level S3 client."""
        if self._client is None:
            self._client = create_client(self.config, 's3', self.config.s3_endpoint_url)
        return self._client

    @property
    def bucket(self) -> str:
        if not self.config.bucket:
            raise ConfigurationError("No destination bucket configured for DynamoDB backups")
        return self.config.bucket

    def check_destination(self) -> str:
        """Return the destination bucket, raising ConfigurationError when none is configured."""
        return self.bucket

    def upload(self, source: Any, key: str) -> None:
        """
        Stream source to s3://<bucket>/<key>, returning once every byte is flushed.

        Args:
            source: Object with a read(size) method; read until it returns b""
            key: Destination object key

        Raises:
            UploadError: If the transfer fails
        """
        bucket = self.bucket
        logger.debug(f"Uploading s3://{bucket}/{key}")
        try:
            self.client.upload_fileobj(source, bucket, key)
        except (ClientError, BotoCoreError, S3UploadFailedError) as e:
            error_code = None
            if isinstance(e, ClientError):
                error_code = e.response.get('Error', {}).get('Code')
            raise UploadError(f"Upload to s3://{bucket}/{key} failed: {e}", bucket, key, error_code, e) from e
        logger.debug(f"Upload of s3://{bucket}/{key} complete")
