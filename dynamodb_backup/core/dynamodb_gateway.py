"""
DynamoDB Gateway

Thin wrapper over the low-level boto3 DynamoDB client exposing exactly the
three operations an export needs: ListTables, DescribeTable and Scan.

The low-level client is used rather than the Table resource so items come
back in their native AttributeValue encoding ({"S": "..."}, {"M": {...}}),
which is the format written to the archive.

Every botocore ClientError is mapped to a ServiceError subclass. Nothing
here retries; retry attempts are configured on the client (see
core/session.py).
"""

import logging
from typing import Any, Dict, Optional

from botocore.exceptions import BotoCoreError, ClientError

from ..config import BackupConfig
from ..exceptions import (
    AccessDeniedError,
    ServiceError,
    TableNotFoundError,
    ThrottlingError,
)
from .session import create_client

logger = logging.getLogger(__name__)

THROTTLING_ERROR_CODES = {
    'ProvisionedThroughputExceededException',
    'RequestLimitExceeded',
    'ThrottlingException',
    'TooManyRequestsException',
}

TRANSIENT_ERROR_CODES = {
    'InternalServerError',
    'ServiceUnavailable',
    'ServiceUnavailableException',
    'RequestTimeoutException',
}

ACCESS_ERROR_CODES = {
    'AccessDeniedException',
    'UnrecognizedClientException',
    'ExpiredTokenException',
    'InvalidSignatureException',
    'IncompleteSignatureException',
}


def map_dynamodb_error(
    error: Exception,
    operation: str,
    table_name: Optional[str] = None
) -> ServiceError:
    """Map a botocore error to a ServiceError subclass.

    Args:
        error: The boto3 ClientError or BotoCoreError
        operation: The operation that failed (e.g., "Scan", "ListTables")
        table_name: The DynamoDB table name, if the operation targets one

    Returns:
        ThrottlingError: For throttling and transient service errors
        TableNotFoundError: For missing tables
        AccessDeniedError: For credential and permission failures
        ServiceError: For anything else
    """
    context = operation if not table_name else f"{operation} on {table_name}"

    if not isinstance(error, ClientError):
        return ServiceError(f"{context}: {error}", operation, table_name, original_error=error)

    error_code = error.response.get('Error', {}).get('Code', 'Unknown')
    error_message = error.response.get('Error', {}).get('Message', str(error))
    full_message = f"{context}: {error_message}"

    if error_code in THROTTLING_ERROR_CODES:
        return ThrottlingError(f"Throttling - {full_message}", operation, table_name, error_code, error)

    if error_code in TRANSIENT_ERROR_CODES:
        return ThrottlingError(f"Service unavailable - {full_message}", operation, table_name, error_code, error)

    if error_code in ('ResourceNotFoundException', 'TableNotFoundException'):
        return TableNotFoundError(f"Table not found - {full_message}", operation, table_name, error_code, error)

    if error_code in ACCESS_ERROR_CODES:
        return AccessDeniedError(
            f"Authentication/authorization failed - {full_message}", operation, table_name, error_code, error
        )

    if error_code != 'ValidationException':
        logger.warning(f"Unknown DynamoDB error code '{error_code}' mapped to ServiceError")
    return ServiceError(f"DynamoDB operation failed - {full_message}", operation, table_name, error_code, error)


class DynamoDBGateway:
    """
    Gateway for the DynamoDB operations used by table exports.

    The client is created lazily and shared by every table exported through
    this gateway; boto3 clients are safe to share across threads.
    """

    def __init__(self, config: BackupConfig, client=None):
        """Initialize the gateway.

        Args:
            config: Backup configuration
            client: Optional pre-built boto3 DynamoDB client
        """
        self.config = config
        self._client = client

    @property
    def client(self):
        """Lazy initialization of the low-level DynamoDB client."""
        if self._client is None:
            self._client = create_client(self.config, 'dynamodb', self.config.endpoint_url)
        return self._client

    def list_tables(self, exclusive_start_table_name: Optional[str] = None) -> Dict[str, Any]:
        """
        Fetch one page of table names.

        Args:
            exclusive_start_table_name: LastEvaluatedTableName of the previous page

        Returns:
            Raw ListTables response (TableNames, optional LastEvaluatedTableName)
        """
        params = {}
        if exclusive_start_table_name:
            params['ExclusiveStartTableName'] = exclusive_start_table_name
        try:
            return self.client.list_tables(**params)
        except (ClientError, BotoCoreError) as e:
            raise map_dynamodb_error(e, "ListTables") from e

    def describe_table(self, table_name: str) -> Dict[str, Any]:
        """
        Describe a table.

        Returns:
            The "Table" element of the DescribeTable response
        """
        try:
            return self.client.describe_table(TableName=table_name)['Table']
        except (ClientError, BotoCoreError) as e:
            raise map_dynamodb_error(e, "DescribeTable", table_name) from e

    def scan(
        self,
        table_name: str,
        limit: int,
        exclusive_start_key: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """
        Fetch one page of a full table scan.

        Args:
            table_name: Table to scan
            limit: Maximum items evaluated per request
            exclusive_start_key: LastEvaluatedKey of the previous page

        Returns:
            Raw Scan response (Items, optional LastEvaluatedKey)
        """
        params = {
            'TableName': table_name,
            'Limit': limit,
            'ReturnConsumedCapacity': 'NONE'
        }
        if exclusive_start_key:
            params['ExclusiveStartKey'] = exclusive_start_key
        try:
            return self.client.scan(**params)
        except (ClientError, BotoCoreError) as e:
            raise map_dynamodb_error(e, "Scan", table_name) from e
