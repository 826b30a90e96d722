"""
Test configuration and fixtures for DynamoDB Backup.

Provides configuration fixtures, in-memory collaborators and moto-backed
DynamoDB/S3 clients.
"""

import sys
from pathlib import Path

# Add parent directory to path so we can import dynamodb_backup and tests.helpers
sys.path.insert(0, str(Path(__file__).parent.parent))

import boto3
import pytest
from moto import mock_aws

from dynamodb_backup import BackupConfig, BackupOrchestrator
from tests.helpers import FakeGateway, RecordingListener, RecordingUploader, make_pages

TEST_BUCKET = 'test-backup-bucket'
TEST_BACKUP_PATH = 'backups/test-run'


@pytest.fixture
def backup_config():
    """Backup configuration for testing."""
    return BackupConfig(
        aws_access_key_id="test_key",
        aws_secret_access_key="test_secret",
        region_name="us-east-1",
        endpoint_url=None,
        s3_endpoint_url=None,
        bucket=TEST_BUCKET,
        backup_path=TEST_BACKUP_PATH,
        excluded_tables=[],
        included_tables=None,
        read_percentage=0.25,
        stop_on_failure=False,
        base64_binary=False,
        save_data_pipeline_format=False,
        enable_debug_logging=False
    )


@pytest.fixture
def fake_gateway():
    """Gateway with three tables of 3 pages x 4 items."""
    return FakeGateway(
        tables={
            'users': make_pages('users', 3, 4),
            'orders': make_pages('orders', 3, 4),
            'audit': make_pages('audit', 3, 4),
        },
        read_capacity={'users': 40, 'orders': 1000, 'audit': 3}
    )


@pytest.fixture
def recording_uploader():
    """Uploader that drains each sink into memory."""
    return RecordingUploader(bucket=TEST_BUCKET)


@pytest.fixture
def recording_listener():
    return RecordingListener()


@pytest.fixture
def orchestrator(backup_config, fake_gateway, recording_uploader, recording_listener):
    """Orchestrator wired to in-memory collaborators."""
    return BackupOrchestrator(
        backup_config,
        gateway=fake_gateway,
        uploader=recording_uploader,
        listeners=[recording_listener]
    )


# moto fixtures

@pytest.fixture
def aws_credentials(monkeypatch):
    """Fake credentials so nothing can reach a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def mock_aws_env(aws_credentials):
    with mock_aws():
        yield


@pytest.fixture
def dynamodb_client(mock_aws_env):
    """Mocked low-level DynamoDB client."""
    return boto3.client('dynamodb', region_name='us-east-1')


@pytest.fixture
def s3_client(mock_aws_env):
    """Mocked S3 client with the backup bucket created."""
    client = boto3.client('s3', region_name='us-east-1')
    client.create_bucket(Bucket=TEST_BUCKET)
    return client


@pytest.fixture
def create_table(dynamodb_client):
    """Factory creating a provisioned table filled with numbered items."""

    def _create(table_name: str, item_count: int = 0, read_capacity: int = 8):
        dynamodb_client.create_table(
            TableName=table_name,
            KeySchema=[
                {'AttributeName': 'id', 'KeyType': 'HASH'}
            ],
            AttributeDefinitions=[
                {'AttributeName': 'id', 'AttributeType': 'S'}
            ],
            BillingMode='PROVISIONED',
            ProvisionedThroughput={'ReadCapacityUnits': read_capacity, 'WriteCapacityUnits': 5}
        )
        for index in range(item_count):
            dynamodb_client.put_item(
                TableName=table_name,
                Item={
                    'id': {'S': f'{table_name}-{index:04d}'},
                    'seq': {'N': str(index)},
                }
            )
        return table_name

    return _create
