"""
Core infrastructure components for DynamoDB exports.

- DynamoDBGateway: ListTables/DescribeTable/Scan over the low-level boto3 client
- S3StreamUploader: streams a file-like source into an S3 object
- StreamSink: single-slot handoff between the scan loop and the upload
"""

from .dynamodb_gateway import DynamoDBGateway, map_dynamodb_error
from .s3_uploader import S3StreamUploader
from .session import build_client_config, create_client
from .stream_sink import StreamSink

__all__ = [
    "DynamoDBGateway",
    "S3StreamUploader",
    "StreamSink",
    "build_client_config",
    "create_client",
    "map_dynamodb_error",
]
