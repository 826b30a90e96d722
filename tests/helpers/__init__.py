"""
Test helpers for DynamoDB Backup.

In-memory doubles for the DynamoDB gateway and the S3 uploader, so export
pipeline behaviour can be tested without moto.
"""

from .fakes import (
    FakeGateway,
    RecordingListener,
    RecordingUploader,
    failing_upload,
    make_item,
    make_pages,
)

__all__ = [
    'FakeGateway',
    'RecordingListener',
    'RecordingUploader',
    'failing_upload',
    'make_item',
    'make_pages',
]
