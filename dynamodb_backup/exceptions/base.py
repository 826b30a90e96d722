from typing import Any, Dict, Optional


class DynamoDBBackupError(Exception):
    """Base exception for all DynamoDB backup errors.

    Attributes:
        message: Human-readable error message
        original_error: The boto3/botocore or stream error that caused this one, if any
        context: Where the failure happened (table, operation, bucket, key, ...)
    """

    def __init__(self, message: str, original_error: Optional[Exception] = None, context: Optional[Dict[str, Any]] = None):
        self.message = message
        self.original_error = original_error
        self.context: Dict[str, Any] = {}
        self.add_context(**(context or {}))
        super().__init__(message)

    def add_context(self, **values: Any) -> 'DynamoDBBackupError':
        """Attach location details, skipping those that are unknown (None or empty)."""
        self.context.update({name: value for name, value in values.items() if value not in (None, "")})
        return self

    def __str__(self) -> str:
        if not self.context:
            return self.message
        details = ", ".join(f"{name}={value}" for name, value in self.context.items())
        return f"{self.message} [{details}]"

    def __repr__(self) -> str:
        cause = type(self.original_error).__name__ if self.original_error is not None else None
        return f"<{type(self).__name__} {self.message!r} context={self.context!r} cause={cause}>"
