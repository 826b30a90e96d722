"""boto3 session and client construction shared by the DynamoDB and S3 collaborators."""

import logging
from typing import Optional

import boto3
from botocore.config import Config

from ..config import BackupConfig
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def build_client_config(config: BackupConfig) -> Config:
    """Translate connection settings into a botocore Config.

    Retries live here and only here: the export pipeline itself never
    retries a failed request.
    """
    return Config(
        retries={'max_attempts': config.retries},
        max_pool_connections=config.max_pool_connections,
        read_timeout=config.timeout_seconds,
        connect_timeout=config.timeout_seconds
    )


def create_client(config: BackupConfig, service_name: str, endpoint_url: Optional[str] = None):
    """Create a low-level boto3 client for the given service.

    Raises:
        ConfigurationError: If the session or client cannot be created
    """
    try:
        session = boto3.Session(
            aws_access_key_id=config.aws_access_key_id,
            aws_secret_access_key=config.aws_secret_access_key,
            region_name=config.region_name
        )

        client_kwargs = {
            'region_name': config.region_name,
            'config': build_client_config(config)
        }
        if endpoint_url:
            client_kwargs['endpoint_url'] = endpoint_url

        return session.client(service_name, **client_kwargs)
    except Exception as e:
        logger.error(f"Failed to create {service_name} client: {e}")
        raise ConfigurationError(f"Failed to create {service_name} client: {e}", e) from e
