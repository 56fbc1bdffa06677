"""S3-compatible media store. Only URLs leave this module."""
import logging
import boto3
from botocore.config import Config as BotoConfig
from botocore.exceptions import BotoCoreError, ClientError
from flask import current_app

from app.errors import DependencyError

logger = logging.getLogger(__name__)


def _get_client():
    return boto3.client(
        "s3",
        endpoint_url=current_app.config["S3_ENDPOINT_URL"] or None,
        aws_access_key_id=current_app.config["S3_ACCESS_KEY"],
        aws_secret_access_key=current_app.config["S3_SECRET_KEY"],
        region_name=current_app.config["S3_REGION"],
        config=BotoConfig(signature_version="s3v4"),
    )


def get_public_url(storage_key):
    """Return the public CDN URL for a storage key."""
    base = current_app.config["S3_PUBLIC_URL"].rstrip("/")
    return f"{base}/{storage_key}"


def upload(storage_key, data, content_type="image/jpeg"):
    """Upload public bytes and return their durable URL.

    Raises:
        DependencyError when the bucket is unreachable or rejects the object
    """
    bucket = current_app.config["S3_BUCKET_NAME"]
    try:
        _get_client().put_object(
            Bucket=bucket,
            Key=storage_key,
            Body=data,
            ContentType=content_type,
            ACL="public-read",
        )
    except (BotoCoreError, ClientError) as e:
        logger.exception("Media upload failed for %s", storage_key)
        raise DependencyError("Media store unavailable", storage_key=storage_key) from e
    return get_public_url(storage_key)


def delete(storage_key):
    """Delete an object whose database row was never written.

    Failures are logged only; an orphaned object is harmless.
    """
    bucket = current_app.config["S3_BUCKET_NAME"]
    try:
        _get_client().delete_object(Bucket=bucket, Key=storage_key)
    except (BotoCoreError, ClientError):
        logger.exception("Could not delete orphaned object %s", storage_key)
        return False
    return True
