"""
S3 Tools

Object store client for the extraction pipeline: read raw emails,
write attachments, and mint presigned download links.
"""

import boto3
import structlog
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from extractor.shared.config import Settings, get_settings
from extractor.shared.exceptions import RetrievalError, SigningError, WriteError

log = structlog.get_logger()

DEFAULT_URL_TTL_SECONDS = 15 * 60


def _get_client(settings: Settings | None = None):
    """Get S3 client with explicit timeouts."""
    settings = settings or get_settings()
    client_config = Config(
        connect_timeout=settings.s3_connect_timeout_seconds,
        read_timeout=settings.s3_read_timeout_seconds,
        retries={"max_attempts": settings.s3_max_attempts, "mode": "standard"},
        signature_version="s3v4",
    )
    return boto3.client("s3", config=client_config, **settings.s3_config)


class S3ObjectStore:
    """
    Thin wrapper over a boto3 S3 client.

    Every botocore failure is converted to the pipeline error for the step,
    so callers only need to handle RetrievalError, WriteError and SigningError.
    """

    def __init__(self, client=None) -> None:
        self._client = client or _get_client()

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3ObjectStore":
        return cls(_get_client(settings))

    def fetch(self, bucket: str, key: str) -> bytes:
        """
        Fetch the full content of an object.

        Raises:
            RetrievalError: If the object is missing or the transfer fails
        """
        log.info("fetching_object", bucket=bucket, key=key)

        try:
            response = self._client.get_object(Bucket=bucket, Key=key)
            content = response["Body"].read()
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")

            if error_code in ("NoSuchKey", "404"):
                log.warning("object_not_found", bucket=bucket, key=key)
            else:
                log.error("s3_fetch_failed", bucket=bucket, key=key, error=str(e))

            raise RetrievalError(bucket=bucket, key=key, error_message=str(e)) from e
        except BotoCoreError as e:
            # Connection errors, read timeouts, truncated bodies
            log.error("s3_fetch_failed", bucket=bucket, key=key, error=str(e))
            raise RetrievalError(bucket=bucket, key=key, error_message=str(e)) from e

        log.debug(
            "object_fetched",
            bucket=bucket,
            key=key,
            size_bytes=len(content),
        )

        return content

    def store(
        self,
        bucket: str,
        key: str,
        content: bytes,
        *,
        content_type: str | None = None,
    ) -> None:
        """
        Write an object, overwriting any existing object at the key.

        Raises:
            WriteError: If the upload fails
        """
        put_params = {
            "Bucket": bucket,
            "Key": key,
            "Body": content,
        }

        if content_type:
            put_params["ContentType"] = content_type

        try:
            self._client.put_object(**put_params)
        except (ClientError, BotoCoreError) as e:
            log.error("s3_upload_failed", bucket=bucket, key=key, error=str(e))
            raise WriteError(bucket=bucket, key=key, error_message=str(e)) from e

        log.info(
            "object_stored",
            s3_uri=f"s3://{bucket}/{key}",
            size_bytes=len(content),
        )

    def sign(
        self,
        bucket: str,
        key: str,
        *,
        expires_in: int = DEFAULT_URL_TTL_SECONDS,
    ) -> str:
        """
        Generate a presigned GET URL valid for `expires_in` seconds.

        The object is not checked for existence and the URL cannot be revoked.

        Raises:
            SigningError: If the URL cannot be generated
        """
        try:
            url = self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": bucket, "Key": key},
                ExpiresIn=expires_in,
            )
        except (ClientError, BotoCoreError) as e:
            log.error("presign_failed", bucket=bucket, key=key, error=str(e))
            raise SigningError(bucket=bucket, key=key, error_message=str(e)) from e

        log.debug(
            "presigned_url_generated",
            s3_uri=f"s3://{bucket}/{key}",
            expires_in=expires_in,
        )

        return url
