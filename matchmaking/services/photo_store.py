import base64
import logging

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from matchmaking.config import Settings, settings
from matchmaking.utils.errors import DeleteFailed, FetchFailed, UploadFailed

logger = logging.getLogger(__name__)

DEFAULT_CONTENT_TYPE = "image/jpeg"
ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/jpg"}
MISSING_KEY_CODES = {"NoSuchKey", "404", "NotFound"}


class PhotoStore:
    """Profile photos in a flat S3 namespace, one object per application id."""

    def __init__(self, config: Settings = settings, client=None):
        self.bucket = config.PHOTO_BUCKET
        self.presign_ttl = config.PRESIGNED_URL_EXPIRE_SECONDS
        if client is None:
            session = boto3.session.Session()
            client = session.client(
                "s3",
                region_name=config.AWS_REGION,
                endpoint_url=config.S3_ENDPOINT,
                aws_access_key_id=config.AWS_ACCESS_KEY_ID,
                aws_secret_access_key=config.AWS_SECRET_ACCESS_KEY,
            )
        self.s3 = client

    def put_object(self, key: str, data: bytes, content_type: str | None = None) -> None:
        try:
            self.s3.put_object(
                Bucket=self.bucket,
                Key=key,
                Body=data,
                ContentType=content_type or DEFAULT_CONTENT_TYPE,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Error uploading photo %s", key)
            raise UploadFailed(f"Could not upload photo {key}") from exc
        logger.info("Uploaded photo %s (%s bytes)", key, len(data))

    def get_object(self, key: str) -> bytes | None:
        try:
            response = self.s3.get_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in MISSING_KEY_CODES:
                return None
            raise FetchFailed(f"Could not fetch photo {key}") from exc
        except BotoCoreError as exc:
            raise FetchFailed(f"Could not fetch photo {key}") from exc
        return response["Body"].read()

    def delete_object(self, key: str) -> None:
        # S3 reports success for keys that are already gone
        try:
            self.s3.delete_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            if exc.response.get("Error", {}).get("Code") in MISSING_KEY_CODES:
                return
            logger.exception("Error deleting photo %s", key)
            raise DeleteFailed(f"Could not delete photo {key}") from exc
        except BotoCoreError as exc:
            logger.exception("Error deleting photo %s", key)
            raise DeleteFailed(f"Could not delete photo {key}") from exc

    def presign_upload(self, key: str, content_type: str | None = None) -> str:
        try:
            return self.s3.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": key,
                    "ContentType": content_type or DEFAULT_CONTENT_TYPE,
                },
                ExpiresIn=self.presign_ttl,
            )
        except (ClientError, BotoCoreError) as exc:
            logger.exception("Error presigning upload for %s", key)
            raise UploadFailed(f"Could not presign upload for {key}") from exc

    def photo_as_base64(self, key: str) -> str | None:
        """Read path: a missing or unreadable photo degrades to None."""
        try:
            data = self.get_object(key)
        except FetchFailed as exc:
            logger.warning("Photo for %s unavailable: %s", key, exc.__cause__ or exc)
            return None
        if not data:
            return None
        return base64.b64encode(data).decode("ascii")
