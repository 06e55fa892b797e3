from __future__ import annotations

import logging
from typing import Any, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from spanish_subtitle_addon.core.config import AddonSettings
from spanish_subtitle_addon.core.contracts.providers import SubtitleStore
from spanish_subtitle_addon.core.errors import ConfigurationError, StorageFailure

log = logging.getLogger(__name__)

SRT_CONTENT_TYPE = "application/x-subrip; charset=utf-8"


class S3SubtitleStore(SubtitleStore):
    """Writes translated subtitles to a bucket and hands out presigned GET URLs."""

    def __init__(self, client: Any, bucket: str, expires_s: int = 3600) -> None:
        if not bucket:
            raise ConfigurationError("AWS_BUCKET_NAME is not set")
        self._client = client
        self._bucket = bucket
        self._expires_s = expires_s

    @classmethod
    def from_settings(cls, settings: AddonSettings) -> "S3SubtitleStore":
        client = boto3.client(
            "s3",
            region_name=settings.aws_region,
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
        )
        return cls(client, settings.bucket_name, settings.signed_url_expires_s)

    def put_and_sign(self, key: str, content: str) -> str:
        try:
            self._client.put_object(
                Bucket=self._bucket,
                Key=key,
                Body=content.encode("utf-8"),
                ContentType=SRT_CONTENT_TYPE,
            )
            url = self._client.generate_presigned_url(
                "get_object",
                Params={"Bucket": self._bucket, "Key": key},
                ExpiresIn=self._expires_s,
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageFailure(f"Could not store {key}: {exc}") from exc
        if not url:
            raise StorageFailure(f"No signed URL returned for {key}")
        return url

    def upload(self, key: str, content: str) -> Optional[str]:
        try:
            url = self.put_and_sign(key, content)
        except StorageFailure:
            log.exception("File not uploaded: %s", key)
            return None
        log.info("File uploaded successfully: %s", key)
        return url
