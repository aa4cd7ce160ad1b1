import logging
import random
import re
import string
import time
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Dict, List, Optional, Protocol, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from nyonjo.core.config import settings
from nyonjo.core.exceptions import StorageError, ValidationError

logger = logging.getLogger(__name__)

PRODUCT_IMAGES = "product-images"
BLOG_MEDIA = "blog-media"
SISTERHOOD_MEDIA = "sisterhood-media"
LOGOS = "logos"
BUCKETS = (PRODUCT_IMAGES, BLOG_MEDIA, SISTERHOOD_MEDIA, LOGOS)

MB = 1024 * 1024
IMAGE_TYPES = ("image/jpeg", "image/png", "image/webp", "image/gif", "image/jpg")
VIDEO_TYPES = ("video/mp4", "video/webm", "video/quicktime", "video/x-msvideo")
MEDIA_TYPES = IMAGE_TYPES + VIDEO_TYPES
LOGO_TYPES = ("image/jpeg", "image/jpg", "image/png", "image/webp", "image/svg+xml")


class StorageClient(Protocol):
    """Operations the API needs from object storage."""

    def upload_file(self, bucket: str, key: str, file_content: bytes, content_type: str, upsert: bool = False) -> str:
        ...

    def delete_files(self, bucket: str, keys: List[str]) -> None:
        ...

    def get_public_url(self, bucket: str, key: str) -> str:
        ...


class S3StorageService:
    """Bucket storage over an S3-compatible endpoint (Supabase Storage, AWS S3)."""

    def __init__(self):
        self.s3_client = boto3.client(
            "s3",
            endpoint_url=settings.STORAGE_ENDPOINT_URL,
            aws_access_key_id=settings.AWS_ACCESS_KEY_ID or None,
            aws_secret_access_key=settings.AWS_SECRET_ACCESS_KEY or None,
            region_name=settings.AWS_REGION,
            config=Config(s3={"addressing_style": "path"}, signature_version="s3v4"),
        )

    def upload_file(self, bucket: str, key: str, file_content: bytes, content_type: str, upsert: bool = False) -> str:
        """
        Upload bytes to ``bucket/key`` and return the key.

        S3 overwrites by default; without ``upsert`` an existing key is an error.
        """
        try:
            if not upsert and self._exists(bucket, key):
                raise StorageError("File already exists", context={"bucket": bucket, "key": key})
            self.s3_client.put_object(
                Bucket=bucket,
                Key=key,
                Body=file_content,
                ContentType=content_type,
                CacheControl="max-age=3600",
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Error uploading %s/%s: %s", bucket, key, e)
            raise StorageError("Failed to upload file", context={"bucket": bucket, "key": key}) from e
        logger.info("Uploaded %s/%s (%d bytes)", bucket, key, len(file_content))
        return key

    def delete_files(self, bucket: str, keys: List[str]) -> None:
        if not keys:
            return
        try:
            self.s3_client.delete_objects(
                Bucket=bucket,
                Delete={"Objects": [{"Key": key} for key in keys], "Quiet": True},
            )
        except (ClientError, BotoCoreError) as e:
            logger.error("Error deleting from %s: %s", bucket, e)
            raise StorageError("Failed to delete files", context={"bucket": bucket, "keys": keys}) from e

    def get_public_url(self, bucket: str, key: str) -> str:
        return settings.public_url(bucket, key)

    def _exists(self, bucket: str, key: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=bucket, Key=key)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                return False
            raise
        return True


@dataclass
class InMemoryStorage:
    """Storage double used in tests and local development without a bucket."""

    base_url: str = "https://storage.test/public"
    objects: Dict[Tuple[str, str], bytes] = field(default_factory=dict)

    def upload_file(self, bucket: str, key: str, file_content: bytes, content_type: str, upsert: bool = False) -> str:
        if not upsert and (bucket, key) in self.objects:
            raise StorageError("File already exists", context={"bucket": bucket, "key": key})
        self.objects[(bucket, key)] = file_content
        return key

    def delete_files(self, bucket: str, keys: List[str]) -> None:
        for key in keys:
            self.objects.pop((bucket, key), None)

    def get_public_url(self, bucket: str, key: str) -> str:
        return f"{self.base_url}/{bucket}/{key}"


@lru_cache(maxsize=1)
def get_storage() -> StorageClient:
    if not settings.STORAGE_ENDPOINT_URL and not settings.AWS_ACCESS_KEY_ID:
        logger.warning("No storage endpoint configured, keeping uploads in memory")
        return InMemoryStorage()
    return S3StorageService()


def unique_file_name(original_name: str, content_type: str) -> str:
    """``<ms timestamp>-<random>.<ext>``, extension taken from the sanitised original name."""
    safe_name = re.sub(r"[^a-zA-Z0-9.-]", "_", original_name or "")
    ext = safe_name.rsplit(".", 1)[-1].lower() if "." in safe_name else ""
    if not ext:
        ext = "mp4" if "video" in content_type else "jpg"
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=13))
    return f"{int(time.time() * 1000)}-{suffix}.{ext}"


def max_upload_size(bucket: str) -> int:
    return 50 * MB if bucket == BLOG_MEDIA else 5 * MB


def validate_upload(content_type: Optional[str], size: int, allowed_types, max_size: int, type_error: Optional[str] = None) -> str:
    """Check type and size, returning the normalised content type."""
    normalised = (content_type or "").lower()
    if normalised not in allowed_types:
        raise ValidationError(
            type_error or "Invalid file type. Only images (JPG, PNG, WebP, GIF) and videos (MP4, WebM, MOV, AVI) are allowed.",
            field="file",
        )
    if size > max_size:
        raise ValidationError(f"File too large. Maximum size is {max_size // MB}MB.", field="file")
    return normalised


def key_from_public_url(url: str, bucket: str) -> Optional[str]:
    """Recover the object key from a public URL in ``bucket``; None for foreign URLs."""
    marker = f"/{bucket}/"
    if not isinstance(url, str) or marker not in url:
        return None
    key = url.split(marker, 1)[1].split("?", 1)[0]
    return key or None
