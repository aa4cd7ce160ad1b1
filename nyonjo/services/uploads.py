import logging
import time
from typing import Any, Dict, Optional

from nyonjo.core.exceptions import ValidationError
from nyonjo.services.storage import (
    BUCKETS,
    LOGO_TYPES,
    LOGOS,
    MB,
    MEDIA_TYPES,
    PRODUCT_IMAGES,
    SISTERHOOD_MEDIA,
    StorageClient,
    max_upload_size,
    unique_file_name,
    validate_upload,
)

logger = logging.getLogger(__name__)


class UploadService:
    """Validates uploaded media and passes it through to a storage bucket."""

    def __init__(self, storage: StorageClient):
        self.storage = storage

    def upload_media(self, content: bytes, file_name: str, content_type: Optional[str],
                     bucket: Optional[str] = None) -> Dict[str, Any]:
        bucket = bucket or PRODUCT_IMAGES
        if bucket not in BUCKETS:
            raise ValidationError(f"Unknown bucket '{bucket}'", field="bucket")
        content_type = validate_upload(content_type, len(content), MEDIA_TYPES, max_upload_size(bucket))

        key = unique_file_name(file_name, content_type)
        self.storage.upload_file(bucket, key, content, content_type)
        return {
            "success": True,
            "fileName": key,
            "url": self.storage.get_public_url(bucket, key),
            "bucket": bucket,
            "type": "video" if "video" in content_type else "image",
            "message": "File uploaded successfully",
        }

    def upload_sisterhood_media(self, content: bytes, file_name: str, content_type: Optional[str]) -> Dict[str, str]:
        content_type = validate_upload(content_type, len(content), MEDIA_TYPES, 50 * MB)
        key = f"sisterhood/{unique_file_name(file_name, content_type)}"
        self.storage.upload_file(SISTERHOOD_MEDIA, key, content, content_type)
        return {"url": self.storage.get_public_url(SISTERHOOD_MEDIA, key)}

    def upload_logo(self, content: bytes, file_name: str, content_type: Optional[str]) -> str:
        """Store a new logo image and return its public URL."""
        content_type = validate_upload(
            content_type,
            len(content),
            LOGO_TYPES,
            5 * MB,
            type_error="Invalid file type. Use JPEG, PNG, WebP or SVG",
        )
        ext = file_name.rsplit(".", 1)[-1].lower() if file_name and "." in file_name else "png"
        key = f"logo-{int(time.time() * 1000)}.{ext}"
        self.storage.upload_file(LOGOS, key, content, content_type, upsert=True)
        logger.info("Uploaded new site logo %s", key)
        return self.storage.get_public_url(LOGOS, key)
