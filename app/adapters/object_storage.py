"""
Object storage for media attachments.

Uploads go through an image pipeline (Pillow): oversized images are scaled
down to fit the configured bounds and re-encoded as JPEG, and a square
thumbnail is stored next to the original.
"""

from __future__ import annotations

import io
import logging
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional
from urllib.parse import urlparse

import boto3
from botocore.exceptions import BotoCoreError, ClientError
from PIL import Image, ImageOps, UnidentifiedImageError

from app.config import Settings
from app.exceptions import TransportError, ValidationError
from app.schemas.media import StoredObject

logger = logging.getLogger(__name__)

STORED_CONTENT_TYPE = "image/jpeg"


@dataclass(frozen=True)
class ImageOptions:
    max_width: int = 1920
    max_height: int = 1080
    thumbnail_size: int = 300
    quality: int = 85
    thumbnail_quality: int = 80


@dataclass(frozen=True)
class ProcessedImage:
    data: bytes
    thumbnail: bytes
    width: int
    height: int


def process_image(data: bytes, options: ImageOptions) -> ProcessedImage:
    """
    Decode, bound and re-encode an image as JPEG, and render its thumbnail.

    width/height are the dimensions of the uploaded image, before scaling.
    Raises ValidationError if the bytes are not a decodable image.
    """
    try:
        image = Image.open(io.BytesIO(data))
        image = ImageOps.exif_transpose(image)
        image = image.convert("RGB")
    except (UnidentifiedImageError, OSError) as e:
        raise ValidationError("File is not a readable image") from e

    width, height = image.size
    if width > options.max_width or height > options.max_height:
        image = ImageOps.contain(image, (options.max_width, options.max_height))

    main = io.BytesIO()
    image.save(main, format="JPEG", quality=options.quality)

    thumb_image = ImageOps.fit(image, (options.thumbnail_size, options.thumbnail_size))
    thumb = io.BytesIO()
    thumb_image.save(thumb, format="JPEG", quality=options.thumbnail_quality)

    return ProcessedImage(
        data=main.getvalue(), thumbnail=thumb.getvalue(), width=width, height=height
    )


class BaseObjectStorage(ABC):
    """Contract for media storage backends."""

    @abstractmethod
    def upload(self, owner: str, file_name: str, data: bytes) -> StoredObject:
        """Store an image and its thumbnail. Raise TransportError if the backend fails."""
        ...

    @abstractmethod
    def download(self, url: str) -> bytes:
        """Fetch stored bytes. Raise TransportError if the backend fails."""
        ...

    @abstractmethod
    def delete(self, url: str) -> bool:
        """Delete a stored object. Return False if it could not be deleted."""
        ...


class UnconfiguredObjectStorage(BaseObjectStorage):
    """Stand-in when no bucket is configured."""

    def upload(self, owner: str, file_name: str, data: bytes) -> StoredObject:
        raise TransportError("Media storage is not configured")

    def download(self, url: str) -> bytes:
        raise TransportError("Media storage is not configured")

    def delete(self, url: str) -> bool:
        return False


class S3ObjectStorage(BaseObjectStorage):
    """S3 (or S3-compatible) bucket. Objects are keyed `{owner}/{uuid}.jpg`."""

    def __init__(
        self,
        bucket: str,
        region: str = "us-east-1",
        endpoint_url: Optional[str] = None,
        public_base_url: Optional[str] = None,
        options: Optional[ImageOptions] = None,
        client: Any = None,
    ) -> None:
        self.bucket = bucket
        self.region = region
        self.endpoint_url = endpoint_url
        self.public_base_url = (
            public_base_url or f"https://{bucket}.s3.{region}.amazonaws.com"
        ).rstrip("/")
        self.options = options or ImageOptions()
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3ObjectStorage":
        return cls(
            bucket=settings.s3_bucket,
            region=settings.s3_region,
            endpoint_url=settings.s3_endpoint_url,
            public_base_url=settings.s3_public_base_url,
            options=ImageOptions(
                max_width=settings.media_max_width,
                max_height=settings.media_max_height,
                thumbnail_size=settings.media_thumbnail_size,
                quality=settings.media_jpeg_quality,
                thumbnail_quality=settings.media_thumbnail_quality,
            ),
        )

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = boto3.client(
                "s3", region_name=self.region, endpoint_url=self.endpoint_url
            )
        return self._client

    def url_for(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def key_for(self, url: str) -> str:
        prefix = f"{self.public_base_url}/"
        if url.startswith(prefix):
            return url[len(prefix) :]
        return urlparse(url).path.lstrip("/")

    def _put(self, key: str, body: bytes) -> None:
        self._get_client().put_object(
            Bucket=self.bucket, Key=key, Body=body, ContentType=STORED_CONTENT_TYPE
        )

    def upload(self, owner: str, file_name: str, data: bytes) -> StoredObject:
        processed = process_image(data, self.options)
        object_id = uuid.uuid4().hex
        key = f"{owner}/{object_id}.jpg"
        thumbnail_key = f"{owner}/thumbnails/{object_id}_thumb.jpg"
        try:
            self._put(key, processed.data)
            self._put(thumbnail_key, processed.thumbnail)
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 upload failed for %s (%s): %s", owner, file_name, e)
            raise TransportError("Media upload failed") from e
        logger.info("Stored %s for %s as %s", file_name, owner, key)
        return StoredObject(
            storage_url=self.url_for(key),
            thumbnail_url=self.url_for(thumbnail_key),
            size_bytes=len(processed.data),
            content_type=STORED_CONTENT_TYPE,
            width=processed.width,
            height=processed.height,
        )

    def download(self, url: str) -> bytes:
        try:
            response = self._get_client().get_object(
                Bucket=self.bucket, Key=self.key_for(url)
            )
            return response["Body"].read()
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 download failed for %s: %s", url, e)
            raise TransportError("Media download failed") from e

    def delete(self, url: str) -> bool:
        try:
            self._get_client().delete_object(Bucket=self.bucket, Key=self.key_for(url))
        except (BotoCoreError, ClientError) as e:
            logger.error("S3 delete failed for %s: %s", url, e)
            return False
        return True
