"""Tests for the image pipeline and S3 object storage."""

import io
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError
from PIL import Image

from app.adapters.object_storage import (
    ImageOptions,
    S3ObjectStorage,
    UnconfiguredObjectStorage,
    process_image,
)
from app.adapters.registry import (
    UnconfiguredCarrierAdapter,
    build_carrier_adapter,
    build_object_storage,
)
from app.adapters.twilio import TwilioAdapter
from app.config import get_settings
from app.exceptions import TransportError, ValidationError
from app.schemas.carrier import OutboundMessage


def image_bytes(size=(800, 600), fmt="PNG", mode="RGB"):
    buffer = io.BytesIO()
    Image.new(mode, size, color="red").save(buffer, format=fmt)
    return buffer.getvalue()


def client_error(operation):
    return ClientError({"Error": {"Code": "500", "Message": "boom"}}, operation)


def test_process_image_scales_down_and_keeps_original_dimensions():
    options = ImageOptions(max_width=400, max_height=400, thumbnail_size=100)
    processed = process_image(image_bytes((1600, 800)), options)

    assert (processed.width, processed.height) == (1600, 800)
    stored = Image.open(io.BytesIO(processed.data))
    assert stored.format == "JPEG"
    assert stored.size == (400, 200)
    assert Image.open(io.BytesIO(processed.thumbnail)).size == (100, 100)


def test_process_image_keeps_small_images_unscaled():
    processed = process_image(image_bytes((120, 80), mode="RGBA"), ImageOptions())
    assert Image.open(io.BytesIO(processed.data)).size == (120, 80)


def test_process_image_rejects_garbage():
    with pytest.raises(ValidationError):
        process_image(b"not an image", ImageOptions())


def test_s3_upload_stores_image_and_thumbnail():
    client = MagicMock()
    storage = S3ObjectStorage(
        bucket="media",
        public_base_url="https://cdn.example.com",
        options=ImageOptions(thumbnail_size=50),
        client=client,
    )

    stored = storage.upload("user-1", "cat.png", image_bytes())

    assert client.put_object.call_count == 2
    keys = [call.kwargs["Key"] for call in client.put_object.call_args_list]
    assert keys[0].startswith("user-1/") and keys[0].endswith(".jpg")
    assert keys[1].startswith("user-1/thumbnails/") and keys[1].endswith("_thumb.jpg")
    assert stored.storage_url == f"https://cdn.example.com/{keys[0]}"
    assert stored.thumbnail_url == f"https://cdn.example.com/{keys[1]}"
    assert stored.content_type == "image/jpeg"
    assert (stored.width, stored.height) == (800, 600)


def test_s3_upload_failure_is_transport_error():
    client = MagicMock()
    client.put_object.side_effect = client_error("PutObject")
    storage = S3ObjectStorage(bucket="media", client=client)

    with pytest.raises(TransportError):
        storage.upload("user-1", "cat.png", image_bytes())


def test_s3_download_and_delete_resolve_keys_from_urls():
    client = MagicMock()
    client.get_object.return_value = {"Body": io.BytesIO(b"jpeg")}
    storage = S3ObjectStorage(
        bucket="media", public_base_url="https://cdn.example.com", client=client
    )

    assert storage.download("https://cdn.example.com/u/a.jpg") == b"jpeg"
    client.get_object.assert_called_once_with(Bucket="media", Key="u/a.jpg")
    assert storage.delete("https://cdn.example.com/u/a.jpg")
    client.delete_object.assert_called_once_with(Bucket="media", Key="u/a.jpg")


def test_s3_delete_failure_returns_false():
    client = MagicMock()
    client.delete_object.side_effect = client_error("DeleteObject")
    storage = S3ObjectStorage(bucket="media", client=client)
    assert storage.delete("https://media.s3.us-east-1.amazonaws.com/u/a.jpg") is False


def test_unconfigured_storage_refuses():
    storage = UnconfiguredObjectStorage()
    with pytest.raises(TransportError):
        storage.upload("u", "a.png", b"x")
    assert storage.delete("anything") is False


def test_registry_picks_backends_from_settings():
    settings = get_settings()
    assert isinstance(build_carrier_adapter(settings), UnconfiguredCarrierAdapter)
    assert isinstance(build_object_storage(settings), UnconfiguredObjectStorage)

    configured = settings.model_copy(
        update={
            "carrier_enabled": True,
            "twilio_account_sid": "AC1",
            "twilio_auth_token": "token",
            "s3_bucket": "media",
        }
    )
    assert isinstance(build_carrier_adapter(configured), TwilioAdapter)
    assert isinstance(build_object_storage(configured), S3ObjectStorage)


@pytest.mark.asyncio
async def test_unconfigured_carrier_rejects_sends():
    result = await UnconfiguredCarrierAdapter().send(OutboundMessage(to_address="+1"))
    assert not result.success
