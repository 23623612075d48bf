"""
Tests for StorageService key derivation and deletes (S3 client mocked).
"""
import pytest
from botocore.exceptions import ClientError

from app.core.exceptions import ExternalServiceError
from app.services.storage import StorageService


@pytest.fixture
def storage(mock_s3_client) -> StorageService:
    return StorageService(bucket="product-images", client=mock_s3_client)


class TestKeyFromUrl:

    def test_path_style_url(self, storage):
        url = "https://abc.supabase.co/storage/v1/object/public/product-images/rings/gold.jpg"
        assert storage.key_from_url(url) == "rings/gold.jpg"

    def test_virtual_hosted_url(self, storage):
        url = "https://product-images.s3.us-east-1.amazonaws.com/rings/gold.jpg"
        assert storage.key_from_url(url) == "rings/gold.jpg"

    def test_url_outside_bucket(self, storage):
        assert storage.key_from_url("https://elsewhere.example.com/img/a.jpg") is None

    def test_bucket_without_key(self, storage):
        assert storage.key_from_url("https://cdn.example.com/product-images/") is None

    def test_percent_encoded_segments(self, storage):
        url = "https://cdn.example.com/product-images/new%20in/a.jpg"
        assert storage.key_from_url(url) == "new in/a.jpg"

    def test_keys_skip_foreign_and_duplicate_urls(self, storage):
        keys = storage.keys_from_urls([
            "https://cdn.example.com/product-images/a.jpg",
            "https://cdn.example.com/product-images/a.jpg",
            "https://other.example.com/b.jpg",
        ])
        assert keys == ["a.jpg"]


@pytest.mark.asyncio
async def test_delete_images_batches_keys(storage, mock_s3_client):
    mock_s3_client.delete_objects.return_value = {"Deleted": [{"Key": "a.jpg"}, {"Key": "b.jpg"}]}

    deleted = await storage.delete_images([
        "https://cdn.example.com/product-images/a.jpg",
        "https://cdn.example.com/product-images/b.jpg",
    ])

    assert deleted == 2
    kwargs = mock_s3_client.delete_objects.call_args.kwargs
    assert kwargs["Bucket"] == "product-images"
    assert kwargs["Delete"]["Objects"] == [{"Key": "a.jpg"}, {"Key": "b.jpg"}]


@pytest.mark.asyncio
async def test_no_keys_means_no_call(storage, mock_s3_client):
    assert await storage.delete_images(["https://other.example.com/x.jpg"]) == 0
    mock_s3_client.delete_objects.assert_not_called()


@pytest.mark.asyncio
async def test_client_error_becomes_external_service_error(storage, mock_s3_client):
    mock_s3_client.delete_objects.side_effect = ClientError(
        {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "DeleteObjects"
    )

    with pytest.raises(ExternalServiceError) as exc_info:
        await storage.delete_objects(["a.jpg"])

    assert exc_info.value.details["keys"] == ["a.jpg"]


@pytest.mark.asyncio
async def test_per_key_errors_are_reported(storage, mock_s3_client):
    mock_s3_client.delete_objects.return_value = {
        "Deleted": [{"Key": "a.jpg"}],
        "Errors": [{"Key": "b.jpg", "Code": "AccessDenied"}],
    }

    with pytest.raises(ExternalServiceError) as exc_info:
        await storage.delete_objects(["a.jpg", "b.jpg"])

    assert exc_info.value.details["keys"] == ["b.jpg"]
