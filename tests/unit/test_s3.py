"""
Unit tests for core/s3.py module.

Tests S3 client initialization, the blob store upload and its error handling.
"""

import pytest
from unittest.mock import patch, MagicMock
from botocore.exceptions import ClientError, BotoCoreError

from core.exceptions import UploadError
from core.s3 import get_s3_client, resource_type_for, S3BlobStore


@pytest.fixture
def s3_client():
    return MagicMock()


@pytest.fixture
def store(s3_client):
    return S3BlobStore(s3_client, "test_bucket", "https://cdn.test/test_bucket/")


class TestGetS3Client:
    """Test S3 client initialization."""

    @patch('core.s3.boto3.client')
    def test_get_s3_client_uses_correct_parameters(self, mock_boto_client, settings):
        """Test that get_s3_client uses correct configuration parameters."""
        mock_client = MagicMock()
        mock_boto_client.return_value = mock_client

        result = get_s3_client(settings)

        assert result == mock_client
        call_args = mock_boto_client.call_args
        assert call_args[0][0] == 's3'
        assert call_args[1]['endpoint_url'] == 'https://test.s3.com'
        assert call_args[1]['aws_access_key_id'] == 'test_access_key'
        assert 'config' in call_args[1]

    @patch('core.s3.boto3.client')
    def test_get_s3_client_raises_on_error(self, mock_boto_client, settings):
        """Test that get_s3_client raises UploadError on failure."""
        mock_boto_client.side_effect = Exception("Connection failed")

        with pytest.raises(UploadError) as exc_info:
            get_s3_client(settings)

        assert "Failed to create S3 client" in str(exc_info.value)

    @patch('core.s3.boto3.client')
    def test_from_settings_default_public_url(self, mock_boto_client, settings):
        store = S3BlobStore.from_settings(settings)

        assert store.bucket == 'test_bucket'
        assert store.public_base_url == 'https://test.s3.com/test_bucket'


class TestResourceType:

    @pytest.mark.parametrize("content_type,expected", [
        ("video/mp4", "video"),
        ("video/quicktime", "video"),
        ("image/jpeg", "image"),
        (None, "image"),
    ])
    def test_resource_type_for(self, content_type, expected):
        assert resource_type_for(content_type) == expected


class TestUpload:
    """Test blob upload functionality."""

    def test_upload_image_success(self, store, s3_client):
        """Test successful image upload."""
        url = store.upload(b"fake image data", "image/jpeg", "event_photos", "stage.JPG")

        s3_client.put_object.assert_called_once()
        call_args = s3_client.put_object.call_args[1]
        assert call_args['Bucket'] == 'test_bucket'
        assert call_args['Key'].startswith('event_photos/')
        assert call_args['Key'].endswith('.jpg')
        assert call_args['Body'] == b"fake image data"
        assert call_args['ContentType'] == 'image/jpeg'
        assert call_args['Metadata'] == {'resource-type': 'image'}
        assert url == f"https://cdn.test/test_bucket/{call_args['Key']}"

    def test_upload_video_requests_transcoding(self, store, s3_client):
        store.upload(b"fake video", "video/quicktime", "event_videos", "clip.mov")

        metadata = s3_client.put_object.call_args[1]['Metadata']
        assert metadata['resource-type'] == 'video'
        assert metadata['transcode-format'] == 'mp4'
        assert metadata['quality'] == 'auto'

    def test_upload_video_without_transcoding(self, s3_client):
        store = S3BlobStore(s3_client, "test_bucket", "https://cdn.test", transcode_video=False)

        store.upload(b"fake video", "video/mp4", "event_videos", "clip.mp4")

        assert s3_client.put_object.call_args[1]['Metadata'] == {'resource-type': 'video'}

    def test_upload_keys_are_unique(self, store, s3_client):
        store.upload(b"a", "image/png", "event_photos", "same.png")
        store.upload(b"b", "image/png", "event_photos", "same.png")

        keys = [call[1]['Key'] for call in s3_client.put_object.call_args_list]
        assert keys[0] != keys[1]

    def test_upload_extension_from_content_type(self, store, s3_client):
        store.upload(b"data", "image/png", "event_photos", None)

        assert s3_client.put_object.call_args[1]['Key'].endswith('.png')

    def test_upload_empty_data_raises_error(self, store):
        """Test that upload raises ValueError for empty data."""
        with pytest.raises(ValueError) as exc_info:
            store.upload(b"", "image/jpeg", "event_photos")

        assert "file_data cannot be empty" in str(exc_info.value)

    def test_upload_whitespace_folder_raises_error(self, store):
        with pytest.raises(ValueError) as exc_info:
            store.upload(b"data", "image/jpeg", "   ")

        assert "folder cannot be empty" in str(exc_info.value)

    def test_upload_client_error(self, store, s3_client):
        """Test that upload raises UploadError on ClientError."""
        error_response = {
            'Error': {
                'Code': 'AccessDenied',
                'Message': 'Access denied'
            }
        }
        s3_client.put_object.side_effect = ClientError(error_response, 'PutObject')

        with pytest.raises(UploadError) as exc_info:
            store.upload(b"data", "image/jpeg", "event_photos", "a.jpg")

        assert "Access denied" in str(exc_info.value)

    def test_upload_botocore_error(self, store, s3_client):
        """Test that upload raises UploadError on BotoCoreError."""
        s3_client.put_object.side_effect = BotoCoreError()

        with pytest.raises(UploadError):
            store.upload(b"data", "image/jpeg", "event_photos", "a.jpg")

    def test_upload_unexpected_error(self, store, s3_client):
        """Test that upload raises UploadError on unexpected error."""
        s3_client.put_object.side_effect = Exception("Unexpected error")

        with pytest.raises(UploadError):
            store.upload(b"data", "video/mp4", "event_videos", "a.mp4")
