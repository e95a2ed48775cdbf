"""
S3 storage client module.

This module provides the blob store used for event media: it uploads a file
buffer under a logical folder and returns the public URL of the stored object.
"""

import logging
import mimetypes
import uuid
from typing import Optional

import boto3
from botocore.client import Config
from botocore.exceptions import ClientError, BotoCoreError

from core.config import Settings
from core.exceptions import UploadError

logger = logging.getLogger(__name__)

# Store-side hints for video objects; stores that ignore them keep the original
VIDEO_TRANSCODE_METADATA = {"transcode-format": "mp4", "quality": "auto"}


def get_s3_client(settings: Settings):
    """
    Create and return an S3 client.

    The client is created once per process and shared by every request;
    boto3 clients are safe for concurrent use from worker threads.

    Returns:
        boto3.client: Configured S3 client

    Raises:
        UploadError: If client creation fails
    """
    try:
        return boto3.client(
            's3',
            endpoint_url=settings.S3_ENDPOINT,
            aws_access_key_id=settings.S3_ACCESS_KEY,
            aws_secret_access_key=settings.S3_SECRET_KEY,
            region_name=settings.S3_REGION,
            config=Config(
                signature_version='s3v4',
                s3={
                    'payload_signing_enabled': False,
                    'addressing_style': 'path'
                }
            )
        )
    except Exception as e:
        logger.error(f"Failed to create S3 client: {e}")
        raise UploadError(details=f"Failed to create S3 client: {e}") from e


def resource_type_for(content_type: Optional[str]) -> str:
    """Classify an upload as 'video' or 'image' from its MIME type."""
    if content_type and content_type.startswith('video/'):
        return 'video'
    return 'image'


class S3BlobStore:
    """
    Blob store backed by an S3-compatible bucket.

    No retry is performed here; a failed upload raises UploadError and the
    caller decides whether the submission survives it.
    """

    def __init__(self, client, bucket: str, public_base_url: str, transcode_video: bool = True):
        self.client = client
        self.bucket = bucket
        self.public_base_url = public_base_url.rstrip('/')
        self.transcode_video = transcode_video

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3BlobStore":
        base_url = settings.S3_PUBLIC_BASE_URL or f"{settings.S3_ENDPOINT.rstrip('/')}/{settings.S3_BUCKET}"
        return cls(
            get_s3_client(settings),
            settings.S3_BUCKET,
            base_url,
            transcode_video=settings.S3_VIDEO_TRANSCODE
        )

    def build_key(self, folder: str, content_type: Optional[str], filename: Optional[str] = None) -> str:
        extension = None
        if filename and '.' in filename:
            extension = filename.rsplit('.', 1)[-1].lower()
        if not extension and content_type:
            guessed = mimetypes.guess_extension(content_type)
            extension = guessed.lstrip('.') if guessed else None
        name = uuid.uuid4().hex
        return f"{folder}/{name}.{extension}" if extension else f"{folder}/{name}"

    def upload(
        self,
        file_data: bytes,
        content_type: Optional[str],
        folder: str,
        filename: Optional[str] = None
    ) -> str:
        """
        Upload a file buffer to the bucket.

        Args:
            file_data: Binary payload
            content_type: Declared MIME type; selects image vs video handling
            folder: Logical folder, e.g. "event_photos"
            filename: Original filename, used only for the key extension

        Returns:
            str: Public URL of the uploaded object

        Raises:
            UploadError: If upload fails
            ValueError: If file_data is empty or folder is invalid
        """
        if not file_data:
            raise ValueError("file_data cannot be empty")

        if not folder or not folder.strip():
            raise ValueError("folder cannot be empty")

        resource_type = resource_type_for(content_type)
        metadata = {"resource-type": resource_type}
        if resource_type == 'video' and self.transcode_video:
            metadata.update(VIDEO_TRANSCODE_METADATA)

        object_name = self.build_key(folder, content_type, filename)

        try:
            self.client.put_object(
                Bucket=self.bucket,
                Key=object_name,
                Body=file_data,
                ContentType=content_type or 'application/octet-stream',
                Metadata=metadata
            )

            url = f"{self.public_base_url}/{object_name}"
            logger.info(f"Successfully uploaded {resource_type} to S3: {object_name}")
            return url

        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            error_message = e.response.get('Error', {}).get('Message', str(e))
            logger.error(f"S3 ClientError during upload: {error_code} - {error_message}")
            raise UploadError(details=f"Failed to upload {resource_type} to S3: {error_message}") from e

        except BotoCoreError as e:
            logger.error(f"BotoCoreError during upload: {e}")
            raise UploadError(details=f"Failed to upload {resource_type} to S3: {e}") from e

        except Exception as e:
            logger.error(f"Unexpected error during upload: {e}")
            raise UploadError(details=f"Failed to upload {resource_type} to S3: {e}") from e
