"""Object storage client for application attachments."""

import asyncio
import io
import logging
from dataclasses import dataclass

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader

from app.core.config import settings
from app.core.exceptions import StorageUploadError

logger = logging.getLogger(__name__)

# Upstream HTTP status behind each SDK error class
_ERROR_STATUS = {
    cloudinary.exceptions.BadRequest: 400,
    cloudinary.exceptions.AuthorizationRequired: 401,
    cloudinary.exceptions.NotAllowed: 403,
    cloudinary.exceptions.NotFound: 404,
    cloudinary.exceptions.AlreadyExists: 409,
    cloudinary.exceptions.RateLimited: 420,
    cloudinary.exceptions.GeneralError: 500,
}


@dataclass(frozen=True)
class DocumentUpload:
    """File received from the client, held in memory before upload."""

    filename: str
    content: bytes
    content_type: str | None = None

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class StoredFile:
    url: str
    public_id: str
    bytes: int


class FileStorageClient:
    """Uploads attachments to Cloudinary through its SDK."""

    def __init__(
        self,
        cloud_name: str | None = settings.storage_cloud_name,
        api_key: str | None = settings.storage_api_key,
        api_secret: str | None = settings.storage_api_secret,
    ):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        if self.configured:
            cloudinary.config(
                cloud_name=cloud_name, api_key=api_key, api_secret=api_secret, secure=True
            )

    @property
    def configured(self) -> bool:
        return bool(self.cloud_name and self.api_key and self.api_secret)

    async def upload(
        self,
        document: DocumentUpload,
        folder: str,
        resource_type: str = "raw",
    ) -> StoredFile:
        """Upload ``document`` into ``folder`` and return where it landed."""
        if not self.configured:
            raise StorageUploadError("file storage is not configured")

        stream = io.BytesIO(document.content)
        stream.name = document.filename

        # The SDK is blocking
        try:
            body = await asyncio.to_thread(
                cloudinary.uploader.upload,
                stream,
                folder=folder,
                resource_type=resource_type,
                use_filename=True,
                unique_filename=True,
            )
        except cloudinary.exceptions.Error as e:
            upstream_status = _ERROR_STATUS.get(type(e))
            logger.error(
                f"Upload of {document.filename} rejected ({upstream_status}): {e}"
            )
            raise StorageUploadError(str(e), upstream_status)

        logger.info(f"Uploaded {document.filename} to {folder} ({document.size} bytes)")
        return StoredFile(
            url=body["secure_url"],
            public_id=body["public_id"],
            bytes=body.get("bytes", document.size),
        )
