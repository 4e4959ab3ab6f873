# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Handles media upload and public URL operations with Supabase Storage.
#
# Buckets:
# - audio:  voice recordings       ({business_id}_{content_id}.{ext})
# - images: asset images           ({business_id}_{content_id}_{type}.{ext})
# - videos: uploaded source video  (written by the browser over TUS)
# =============================================================================

import logging
import re

from lib.supabase_client import SupabaseClient
from app.config import settings
from app.exceptions import StorageUploadError

logger = logging.getLogger(__name__)

# Storage bucket names
AUDIO_BUCKET = "audio"
IMAGES_BUCKET = "images"
VIDEOS_BUCKET = "videos"

_LOCAL_STORAGE_ORIGIN = re.compile(r"http://127\.0\.0\.1:543(21|23)")


def to_external_url(url: str) -> str:
    """
    Rewrite a local Supabase URL to SUPABASE_EXTERNAL_URL in development.

    Local stacks hand out http://127.0.0.1:54321/... URLs that the
    workflow engine cannot reach.
    """
    if (
        settings.is_development
        and settings.SUPABASE_EXTERNAL_URL
        and _LOCAL_STORAGE_ORIGIN.search(url)
    ):
        external = _LOCAL_STORAGE_ORIGIN.sub(settings.SUPABASE_EXTERNAL_URL.rstrip("/"), url)
        logger.debug(f"Converted local URL to external URL: {url} -> {external}")
        return external
    return url


class StorageService:
    """
    Service for Supabase Storage operations.

    Handles uploading media files and resolving their public URLs.
    """

    @staticmethod
    def upload_file(
        bucket: str,
        path: str,
        content: bytes,
        content_type: str,
        upsert: bool = True,
    ) -> str:
        """
        Upload raw file content to storage.

        Args:
            bucket: Bucket name
            path: Object path inside the bucket
            content: File bytes
            content_type: MIME type stored with the object
            upsert: Overwrite an existing object with the same path

        Returns:
            Storage path

        Raises:
            StorageUploadError: If upload fails
        """
        client = SupabaseClient.get_client()

        try:
            client.storage.from_(bucket).upload(
                path=path,
                file=content,
                file_options={
                    "content-type": content_type,
                    "upsert": "true" if upsert else "false",
                },
            )

            logger.info(f"Uploaded file to storage: {bucket}/{path} ({len(content)} bytes)")
            return path

        except Exception as e:
            logger.error(f"Storage upload failed: {e}")
            raise StorageUploadError(str(e), bucket=bucket)

    @staticmethod
    def get_public_url(bucket: str, path: str) -> str:
        """
        Get a public URL for a storage file.

        Local development URLs are rewritten so external services can
        fetch the file.
        """
        client = SupabaseClient.get_client()
        url = client.storage.from_(bucket).get_public_url(path)
        # Some client versions append an empty query string
        return to_external_url(url.rstrip("?"))
