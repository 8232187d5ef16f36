# =============================================================================
# core/services/storage_service.py - Supabase Storage Gateway
# =============================================================================
# Signed-URL operations against one Supabase Storage bucket.
# Implements lib.store.StorageGateway.
#
# The service never moves bytes itself: clients upload straight to the
# signed upload URL and download from signed read URLs.
# =============================================================================

import logging

from supabase import Client

from app.config import Settings
from app.exceptions import StorageGatewayError
from lib.store import SignedUpload

logger = logging.getLogger(__name__)


class StorageService:
    """
    Service for Supabase Storage operations.

    Every failure (including client timeouts) is raised as
    StorageGatewayError so callers can decide whether to degrade.
    """

    def __init__(self, client: Client, settings: Settings):
        self.client = client
        self.bucket = settings.STORAGE_BUCKET

    def _bucket(self):
        return self.client.storage.from_(self.bucket)

    def ping(self) -> None:
        """Check that the bucket is reachable."""
        try:
            self.client.storage.get_bucket(self.bucket)
        except Exception as e:
            logger.error(f"Storage bucket check failed: {e}")
            raise StorageGatewayError("ping", self.bucket, str(e)) from e

    def create_signed_upload_url(self, path: str, content_type: str, ttl_seconds: int) -> SignedUpload:
        """
        Create a signed URL the client can upload one object to.

        Supabase fixes the lifetime of upload URLs server-side, so
        `ttl_seconds` is only reported back to the caller.
        """
        try:
            result = self._bucket().create_signed_upload_url(path)
        except Exception as e:
            logger.error(f"Signed upload URL failed for {path}: {e}")
            raise StorageGatewayError("create_signed_upload_url", path, str(e)) from e

        url = result.get("signed_url") or result.get("signedUrl")
        if not url:
            raise StorageGatewayError("create_signed_upload_url", path, "response carried no URL")

        logger.debug(f"Issued upload URL for {path} ({content_type})")
        return SignedUpload(url=url, path=result.get("path") or path, token=result.get("token"))

    def create_signed_download_url(self, path: str, ttl_seconds: int) -> str:
        """Create a fresh read URL. Never cached."""
        try:
            result = self._bucket().create_signed_url(path, ttl_seconds)
        except Exception as e:
            logger.error(f"Signed download URL failed for {path}: {e}")
            raise StorageGatewayError("create_signed_download_url", path, str(e)) from e

        url = result.get("signedURL") or result.get("signedUrl")
        if not url:
            raise StorageGatewayError("create_signed_download_url", path, "response carried no URL")
        return url

    def delete(self, path: str) -> None:
        """Delete one object from the bucket."""
        try:
            self._bucket().remove([path])
            logger.info(f"Deleted file from storage: {path}")
        except Exception as e:
            logger.error(f"Failed to delete file {path}: {e}")
            raise StorageGatewayError("delete", path, str(e)) from e
