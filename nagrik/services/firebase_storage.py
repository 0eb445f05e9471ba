"""Firebase Storage service for complaint media"""

import asyncio
import logging
import time
import uuid
from typing import Optional

from nagrik.core.config import settings
from nagrik.core.exceptions import MediaUploadFailed

logger = logging.getLogger(__name__)


def build_blob_name(filename: str, folder: str = "") -> str:
    """Unique, timestamp-derived object name that keeps the file extension"""
    ext = filename.rsplit(".", 1)[-1].lower() if "." in filename else "bin"
    unique_name = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}.{ext}"
    return f"{folder}/{unique_name}" if folder else unique_name


class FirebaseStorageService:
    """Service for handling media uploads to Firebase Storage"""

    def __init__(self):
        """Initialize Firebase Storage service"""
        self.bucket_name = settings.FIREBASE_STORAGE_BUCKET
        self.credentials_path = settings.FIREBASE_CREDENTIALS_PATH
        self.bucket = None
        self._initialized = False

        # Only initialize if credentials are configured
        if self.credentials_path and self.bucket_name:
            self._initialize_firebase()

    def _initialize_firebase(self):
        """Initialize Firebase Admin SDK"""
        try:
            import firebase_admin
            from firebase_admin import credentials, storage

            if not firebase_admin._apps:
                cred = credentials.Certificate(self.credentials_path)
                firebase_admin.initialize_app(cred, {
                    'storageBucket': self.bucket_name
                })

            self.bucket = storage.bucket()
            self._initialized = True
        except Exception as e:
            logger.warning("Firebase initialization failed, using placeholder URLs: %s", e)
            self._initialized = False

    def is_available(self) -> bool:
        """Check if Firebase storage is available"""
        return self._initialized and self.bucket is not None

    def _upload_blocking(self, name: str, data: bytes, content_type: str) -> str:
        blob = self.bucket.blob(name)
        blob.upload_from_string(data, content_type=content_type)

        # Make the file publicly accessible
        blob.make_public()
        return blob.public_url

    async def put(self, name: str, data: bytes, content_type: str) -> str:
        """
        Store bytes under a unique name and return their public URL.

        Raises:
            MediaUploadFailed: the upload did not complete
        """
        # Without Firebase configured, hand back a placeholder URL (local development)
        if not self.is_available():
            logger.warning("Firebase storage not configured; returning placeholder URL for %s", name)
            return f"https://storage.example.com/{name}"

        try:
            return await asyncio.to_thread(self._upload_blocking, name, data, content_type)
        except Exception as e:
            logger.exception("Upload of %s failed", name)
            raise MediaUploadFailed(f"Failed to upload media: {e}") from e


# Singleton instance
_storage_service: Optional[FirebaseStorageService] = None


def get_storage_service() -> FirebaseStorageService:
    """Get or create storage service singleton"""
    global _storage_service
    if _storage_service is None:
        _storage_service = FirebaseStorageService()
    return _storage_service
