"""
Local file storage for profile pictures.

Files live under ``<upload_dir>/profiles/`` and are served by the static
mount at ``/uploads``; the stored path is relative to the upload dir.
"""

import logging
import uuid
from pathlib import Path
from typing import Optional, Tuple

import aiofiles

from app.core.config import get_settings
from app.core.exceptions import ValidationError

logger = logging.getLogger(__name__)
settings = get_settings()

AVATAR_SUBDIR = "profiles"


class StorageService:
    """Writes and removes uploaded files on local disk."""

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or settings.upload_dir)

    async def save_avatar(
        self,
        file_name: str,
        content_type: Optional[str],
        content: bytes,
    ) -> Tuple[str, str]:
        """
        Store an image under a fresh unique name.

        Returns:
            Tuple of (stored_name, relative_path)
        """
        if not content_type or not content_type.startswith("image/"):
            raise ValidationError("Invalid file type for profile picture", field="media")
        if not content:
            raise ValidationError("No file uploaded", field="media")
        if len(content) > settings.avatar_max_size_bytes:
            raise ValidationError(
                f"File too large. Maximum size: {settings.avatar_max_size_mb}MB",
                field="media",
            )

        stored_name = f"{uuid.uuid4()}{Path(file_name or '').suffix.lower()}"
        target_dir = self.base_dir / AVATAR_SUBDIR
        target_dir.mkdir(parents=True, exist_ok=True)

        async with aiofiles.open(target_dir / stored_name, "wb") as f:
            await f.write(content)

        logger.info(f"Stored avatar {stored_name} ({len(content) / 1024:.1f}KB)")
        return stored_name, f"/{AVATAR_SUBDIR}/{stored_name}"

    async def delete_file(self, relative_path: str) -> bool:
        """Remove a previously stored file. Missing files are not an error."""
        full_path = self.base_dir / relative_path.lstrip("/")
        try:
            if full_path.exists():
                full_path.unlink()
                logger.info(f"Deleted locally: {full_path}")
                return True
            return False
        except OSError as e:
            logger.error(f"Local delete failed: {e}")
            return False


# Singleton instance
_storage_service: Optional[StorageService] = None


def get_storage_service() -> StorageService:
    """Get or create the storage service singleton."""
    global _storage_service
    if _storage_service is None:
        _storage_service = StorageService()
    return _storage_service
