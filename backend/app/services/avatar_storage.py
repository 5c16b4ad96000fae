"""
Avatar Storage - profile pictures on the local filesystem

Files live in <UPLOAD_PATH>/avatars/ and are served by the app under
/uploads/avatars/<filename>. The URL stored on the profile is that path.
"""

import time
import secrets
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from app.core.config import settings
from app.core.exceptions import InvalidFileTypeError, FileTooLargeError, ValidationError, StorageError
from app.core.logging_config import logger


AVATAR_URL_PREFIX = "/uploads/avatars/"

# Extension used when the upload has none
EXTENSIONS_BY_TYPE = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/webp": ".webp",
    "image/gif": ".gif",
}


class AvatarStorage:
    """Validates, writes and removes avatar files"""

    def __init__(self, base_dir: Optional[Path] = None):
        self._base_dir = base_dir

    @property
    def base_dir(self) -> Path:
        return self._base_dir or settings.AVATAR_DIR

    def validate(self, content_type: Optional[str], size: int) -> None:
        """Reject unsupported types and oversized files"""
        allowed = settings.ALLOWED_AVATAR_TYPES
        if not content_type or content_type not in allowed:
            raise InvalidFileTypeError(content_type or "unknown", allowed)
        if size == 0:
            raise ValidationError("No file uploaded", field="avatar")
        if size > settings.MAX_AVATAR_SIZE:
            raise FileTooLargeError(size, settings.MAX_AVATAR_SIZE)

    def build_filename(self, profile_id: str, original_name: Optional[str], content_type: str) -> str:
        """avatar-<profile>-<millis>-<random><ext>"""
        suffix = Path(original_name or "").suffix.lower()
        if not suffix or len(suffix) > 6:
            suffix = EXTENSIONS_BY_TYPE.get(content_type, "")
        safe_profile = "".join(c for c in profile_id if c.isalnum() or c in "-_") or "profile"
        return f"avatar-{safe_profile}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{suffix}"

    async def save(self, profile_id: str, original_name: Optional[str],
                   content_type: str, content: bytes) -> str:
        """Write the file and return its public URL"""
        self.validate(content_type, len(content))

        filename = self.build_filename(profile_id, original_name, content_type)
        path = self.base_dir / filename
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error(f"[Avatar] Failed to write {path}: {e}")
            raise StorageError("Failed to store avatar")

        logger.info(f"[Avatar] Stored {filename} for profile {profile_id} ({len(content)} bytes)")
        return f"{AVATAR_URL_PREFIX}{filename}"

    def path_for_url(self, url: Optional[str]) -> Optional[Path]:
        """Map a stored avatar URL back to its file, ignoring foreign URLs"""
        if not url or not url.startswith(AVATAR_URL_PREFIX):
            return None
        name = url[len(AVATAR_URL_PREFIX):]
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            return None
        return self.base_dir / name

    async def delete(self, url: Optional[str]) -> bool:
        """Remove the file behind a stored URL. Missing files are not an error."""
        path = self.path_for_url(url)
        if path is None:
            return False
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"[Avatar] Could not delete {path}: {e}")
            return False
        logger.info(f"[Avatar] Deleted {path.name}")
        return True


# Singleton instance
avatar_storage = AvatarStorage()
