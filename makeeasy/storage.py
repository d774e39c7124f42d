import mimetypes
import os
import secrets
from pathlib import Path

from fastapi import UploadFile
from loguru import logger

IMAGE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}
DOCUMENT_TYPES = IMAGE_TYPES | {"application/pdf"}
MAX_UPLOAD_BYTES = 5 * 1024 * 1024


class InvalidUpload(ValueError):
    pass


class FileStore:
    """
    Local disk store for uploads. Files land in `<root>/<folder>/` under a
    random name and are served from `/uploads/<folder>/<name>`.
    """

    def __init__(self, root: str | Path, url_prefix: str = "/uploads"):
        self.root = Path(root)
        self.url_prefix = url_prefix

    async def save(
        self, file: UploadFile, folder: str, allowed: set[str] = IMAGE_TYPES
    ) -> str:
        _, ext = os.path.splitext(file.filename or "")
        mime_type = file.content_type or mimetypes.guess_type(file.filename or "")[0]
        if mime_type not in allowed:
            raise InvalidUpload(f"File type not allowed: {file.filename}")

        content = await file.read()
        if len(content) > MAX_UPLOAD_BYTES:
            raise InvalidUpload(f"File too large: {file.filename}")

        target_dir = self.root / folder
        target_dir.mkdir(parents=True, exist_ok=True)
        name = f"{secrets.token_hex(16)}{ext.lower()}"
        (target_dir / name).write_bytes(content)
        return f"{self.url_prefix}/{folder}/{name}"

    def remove(self, url: str) -> None:
        """Best-effort delete of a file previously returned by save()."""
        if not url.startswith(self.url_prefix + "/"):
            return
        path = self.root / url.removeprefix(self.url_prefix + "/")
        try:
            path.unlink(missing_ok=True)
        except OSError:
            logger.warning("Could not remove upload {}", path, exc_info=True)
