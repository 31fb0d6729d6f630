"""
Photo storage.

Stores uploaded pickup/return/equipment photos below a local directory
that the application serves back as static files. Uploading to an
existing path replaces the file.
"""

import asyncio
import logging
import re
import time
from pathlib import Path

from equiptrack.exceptions import BackendError, ValidationError

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def safe_filename(filename: str) -> str:
    """Reduce a client-supplied filename to a safe single path segment."""
    name = Path(filename or "").name
    name = _UNSAFE_CHARS.sub("-", name).strip("-.")
    return name or "photo"


def photo_path(folder: str, owner_id: str, filename: str) -> str:
    """Build a storage path such as ``movements/<id>/<millis>-<name>``."""
    millis = int(time.time() * 1000)
    return f"{folder}/{safe_filename(owner_id)}/{millis}-{safe_filename(filename)}"


class PhotoStore:
    """Writes photo bytes to disk and returns their public URL."""

    def __init__(self, root: str | Path, url_prefix: str = "/uploads"):
        self.root = Path(root)
        self.url_prefix = url_prefix.rstrip("/")

    def _resolve(self, path: str) -> Path:
        cleaned = (path or "").strip().lstrip("/")
        if not cleaned:
            raise ValidationError("Upload path is required", fields=["path"])

        root = self.root.resolve()
        target = (root / cleaned).resolve()
        if target == root or not target.is_relative_to(root):
            raise ValidationError(f"Invalid upload path '{path}'", fields=["path"])
        return target

    def public_url(self, path: str) -> str:
        relative = self._resolve(path).relative_to(self.root.resolve())
        return f"{self.url_prefix}/{relative.as_posix()}"

    @staticmethod
    def _write(target: Path, data: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

    async def upload_file(self, data: bytes, path: str) -> str:
        """Store ``data`` at ``path`` and return the URL it is served from."""
        if not data:
            raise ValidationError("Empty file", fields=["file"])

        target = self._resolve(path)
        try:
            await asyncio.to_thread(self._write, target, data)
        except OSError as exc:
            logger.exception("Failed to store upload at %s", target)
            raise BackendError("Photo upload failed", detail=str(exc)) from exc

        logger.info("Stored upload %s (%d bytes)", target, len(data))
        return self.public_url(path)
