"""
Blob Store - opaque storage for uploaded document bytes.

Files are written under ``settings.UPLOAD_DIR`` with a random name that keeps
the original extension. Only the returned path is stored in the database.
"""

import uuid
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os

from vital_registry.core.config import settings
from vital_registry.core.logging_config import logger


class BlobStore:
    """Local directory blob store"""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir) if base_dir else settings.UPLOAD_DIR
        self.base_dir.mkdir(parents=True, exist_ok=True)

    async def save(self, data: bytes, original_name: Optional[str] = None) -> str:
        suffix = Path(original_name or "").suffix.lower()
        path = self.base_dir / f"document-{uuid.uuid4().hex}{suffix}"
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)
        logger.debug(f"Stored blob {path.name} ({len(data)} bytes)")
        return str(path)

    async def read(self, path: str) -> bytes:
        async with aiofiles.open(path, "rb") as f:
            return await f.read()

    async def delete(self, path: str) -> bool:
        try:
            await aiofiles.os.remove(path)
            return True
        except FileNotFoundError:
            return False


blob_store = BlobStore()
