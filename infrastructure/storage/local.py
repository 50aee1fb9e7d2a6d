"""Local-disk implementation of PhotoStorage.

Files are written to ``<upload_dir>/profile-photos`` and served by the
``/uploads`` static mount registered in create_app().
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from shared.generators import generate_photo_filename
from shared.logging import get_logger

log = get_logger(__name__)

PHOTO_SUBDIR = "profile-photos"
PUBLIC_PREFIX = "/uploads"


class LocalPhotoStorage:
    def __init__(self, upload_dir: str) -> None:
        self._dir = Path(upload_dir) / PHOTO_SUBDIR
        self._dir.mkdir(parents=True, exist_ok=True)
        self._url_prefix = f"{PUBLIC_PREFIX}/{PHOTO_SUBDIR}/"

    @property
    def directory(self) -> Path:
        return self._dir

    def _resolve(self, public_path: str) -> Path | None:
        # Only plain file names inside the photo directory are ever touched
        if not public_path or not public_path.startswith(self._url_prefix):
            return None
        name = os.path.basename(public_path)
        if not name or name in (".", ".."):
            return None
        return self._dir / name

    async def save(self, owner_id: str, original_filename: str, data: bytes) -> str:
        filename = generate_photo_filename(owner_id, original_filename)
        await asyncio.to_thread((self._dir / filename).write_bytes, data)
        log.info("photo_saved", owner_id=owner_id, filename=filename, size=len(data))
        return f"{self._url_prefix}{filename}"

    async def delete(self, public_path: str) -> bool:
        path = self._resolve(public_path)
        if path is None:
            log.warning("photo_delete_skipped", path=public_path, reason="outside_storage")
            return False
        try:
            await asyncio.to_thread(path.unlink)
        except FileNotFoundError:
            return False
        except OSError as e:
            log.error("photo_delete_failed", path=public_path, error=str(e))
            return False
        log.info("photo_deleted", path=public_path)
        return True
