"""Local-disk document store.

Uploaded documents are written under settings.upload_dir and served
from settings.public_upload_base_url (main.py mounts the directory as
static files).  Each upload gets a fresh file name, so replacing a
document never overwrites the previous version on disk.

Layout:
  <upload_dir>/<prefix>/<slug>/<uuid><ext>
"""

import asyncio
import logging
import re
import uuid
from pathlib import Path, PurePath

from firecert.config import settings
from firecert.wizard.slots import StagedFile

logger = logging.getLogger(__name__)

_SAFE_SEGMENT = re.compile(r"[^A-Za-z0-9_-]")


def _safe(segment: str) -> str:
    return _SAFE_SEGMENT.sub("_", segment) or "_"


class LocalDocumentStore:
    def __init__(self, root: str | Path, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def _target(self, slug: str, filename: str, prefix: str | None) -> PurePath:
        parts = [_safe(p) for p in (prefix or "").split("/") if p]
        suffix = PurePath(filename).suffix.lower()
        if not re.fullmatch(r"\.[a-z0-9]{1,10}", suffix):
            suffix = ""
        return PurePath(*parts, _safe(slug), f"{uuid.uuid4().hex}{suffix}")

    def _write(self, relative: PurePath, content: bytes) -> None:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)

    async def upload_document(
        self, slug: str, staged: StagedFile, *, prefix: str | None = None,
    ) -> str:
        relative = self._target(slug, staged.filename, prefix)
        await asyncio.to_thread(self._write, relative, staged.content)
        url = f"{self.base_url}/{relative.as_posix()}"
        logger.info(
            f"Stored {slug} ({staged.size_bytes} bytes)",
            extra={"slug": slug, "url": url, "mime_type": staged.mime_type},
        )
        return url


def get_document_store() -> LocalDocumentStore:
    """FastAPI dependency; overridden in tests."""
    return LocalDocumentStore(settings.upload_dir, settings.public_upload_base_url)
