import logging
import uuid
from pathlib import Path

from fastapi import UploadFile

logger = logging.getLogger(__name__)


class UploadService:
    def __init__(self, uploads_dir: str):
        self.uploads_dir = Path(uploads_dir)

    async def save(self, file: UploadFile) -> str:
        """Store an upload under a fresh uuid name, keeping its extension."""
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        extension = Path(file.filename or "").suffix.lower() or ".png"
        path = self.uploads_dir / f"{uuid.uuid4().hex}{extension}"

        content = await file.read()
        with open(path, "xb") as f:
            f.write(content)

        logger.info(f"💾 Saved upload {file.filename} to {path}")
        return str(path)


__all__ = ["UploadService"]
