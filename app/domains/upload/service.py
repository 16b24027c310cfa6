"""Signed uploads stored on the local filesystem."""

import asyncio
import logging
import re
import uuid
from collections.abc import AsyncIterator
from pathlib import Path
from urllib.parse import urlencode

from app.core.config import settings
from app.core.security import sanitize_filename, sign_upload, verify_upload_signature
from app.exceptions.upload import (
    InvalidUploadParamsError,
    InvalidUploadSignatureError,
    UploadTooLargeError,
)
from app.schemas.upload import UploadResponse, UploadSignResponse

logger = logging.getLogger(__name__)

UPLOAD_URL_PATH = "/api/uploads/put"
PUBLIC_URL_PREFIX = "/uploads"

_UPLOAD_ID = re.compile(r"^[0-9a-f]{8}$")


class UploadService:
    def __init__(self, upload_dir: str | None = None, max_size: int | None = None):
        self.upload_dir = Path(upload_dir or settings.upload_dir)
        self.max_size = max_size or settings.max_file_size

    def sign(self, filename: str) -> UploadSignResponse:
        """Issue an upload id, signature and the URLs for one file."""
        safe_name = sanitize_filename(filename)
        upload_id = uuid.uuid4().hex[:8]
        signature = sign_upload(upload_id, safe_name)
        query = urlencode({"id": upload_id, "filename": safe_name, "signature": signature})
        return UploadSignResponse(
            id=upload_id,
            filename=safe_name,
            signature=signature,
            upload_url=f"{UPLOAD_URL_PATH}?{query}",
            file_url=f"{PUBLIC_URL_PREFIX}/{upload_id}-{safe_name}",
        )

    def verify(self, upload_id: str | None, filename: str | None, signature: str | None) -> None:
        """Check the PUT parameters before reading the body."""
        if not upload_id or not filename or not signature:
            raise InvalidUploadParamsError()
        if not _UPLOAD_ID.match(upload_id) or sanitize_filename(filename) != filename:
            raise InvalidUploadParamsError()
        if not verify_upload_signature(upload_id, filename, signature):
            raise InvalidUploadSignatureError()

    async def read_body(self, chunks: AsyncIterator[bytes]) -> bytes:
        """Collect a streamed body, stopping as soon as it passes ``max_size``."""
        body = bytearray()
        async for chunk in chunks:
            body.extend(chunk)
            if len(body) > self.max_size:
                raise UploadTooLargeError(self.max_size)
        return bytes(body)

    async def store(
        self, upload_id: str | None, filename: str | None, signature: str | None, body: bytes
    ) -> UploadResponse:
        """Verify and write ``<upload_dir>/<id>-<filename>``."""
        self.verify(upload_id, filename, signature)
        if len(body) > self.max_size:
            raise UploadTooLargeError(self.max_size)

        target = self.upload_dir / f"{upload_id}-{filename}"
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._write, target, body)
        logger.info(f"Stored upload {target.name} ({len(body)} bytes)")

        return UploadResponse(file_url=f"{PUBLIC_URL_PREFIX}/{target.name}", size=len(body))

    @staticmethod
    def _write(target: Path, body: bytes) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(body)
