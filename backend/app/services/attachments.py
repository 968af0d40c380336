"""Proof-document attachments for ledger and investment records"""
import asyncio
import base64
import binascii
import re
import uuid
from pathlib import Path
from typing import Iterable, Optional

import structlog

from app.config import get_settings
from app.schemas.ledger import AttachmentUpload
from app.services.errors import AttachmentUploadError, NotFoundError

logger = structlog.get_logger()

CLOUD_DRIVE_PATTERNS = [
    re.compile(
        r"^https?://(www\.)?(drive\.google\.com|docs\.google\.com|onedrive\.live\.com|1drv\.ms|dropbox\.com"
        r"|(app\.)?box\.com|icloud\.com|mega\.nz|pcloud\.com|mediafire\.com)(/|$)",
        re.IGNORECASE,
    ),
    re.compile(r"^https?://[^/]*\.(googleapis\.com|microsoft\.com|dropboxusercontent\.com)(/|$)", re.IGNORECASE),
]

_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def is_cloud_drive_url(url: str) -> bool:
    return any(pattern.match(url) for pattern in CLOUD_DRIVE_PATTERNS)


def cloud_provider_name(url: str) -> str:
    """Human readable provider of a cloud drive link"""
    lowered = url.lower()
    if "drive.google.com" in lowered or "docs.google.com" in lowered:
        return "Google Drive"
    if "onedrive.live.com" in lowered or "1drv.ms" in lowered or "microsoft.com" in lowered:
        return "OneDrive"
    if "dropbox" in lowered:
        return "Dropbox"
    if "box.com" in lowered:
        return "Box"
    return "Cloud Drive"


class AttachmentService:
    """Stores uploaded files on disk and validates pasted cloud-drive links."""

    def __init__(
        self,
        storage_dir: str,
        base_url: str,
        max_bytes: int,
        allowed_extensions: Iterable[str],
    ):
        self.storage_dir = Path(storage_dir)
        self.base_url = base_url.rstrip("/")
        self.max_bytes = max_bytes
        self.allowed_extensions = {ext.lower().lstrip(".") for ext in allowed_extensions}

    @classmethod
    def from_settings(cls) -> "AttachmentService":
        settings = get_settings()
        return cls(
            storage_dir=settings.attachment_dir,
            base_url=settings.attachment_base_url,
            max_bytes=settings.attachment_max_bytes,
            allowed_extensions=settings.attachment_extensions,
        )

    def validate_link(self, url: str) -> str:
        """Accept a cloud-drive link or a URL previously issued by this service"""
        url = (url or "").strip()
        if not url:
            raise AttachmentUploadError("Attachment link is empty")
        if url.startswith(self.base_url + "/") or is_cloud_drive_url(url):
            return url
        logger.warning("Rejected attachment link", url=url)
        raise AttachmentUploadError(
            "Please provide a valid cloud drive link (Google Drive, OneDrive, Dropbox, etc.)"
        )

    async def store_file(self, startup_id: int, upload: AttachmentUpload) -> str:
        """Persist an uploaded file and return its public URL"""
        filename = _UNSAFE_FILENAME_CHARS.sub("_", Path(upload.filename or "").name).strip("._")
        extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
        if not filename or extension not in self.allowed_extensions:
            raise AttachmentUploadError(f"Unsupported attachment type: {upload.filename!r}")

        try:
            content = base64.b64decode(upload.content_base64, validate=True)
        except (binascii.Error, ValueError) as e:
            raise AttachmentUploadError("Attachment content is not valid base64") from e

        if not content:
            raise AttachmentUploadError("Attachment is empty")
        if len(content) > self.max_bytes:
            raise AttachmentUploadError(
                f"Attachment exceeds the {self.max_bytes // (1024 * 1024)} MB limit"
            )

        stored_name = f"{uuid.uuid4().hex}_{filename}"
        target_dir = self.storage_dir / str(startup_id)
        try:
            await asyncio.to_thread(_write_file, target_dir, stored_name, content)
        except OSError as e:
            logger.warning("Attachment upload failed", startup_id=startup_id, error=str(e))
            raise AttachmentUploadError("Failed to upload attachment. Please try again.") from e

        url = f"{self.base_url}/{startup_id}/{stored_name}"
        logger.info("Stored attachment", startup_id=startup_id, url=url, size=len(content))
        return url

    def file_path(self, startup_id: int, name: str) -> Path:
        """Location of a stored attachment; NotFoundError for unknown or unsafe names"""
        if not name or name != _UNSAFE_FILENAME_CHARS.sub("_", name) or name.startswith("."):
            raise NotFoundError(f"Attachment {name!r} not found")
        path = self.storage_dir / str(startup_id) / name
        if not path.is_file():
            raise NotFoundError(f"Attachment {name!r} not found")
        return path

    async def discard(self, url: str) -> None:
        """Remove a file stored by this service; links to other hosts are left alone"""
        prefix = self.base_url + "/"
        if not url.startswith(prefix):
            return
        startup_id, _, name = url[len(prefix):].partition("/")
        try:
            path = self.file_path(int(startup_id), name)
        except (NotFoundError, ValueError):
            return
        try:
            await asyncio.to_thread(path.unlink)
        except OSError as e:
            logger.warning("Failed to remove attachment", url=url, error=str(e))
            return
        logger.info("Removed attachment", url=url)

    async def resolve(
        self,
        startup_id: int,
        upload: Optional[AttachmentUpload] = None,
        link: Optional[str] = None,
    ) -> Optional[str]:
        """URL for an inline upload (preferred) or a pasted link; None if neither is given"""
        if upload is not None:
            return await self.store_file(startup_id, upload)
        if link is not None and link.strip():
            return self.validate_link(link)
        return None


def _write_file(directory: Path, name: str, content: bytes) -> None:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / name).write_bytes(content)


def get_attachment_service() -> AttachmentService:
    """Dependency to get the attachment service"""
    return AttachmentService.from_settings()
