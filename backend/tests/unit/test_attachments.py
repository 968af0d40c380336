"""Unit tests for attachment storage and cloud-drive links"""
import base64

import pytest

from app.schemas.ledger import AttachmentUpload
from app.services.attachments import AttachmentService, cloud_provider_name, is_cloud_drive_url
from app.services.errors import AttachmentUploadError, NotFoundError


def upload(filename="receipt.pdf", content=b"%PDF-1.4 test"):
    return AttachmentUpload(filename=filename, content_base64=base64.b64encode(content).decode())


class TestCloudDriveLinks:
    """Tests for the cloud-drive allowlist"""

    @pytest.mark.parametrize("url", [
        "https://drive.google.com/file/d/abc/view",
        "https://docs.google.com/spreadsheets/d/abc",
        "https://1drv.ms/b/s!abc",
        "https://www.dropbox.com/s/abc/receipt.pdf",
        "https://app.box.com/s/abc",
        "https://storage.googleapis.com/bucket/receipt.pdf",
    ])
    def test_accepted(self, url):
        assert is_cloud_drive_url(url)

    @pytest.mark.parametrize("url", [
        "https://example.com/receipt.pdf",
        "ftp://drive.google.com/file",
        "https://drive.google.com.evil.io/file",
        "not a url",
    ])
    def test_rejected(self, url):
        assert not is_cloud_drive_url(url)

    def test_provider_name(self):
        assert cloud_provider_name("https://drive.google.com/x") == "Google Drive"
        assert cloud_provider_name("https://1drv.ms/x") == "OneDrive"
        assert cloud_provider_name("https://www.dropbox.com/x") == "Dropbox"
        assert cloud_provider_name("https://mega.nz/x") == "Cloud Drive"


class TestAttachmentService:
    """Tests for AttachmentService"""

    def test_validate_link_accepts_cloud_drive(self, attachment_service: AttachmentService):
        url = "https://drive.google.com/file/d/abc/view"
        assert attachment_service.validate_link(f"  {url} ") == url

    def test_validate_link_accepts_own_urls(self, attachment_service: AttachmentService):
        url = "http://test/attachments/1/abc_receipt.pdf"
        assert attachment_service.validate_link(url) == url

    def test_validate_link_rejects_other_hosts(self, attachment_service: AttachmentService):
        with pytest.raises(AttachmentUploadError):
            attachment_service.validate_link("https://example.com/receipt.pdf")

    @pytest.mark.asyncio
    async def test_store_file_writes_and_returns_url(self, attachment_service: AttachmentService, tmp_path):
        url = await attachment_service.store_file(7, upload())
        assert url.startswith("http://test/attachments/7/")
        assert url.endswith("_receipt.pdf")

        stored = list((tmp_path / "attachments" / "7").iterdir())
        assert len(stored) == 1
        assert stored[0].read_bytes() == b"%PDF-1.4 test"

    @pytest.mark.asyncio
    async def test_store_file_sanitises_name(self, attachment_service: AttachmentService):
        url = await attachment_service.store_file(1, upload(filename="../../my receipt.pdf"))
        assert url.endswith("_my_receipt.pdf")
        assert ".." not in url

    @pytest.mark.asyncio
    async def test_rejects_disallowed_extension(self, attachment_service: AttachmentService):
        with pytest.raises(AttachmentUploadError):
            await attachment_service.store_file(1, upload(filename="run.exe"))

    @pytest.mark.asyncio
    async def test_rejects_invalid_base64(self, attachment_service: AttachmentService):
        bad = AttachmentUpload(filename="receipt.pdf", content_base64="not base64!!")
        with pytest.raises(AttachmentUploadError):
            await attachment_service.store_file(1, bad)

    @pytest.mark.asyncio
    async def test_rejects_empty_file(self, attachment_service: AttachmentService):
        with pytest.raises(AttachmentUploadError):
            await attachment_service.store_file(1, upload(content=b""))

    @pytest.mark.asyncio
    async def test_rejects_oversized_file(self, attachment_service: AttachmentService):
        with pytest.raises(AttachmentUploadError):
            await attachment_service.store_file(1, upload(content=b"x" * 2048))

    @pytest.mark.asyncio
    async def test_storage_failure_is_reported(self, tmp_path):
        blocked = tmp_path / "blocked"
        blocked.write_text("not a directory")
        service = AttachmentService(str(blocked), "http://test/attachments", 1024, ["pdf"])
        with pytest.raises(AttachmentUploadError):
            await service.store_file(1, upload())

    @pytest.mark.asyncio
    async def test_resolve_prefers_upload(self, attachment_service: AttachmentService):
        url = await attachment_service.resolve(1, upload=upload(), link="https://drive.google.com/x")
        assert url.startswith("http://test/attachments/1/")

    @pytest.mark.asyncio
    async def test_resolve_nothing(self, attachment_service: AttachmentService):
        assert await attachment_service.resolve(1) is None
        assert await attachment_service.resolve(1, link="   ") is None

    @pytest.mark.asyncio
    async def test_file_path_of_stored_upload(self, attachment_service: AttachmentService):
        url = await attachment_service.store_file(3, upload())
        name = url.rsplit("/", 1)[-1]
        assert attachment_service.file_path(3, name).read_bytes() == b"%PDF-1.4 test"

    @pytest.mark.parametrize("name", ["", "missing.pdf", "../secrets.pdf", ".hidden", "a b.pdf"])
    def test_file_path_rejects_unknown_names(self, attachment_service: AttachmentService, name):
        with pytest.raises(NotFoundError):
            attachment_service.file_path(3, name)

    @pytest.mark.asyncio
    async def test_discard_removes_stored_file(self, attachment_service: AttachmentService):
        url = await attachment_service.store_file(3, upload())
        name = url.rsplit("/", 1)[-1]
        await attachment_service.discard(url)
        with pytest.raises(NotFoundError):
            attachment_service.file_path(3, name)

    @pytest.mark.asyncio
    async def test_discard_ignores_foreign_links(self, attachment_service: AttachmentService):
        await attachment_service.discard("https://drive.google.com/file/d/abc/view")
        await attachment_service.discard("http://test/attachments/not-a-number/x.pdf")
