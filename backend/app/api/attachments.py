"""Download endpoint for proof documents stored by the attachment service"""
from urllib.parse import urlparse

from fastapi import APIRouter, Depends, Path
from fastapi.responses import FileResponse

from app.services.attachments import AttachmentService, get_attachment_service

router = APIRouter()


def attachment_route_prefix(base_url: str) -> str:
    """Path part of the public attachment URL, e.g. /attachments"""
    return urlparse(base_url).path.rstrip("/") or "/attachments"


@router.get("/{startup_id}/{filename}")
async def download_attachment(
    startup_id: int = Path(...),
    filename: str = Path(...),
    attachments: AttachmentService = Depends(get_attachment_service),
):
    """Serve a stored attachment under the name it was uploaded with"""
    path = attachments.file_path(startup_id, filename)
    return FileResponse(path, filename=filename.split("_", 1)[-1])


attachments_router = router
