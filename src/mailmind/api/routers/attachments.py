"""Serve stored attachments."""

from fastapi import APIRouter
from fastapi.responses import FileResponse

from ...config.settings import get_settings
from ...exceptions import AttachmentNotFoundError, InvalidRequestError

router = APIRouter(prefix="/api/attachments", tags=["attachments"])


@router.get("/{rel_path:path}")
def get_attachment(rel_path: str):
    """Serve a file from the attachments directory.

    Paths resolving outside the directory are rejected.
    """
    base = get_settings().attachments_dir.resolve()
    target = (base / rel_path).resolve()

    if not target.is_relative_to(base) or target == base:
        raise InvalidRequestError("Invalid attachment path.")
    if not target.is_file():
        raise AttachmentNotFoundError(f"Attachment not found: {rel_path}")

    return FileResponse(target, filename=target.name)
