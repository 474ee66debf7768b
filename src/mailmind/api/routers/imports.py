"""Archive upload endpoint."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import JSONResponse

from ...config.settings import get_settings
from ...exceptions import ArchiveParseError, InvalidRequestError, UnsupportedFormatError
from ...services.processing import EmailProcessor
from ..dependencies import get_processor
from ..schemas import ImportResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["import"])

MB = 1024 * 1024


@router.post("/import", response_model=ImportResponse)
def import_emails(
    file: Optional[UploadFile] = File(None),
    processor: EmailProcessor = Depends(get_processor),
):
    """Import a JSON, PST, EML or ZIP archive.

    Without a file, the built-in demo emails are imported. Emails are
    classified, scanned for events and embedded when the LLM is reachable.
    """
    filename = None
    content = None
    if file is not None and file.filename:
        content = file.file.read()
        filename = file.filename

        limit = get_settings().max_upload_mb
        if len(content) > limit * MB:
            raise InvalidRequestError(f"File exceeds the {limit} MB upload limit.")

    try:
        summary = processor.import_file(filename, content)
    except (UnsupportedFormatError, ArchiveParseError) as e:
        logger.warning(f"Import of {filename} rejected: {e.message}")
        body = ImportResponse(ok=False, inserted=0, message=e.message)
        return JSONResponse(status_code=e.status_code, content=body.model_dump(by_alias=True))

    return ImportResponse(
        ok=True,
        inserted=summary.inserted,
        classified=summary.stats.classified,
        events_extracted=summary.stats.events_extracted,
        embedded=summary.stats.embedded,
        message=summary.message,
    )
