from typing import List, Optional

import structlog
from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from fastapi.responses import JSONResponse
from sqlmodel import Session

from quizforge.config import MAX_UPLOAD_BYTES, MAX_UPLOAD_FILES
from quizforge.db import get_session
from quizforge.errors import NotFound
from quizforge.middleware.rate_limit import upload_limit
from quizforge.services.extraction import classify_media_type, extract_many
from quizforge.services.repository import create_document, document_to_dict, get_document

logger = structlog.get_logger()

router = APIRouter(prefix="/api", tags=["files"])


@router.post("/upload")
@upload_limit()
async def upload_files(request: Request, files: Optional[List[UploadFile]] = File(None), session: Session = Depends(get_session)):
    """Extract text from each uploaded file and store it as a document"""
    if not files:
        raise HTTPException(status_code=400, detail="No files were uploaded")
    if len(files) > MAX_UPLOAD_FILES:
        raise HTTPException(status_code=400, detail=f"At most {MAX_UPLOAD_FILES} files can be uploaded at once")

    failures = []
    uploads = []
    for upload in files:
        content = await upload.read()
        if len(content) > MAX_UPLOAD_BYTES:
            failures.append({"filename": upload.filename, "error": f"File exceeds {MAX_UPLOAD_BYTES} bytes"})
            continue
        uploads.append((upload.filename, content, classify_media_type(upload.content_type)))

    saved = []
    for outcome in await extract_many(uploads):
        if not outcome.ok:
            failures.append({"filename": outcome.filename, "error": outcome.error})
            continue
        document = create_document(session, outcome.filename, outcome.size, outcome.media_type, outcome.text)
        saved.append(document_to_dict(document))

    logger.info("upload_processed", saved=len(saved), failed=len(failures))
    body = {"files": saved, "failures": failures}
    if not saved:
        return JSONResponse(status_code=422, content=body)
    return body


@router.get("/files/{file_id}")
def get_file(file_id: int, session: Session = Depends(get_session)):
    try:
        return document_to_dict(get_document(session, file_id))
    except NotFound as e:
        raise HTTPException(status_code=404, detail=str(e))
