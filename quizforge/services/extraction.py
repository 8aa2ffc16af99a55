"""
Text extraction from uploaded PDF, image and video files
"""
import asyncio
import io
import re
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import pytesseract
import structlog
from PIL import Image
from pypdf import PdfReader
from starlette.concurrency import run_in_threadpool

from quizforge.config import TESSERACT_CMD
from quizforge.errors import ExtractionFailure
from quizforge.services.cache import cache, extraction_key
from quizforge.services.monitoring import EXTRACTION_REQUESTS

logger = structlog.get_logger()

if TESSERACT_CMD:
    pytesseract.pytesseract.tesseract_cmd = TESSERACT_CMD

MEDIA_TYPES = {
    "application/pdf": "pdf",
    "image/jpeg": "image",
    "image/png": "image",
    "video/mp4": "video",
}

VIDEO_PLACEHOLDER = (
    "Video processing is currently not fully implemented. "
    "This would extract text from video captions and audio transcription."
)

UNWANTED_INLINE = ["\u00ad", "\uf0b7", "\u200b", "\u200c", "\u200d"]


def classify_media_type(content_type: Optional[str]) -> Optional[str]:
    if not content_type:
        return None
    return MEDIA_TYPES.get(content_type.split(";")[0].strip().lower())


def normalize_text(raw_text: str) -> str:
    for ch in UNWANTED_INLINE:
        raw_text = raw_text.replace(ch, "")
    raw_text = raw_text.replace("\r\n", "\n").replace("\r", "\n")
    raw_text = re.sub(r"(\w)-\s*\n\s*(?=[a-z])", r"\1", raw_text)  # de-hyphenate across linebreaks
    raw_text = re.sub(r"[ \t]+\n", "\n", raw_text)
    raw_text = re.sub(r"\n{3,}", "\n\n", raw_text)
    return raw_text.strip()


# -------------------- PER-TYPE EXTRACTORS --------------------

def extract_text_from_pdf(data: bytes) -> str:
    reader = PdfReader(io.BytesIO(data))
    if reader.is_encrypted:
        reader.decrypt("")
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def extract_text_from_image(data: bytes) -> str:
    with Image.open(io.BytesIO(data)) as img:
        return pytesseract.image_to_string(img)


def extract_text_from_video(data: bytes) -> str:
    logger.info("video_extraction_placeholder", size=len(data))
    return VIDEO_PLACEHOLDER


EXTRACTORS = {
    "pdf": extract_text_from_pdf,
    "image": extract_text_from_image,
    "video": extract_text_from_video,
}


def extract_text(data: bytes, media_type: str, filename: str = "upload") -> str:
    """Return the plain text of one file; raises ExtractionFailure on any error."""
    extractor = EXTRACTORS.get(media_type)
    if extractor is None:
        EXTRACTION_REQUESTS.labels(media_type=str(media_type), status="unsupported").inc()
        raise ExtractionFailure(filename, f"Unsupported file type: {media_type}")

    key = extraction_key(data, media_type)
    cached = cache.get(key)
    if cached is not None:
        EXTRACTION_REQUESTS.labels(media_type=media_type, status="cached").inc()
        return cached

    try:
        text = normalize_text(extractor(data))
    except Exception as e:
        EXTRACTION_REQUESTS.labels(media_type=media_type, status="error").inc()
        logger.warning("extraction_failed", filename=filename, media_type=media_type, error=str(e))
        raise ExtractionFailure(filename, f"Failed to process {media_type}: {e}") from e

    EXTRACTION_REQUESTS.labels(media_type=media_type, status="success").inc()
    logger.info("text_extracted", filename=filename, media_type=media_type, chars=len(text))
    cache.set(key, text)
    return text


# -------------------- BATCH --------------------

@dataclass
class ExtractionOutcome:
    filename: str
    media_type: Optional[str]
    size: int
    text: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


async def _extract_one(filename: str, data: bytes, media_type: Optional[str]) -> ExtractionOutcome:
    outcome = ExtractionOutcome(filename=filename, media_type=media_type, size=len(data))
    try:
        outcome.text = await run_in_threadpool(extract_text, data, media_type, filename)
    except ExtractionFailure as e:
        outcome.error = e.message
    return outcome


async def extract_many(uploads: Sequence[Tuple[str, bytes, Optional[str]]]) -> List[ExtractionOutcome]:
    """Extract every upload concurrently; one file failing leaves the others intact."""
    return list(await asyncio.gather(*(_extract_one(name, data, kind) for name, data, kind in uploads)))
