import io
import os
import re
from typing import Optional

from pdfminer.high_level import extract_text as pdf_extract
from unstructured.partition.auto import partition

from ats_match.utils.exceptions import DocumentReadError, UnsupportedFormatError
from ats_match.utils.logging_config import get_logger

logger = get_logger(__name__)

PDF = "pdf"
TEXT = "text"

MIME_FORMATS = {
    "application/pdf": PDF,
    "application/x-pdf": PDF,
    "text/plain": TEXT,
}
EXTENSION_FORMATS = {
    ".pdf": PDF,
    ".txt": TEXT,
}
# Content types that say nothing about the payload; fall back to the filename
GENERIC_MIME_TYPES = {"", "application/octet-stream", "binary/octet-stream"}


def detect_format(mime_type: Optional[str], filename: Optional[str] = None) -> str:
    mime = (mime_type or "").split(";")[0].strip().lower()
    if mime in MIME_FORMATS:
        return MIME_FORMATS[mime]
    if mime in GENERIC_MIME_TYPES and filename:
        ext = os.path.splitext(filename)[1].lower()
        if ext in EXTENSION_FORMATS:
            return EXTENSION_FORMATS[ext]
    raise UnsupportedFormatError(mime_type=mime_type, filename=filename)


def read_txt(data: bytes) -> str:
    return data.decode("utf-8", errors="ignore")


def read_pdf(data: bytes) -> str:
    try:
        return pdf_extract(io.BytesIO(data))
    except Exception as e:
        logger.warning(f"pdfminer could not read document, trying unstructured: {e}")
    try:
        elems = partition(file=io.BytesIO(data), content_type="application/pdf")
    except Exception as e:
        raise DocumentReadError("Could not read PDF document", document_type=PDF, cause=e) from e
    return "\n".join([el.text for el in elems if getattr(el, "text", None)])


def clean_text(x: str) -> str:
    x = re.sub(r'\s+', ' ', x).strip()
    return x


def extract_document_text(document: bytes, mime_type: Optional[str], filename: Optional[str] = None) -> str:
    """Plain text of a resume; raises UnsupportedFormatError for anything but PDF or text."""
    fmt = detect_format(mime_type, filename)
    raw = read_pdf(document) if fmt == PDF else read_txt(document)
    return clean_text(raw or "")
