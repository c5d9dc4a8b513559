# backend/services/text_extractor.py
"""
Text Extractor

Turns an uploaded resume (PDF, DOCX or plain text) into plain text.

Extraction never fails the request: if nothing readable comes out, or a
parser blows up, callers get UNREADABLE_TEXT and the analysis runs on that.
"""

import io
import re
import logging
from typing import Optional

import fitz
import docx

logger = logging.getLogger(__name__)

UNREADABLE_TEXT = (
    "Extraction failed; content may be unreadable. "
    "Please provide a text-friendly file."
)


def extract_pdf_text(data: bytes) -> str:
    with fitz.open(stream=data, filetype="pdf") as doc:
        return "\n".join(p.get_text() for p in doc)


def extract_docx_text(data: bytes) -> str:
    d = docx.Document(io.BytesIO(data))
    return "\n".join(p.text for p in d.paragraphs)


def clean_text(t: str) -> str:
    t = t.replace("\x00", " ")
    t = re.sub(r"[ \t]+", " ", t)
    t = re.sub(r"\n{2,}", "\n", t)
    return t.strip()


def is_pdf(content_type: str, filename: str) -> bool:
    return "pdf" in content_type or filename.endswith(".pdf")


def is_docx(content_type: str, filename: str) -> bool:
    return "word" in content_type or filename.endswith(".docx")


def extract_text(data: bytes, content_type: Optional[str] = None, filename: Optional[str] = None) -> str:
    """
    Extract plain text from an uploaded file.

    Order of attempts:
    1. PDF/DOCX parser, picked from the content type or file extension
    2. The raw bytes decoded as UTF-8
    3. UNREADABLE_TEXT

    Args:
        data: Raw file bytes
        content_type: Declared MIME type (may be missing)
        filename: Original file name (may be missing)

    Returns:
        Non-empty text; UNREADABLE_TEXT when nothing usable was found
    """
    mime = (content_type or "").lower()
    name = (filename or "").lower()

    try:
        if is_pdf(mime, name):
            text = clean_text(extract_pdf_text(data))
            if text:
                return text
        if is_docx(mime, name):
            text = clean_text(extract_docx_text(data))
            if text:
                return text
    except Exception:
        logger.exception("Text extraction failed for %s (%s)", filename or "<unnamed>", mime or "unknown type")
        return UNREADABLE_TEXT

    # binary formats we don't know fail strict decoding
    try:
        text = clean_text(data.decode("utf-8"))
    except UnicodeDecodeError:
        logger.warning("%s is not UTF-8 text", filename or "<unnamed>")
        text = ""

    if not text:
        logger.warning("No readable text extracted from %s", filename or "<unnamed>")
        return UNREADABLE_TEXT
    return text
