"""
Test suite for the Text Extractor

Checks that:
- PDF and DOCX uploads come back as plain text
- Plain text uploads are decoded as UTF-8
- Corrupt, empty or binary uploads return the readable fallback instead of raising

Run tests with: pytest backend/tests/test_text_extractor.py -v
"""

import io
import os
import sys

import docx
import fitz
import pytest

# Add backend directory to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from services.text_extractor import UNREADABLE_TEXT, clean_text, extract_text


DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


# ============================================================================
# FIXTURES
# ============================================================================

@pytest.fixture
def pdf_bytes():
    doc = fitz.open()
    page = doc.new_page()
    page.insert_text((72, 72), "Jane Doe - Backend Engineer")
    page.insert_text((72, 96), "Cut p99 latency by 40%")
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def docx_bytes():
    d = docx.Document()
    d.add_paragraph("Senior Python Developer")
    d.add_paragraph("Led the migration to FastAPI")
    buf = io.BytesIO()
    d.save(buf)
    return buf.getvalue()


# ============================================================================
# TEST CASES - Structured formats
# ============================================================================

class TestStructuredFormats:

    def test_pdf_text_is_extracted(self, pdf_bytes):
        text = extract_text(pdf_bytes, "application/pdf", "cv.pdf")

        assert "Jane Doe" in text
        assert "p99 latency" in text

    def test_pdf_detected_by_extension_alone(self, pdf_bytes):
        text = extract_text(pdf_bytes, None, "CV.PDF")

        assert "Jane Doe" in text

    def test_docx_text_is_extracted(self, docx_bytes):
        text = extract_text(docx_bytes, DOCX_MIME, "cv.docx")

        assert "Senior Python Developer" in text
        assert "Led the migration to FastAPI" in text


# ============================================================================
# TEST CASES - Fallbacks
# ============================================================================

class TestFallbacks:

    def test_plain_text_is_decoded(self):
        text = extract_text("Résumé: Go, Rust".encode("utf-8"), "text/plain", "cv.txt")

        assert text == "Résumé: Go, Rust"

    def test_corrupt_pdf_returns_sentinel(self):
        """A parser error must not escape; the sentinel comes back instead."""
        assert extract_text(b"\x89\xff\x00 not a pdf", "application/pdf", "cv.pdf") == UNREADABLE_TEXT

    def test_corrupt_docx_returns_sentinel(self):
        assert extract_text(b"\x89\xff not a zip archive", DOCX_MIME, "cv.docx") == UNREADABLE_TEXT

    def test_empty_upload_returns_sentinel(self):
        assert extract_text(b"", "text/plain", "empty.txt") == UNREADABLE_TEXT

    def test_whitespace_only_returns_sentinel(self):
        assert extract_text(b"   \n\t  \n", "text/plain", "blank.txt") == UNREADABLE_TEXT

    def test_unknown_binary_returns_sentinel(self):
        assert extract_text(b"\xff\xfe\x00\x81\x9c", "application/octet-stream", "photo.bin") == UNREADABLE_TEXT


class TestCleanText:

    def test_collapses_spaces_and_blank_lines(self):
        assert clean_text("a  \t b\n\n\nc\x00d ") == "a b\nc d"
