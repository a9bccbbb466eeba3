"""PDF parsing module using pypdf.

Extracts page text from PDF files with validation. Text fragments on a
page are joined with single spaces; pages are separated by a blank line.
"""

import io
import logging

from pydantic import BaseModel, Field
from pypdf import PageObject, PdfReader
from pypdf.errors import PdfReadError

logger = logging.getLogger(__name__)

# Constants
MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
PDF_MAGIC_BYTES = b"%PDF"
NO_TEXT_SENTINEL = "[No extractable text found in this PDF.]"
ERROR_SENTINEL_TEMPLATE = "[Error extracting PDF text: {error}]"


class PDFContent(BaseModel):
    """Extracted content from a PDF file.

    Attributes:
        text: Combined text content from all pages.
        pages: Total number of pages in the document.
    """

    text: str
    pages: int = Field(ge=0)


class PDFParseError(Exception):
    """Raised when PDF parsing fails."""

    pass


def _validate_pdf_bytes(file_content: bytes) -> None:
    """Validate PDF file content before parsing.

    Args:
        file_content: Raw bytes of the PDF file.

    Raises:
        PDFParseError: If validation fails.
    """
    if not file_content:
        raise PDFParseError("Empty file provided")

    if len(file_content) > MAX_FILE_SIZE:
        size_mb = len(file_content) / (1024 * 1024)
        raise PDFParseError(f"File size ({size_mb:.1f}MB) exceeds maximum allowed (10MB)")

    if not file_content.lstrip()[:10].startswith(PDF_MAGIC_BYTES):
        raise PDFParseError("Invalid PDF: file does not start with PDF header")


def _page_text(page: PageObject) -> str:
    """Join the text fragments of one page with single spaces."""
    fragments: list[str] = []

    def collect(text: str, *_: object) -> None:
        if text and text.strip():
            fragments.append(text.strip())

    page.extract_text(visitor_text=collect)
    return " ".join(fragments)


def parse_pdf(file_content: bytes) -> PDFContent:
    """Parse a PDF file and extract its text content.

    Args:
        file_content: Raw bytes of the PDF file.

    Returns:
        PDFContent with extracted text and page count.

    Raises:
        PDFParseError: If the file is invalid, too large, empty, or corrupt,
            or if any page fails to extract.
    """
    _validate_pdf_bytes(file_content)

    try:
        reader = PdfReader(io.BytesIO(file_content))
        pages = len(reader.pages)
    except PdfReadError as e:
        raise PDFParseError(f"Corrupt or invalid PDF: {e}") from e
    except Exception as e:
        raise PDFParseError(f"Failed to read PDF: {e}") from e

    if pages == 0:
        raise PDFParseError("PDF contains no pages")

    page_texts: list[str] = []
    for i, page in enumerate(reader.pages):
        try:
            page_texts.append(_page_text(page))
        except Exception as e:
            raise PDFParseError(f"Failed to extract text from page {i + 1}: {e}") from e

    text = "\n\n".join(page_texts)

    if not text.strip():
        logger.warning("PDF contains no extractable text (may be scanned/image-based)")

    return PDFContent(text=text, pages=pages)


def extract_pdf_text(file_content: bytes) -> tuple[str, int]:
    """Extract PDF text, degrading failures to sentinel strings.

    Args:
        file_content: Raw bytes of the PDF file.

    Returns:
        Tuple of (text, page count). The text is NO_TEXT_SENTINEL when no
        page yields text, or an error sentinel (page count 0) when parsing
        fails.
    """
    try:
        content = parse_pdf(file_content)
    except PDFParseError as e:
        logger.warning(f"PDF extraction failed: {e}")
        return ERROR_SENTINEL_TEMPLATE.format(error=e), 0

    if not content.text.strip():
        return NO_TEXT_SENTINEL, content.pages
    return content.text, content.pages
