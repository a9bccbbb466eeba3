"""Document extraction utilities for building the chat corpus.

Transforms user-selected files into one sanitized text corpus.

Responsibilities:
    - PDF text extraction with pypdf
    - Plain text decoding
    - Text sanitization to printable ASCII
    - Corpus assembly with per-document header lines

Extraction failures degrade to sentinel text and never abort the batch.
"""

from doc_analysis.parsing.pdf_parser import (
    NO_TEXT_SENTINEL,
    PDFContent,
    PDFParseError,
    extract_pdf_text,
    parse_pdf,
)
from doc_analysis.parsing.pipeline import (
    build_corpus,
    document_label,
    extract_corpus,
    extract_document,
    extract_documents,
    split_corpus,
)
from doc_analysis.parsing.sanitize import sanitize_text

__all__ = [
    "NO_TEXT_SENTINEL",
    "PDFContent",
    "PDFParseError",
    "build_corpus",
    "document_label",
    "extract_corpus",
    "extract_document",
    "extract_documents",
    "extract_pdf_text",
    "parse_pdf",
    "sanitize_text",
    "split_corpus",
]
