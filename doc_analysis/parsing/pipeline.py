"""Corpus assembly from user-selected files.

Files are processed sequentially in selection order so the corpus is
deterministic for identical input bytes. A failure in one file degrades to
a sentinel body and never stops the batch.
"""

import logging
import re
from collections.abc import Iterable, Sequence

from doc_analysis.models import CorpusSection, DocumentKind, ExtractedDocument, UploadedFile
from doc_analysis.parsing.pdf_parser import extract_pdf_text
from doc_analysis.parsing.sanitize import sanitize_text

logger = logging.getLogger(__name__)

PDF_MEDIA_TYPE = "application/pdf"
PDF_LABEL = "PDF"
TEXT_MEDIA_PREFIX = "text/"

# Subtypes whose header label differs from the upper-cased subtype
_TEXT_LABEL_OVERRIDES = {"plain": "TXT"}

_SECTION_HEADER_RE = re.compile(r"^--- (.+?) \(([A-Z0-9.+-]+)\) ---\n", re.MULTILINE)


def _normalize_media_type(media_type: str) -> str:
    """Lower-case a media type and drop its parameters."""
    return media_type.split(";", 1)[0].strip().lower()


def document_label(media_type: str) -> str | None:
    """Return the corpus header label for a declared media type.

    Args:
        media_type: Declared media type, e.g. "application/pdf" or "text/plain".

    Returns:
        "PDF" for PDFs, the upper-cased subtype for text types ("TXT" for
        text/plain), or None when the type is not accepted.
    """
    normalized = _normalize_media_type(media_type)
    if normalized == PDF_MEDIA_TYPE:
        return PDF_LABEL
    if normalized.startswith(TEXT_MEDIA_PREFIX):
        subtype = normalized.removeprefix(TEXT_MEDIA_PREFIX)
        if not subtype:
            return None
        return _TEXT_LABEL_OVERRIDES.get(subtype, subtype.upper())
    return None


async def extract_document(file: UploadedFile) -> ExtractedDocument | None:
    """Extract and sanitize the text of one file.

    Args:
        file: The uploaded file.

    Returns:
        ExtractedDocument, or None when the declared type is not accepted.
    """
    label = document_label(file.media_type)
    if label is None:
        logger.debug(f"Skipping {file.filename}: unsupported media type {file.media_type!r}")
        return None

    content = await file.read()

    if label == PDF_LABEL:
        text, pages = extract_pdf_text(content)
        document = ExtractedDocument(
            filename=file.filename,
            kind=DocumentKind.PDF,
            label=label,
            body=sanitize_text(text),
            pages=pages,
        )
    else:
        document = ExtractedDocument(
            filename=file.filename,
            kind=DocumentKind.TEXT,
            label=label,
            body=sanitize_text(content.decode("utf-8", errors="replace")),
        )

    logger.info(f"Extracted {file.filename} ({label}): {len(document.body)} chars")
    return document


async def extract_documents(files: Iterable[UploadedFile]) -> list[ExtractedDocument]:
    """Extract every accepted file, in order.

    Args:
        files: Files in selection order.

    Returns:
        One ExtractedDocument per accepted file.
    """
    documents: list[ExtractedDocument] = []
    for file in files:
        document = await extract_document(file)
        if document is not None:
            documents.append(document)
    return documents


def build_corpus(documents: Sequence[ExtractedDocument]) -> str:
    """Concatenate documents into the corpus sent to the backend.

    Each document becomes a "--- <filename> (<LABEL>) ---" header line,
    its body and a trailing newline. The result is trimmed.
    """
    blocks = [f"--- {doc.filename} ({doc.label}) ---\n{doc.body}\n" for doc in documents]
    return "".join(blocks).strip()


async def extract_corpus(
    files: Iterable[UploadedFile],
) -> tuple[str, list[ExtractedDocument]]:
    """Run the full extraction pipeline.

    Args:
        files: Files in selection order.

    Returns:
        Tuple of (corpus, extracted documents).
    """
    documents = await extract_documents(files)
    corpus = build_corpus(documents)
    logger.info(f"Built corpus from {len(documents)} document(s): {len(corpus)} chars")
    return corpus, documents


def split_corpus(corpus: str) -> list[CorpusSection]:
    """Split an assembled corpus back into its document sections.

    Args:
        corpus: Text produced by build_corpus.

    Returns:
        Sections in corpus order. Text before the first header is ignored.
    """
    headers = list(_SECTION_HEADER_RE.finditer(corpus))
    sections: list[CorpusSection] = []
    for i, header in enumerate(headers):
        end = headers[i + 1].start() if i + 1 < len(headers) else len(corpus)
        sections.append(
            CorpusSection(
                filename=header.group(1),
                label=header.group(2),
                body=corpus[header.end() : end].strip(),
            )
        )
    return sections
