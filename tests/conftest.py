"""Pytest fixtures and shared test configuration.

Provides reusable fixtures for unit and integration tests.

Fixtures:
    - session_config: Configuration pointing at a dummy origin
    - make_pdf: Factory for small text PDFs built in memory
    - blank_pdf: PDF with a single page and no text
    - connector: In-memory connector recording every connection
    - coordinator: Idle SessionCoordinator wired to the connector
"""

import io
from collections.abc import AsyncGenerator, Callable

import pytest
from pypdf import PdfWriter

from doc_analysis.config import SessionConfig
from doc_analysis.session import SessionCoordinator
from tests.fakes import FakeConnector

CORPUS = "--- contract.txt (TXT) ---\nThe tenant pays rent monthly."


def build_pdf(page_texts: list[str]) -> bytes:
    """Build a minimal PDF with one Helvetica text line per page.

    Args:
        page_texts: Text of each page; empty strings give pages without text.

    Returns:
        PDF bytes with a valid cross-reference table.
    """
    page_ids = [4 + 2 * i for i in range(len(page_texts))]
    kids = " ".join(f"{page_id} 0 R" for page_id in page_ids)
    objects: list[bytes] = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        f"<< /Type /Pages /Kids [{kids}] /Count {len(page_texts)} >>".encode(),
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]
    for page_id, text in zip(page_ids, page_texts):
        stream = f"BT /F1 12 Tf 72 720 Td ({text}) Tj ET".encode() if text else b""
        objects.append(
            (
                "<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
                f"/Resources << /Font << /F1 3 0 R >> >> /Contents {page_id + 1} 0 R >>"
            ).encode()
        )
        objects.append(b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream")

    out = bytearray(b"%PDF-1.4\n")
    offsets: list[int] = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_pos = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\n" % (len(objects) + 1)
    out += b"startxref\n%d\n%%%%EOF\n" % xref_pos
    return bytes(out)


@pytest.fixture
def session_config() -> SessionConfig:
    """Return configuration for a backend at a dummy origin."""
    return SessionConfig(origin="http://testserver", open_timeout=1.0)


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """Return a factory building text PDFs, one string per page."""

    def _make(*page_texts: str) -> bytes:
        return build_pdf(list(page_texts))

    return _make


@pytest.fixture
def blank_pdf() -> bytes:
    """Return a one-page PDF without any text."""
    writer = PdfWriter()
    writer.add_blank_page(width=612, height=792)
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


@pytest.fixture
def connector() -> FakeConnector:
    return FakeConnector()


@pytest.fixture
async def coordinator(
    connector: FakeConnector, session_config: SessionConfig
) -> AsyncGenerator[SessionCoordinator, None]:
    """Create an idle coordinator and discard it after the test.

    Yields:
        SessionCoordinator holding CORPUS.
    """
    session = SessionCoordinator(CORPUS, connector, session_config)
    yield session
    await session.discard()
