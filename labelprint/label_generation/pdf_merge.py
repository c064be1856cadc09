"""
Page-wise concatenation of rendered label PDFs.
"""

import io

from pypdf import PdfReader, PdfWriter

from labelprint.logger import get_logger

logger = get_logger(__name__)


def merge_pdfs(documents: list[bytes]) -> bytes:
    """
    Concatenate PDFs into one document, keeping input order.

    Args:
        documents: PDF bytes, one per rendered label

    Returns:
        Merged PDF bytes

    Raises:
        ValueError: If no documents are given
    """
    if not documents:
        raise ValueError("Nothing to merge")

    writer = PdfWriter()
    for document in documents:
        reader = PdfReader(io.BytesIO(document))
        for page in reader.pages:
            writer.add_page(page)

    buffer = io.BytesIO()
    writer.write(buffer)

    logger.info("PDFs merged", extra={
        "documents": len(documents),
        "pages": len(writer.pages)
    })

    return buffer.getvalue()


def count_pages(document: bytes) -> int:
    """Number of pages in a PDF."""
    return len(PdfReader(io.BytesIO(document)).pages)
