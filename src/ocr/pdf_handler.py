"""PDF rasterization for multi-page document processing.

Renders one page at a time so that large PDFs never hold every page image
in memory simultaneously.
"""

from collections.abc import Iterator

import cv2
import numpy as np
from pdf2image import convert_from_bytes, pdfinfo_from_bytes

from src.documents.exceptions import PageRenderError
from src.utils.logger import get_logger

logger = get_logger(__name__)


class PDFHandler:
    """Converts PDF bytes into page images for OCR.

    Args:
        dpi: Resolution for PDF rendering.
    """

    def __init__(self, dpi: int = 300) -> None:
        self.dpi = dpi

    def get_page_count(self, pdf_bytes: bytes) -> int:
        """Get the number of pages in a PDF without rendering it.

        Args:
            pdf_bytes: Raw PDF bytes.

        Returns:
            Number of pages in the PDF.

        Raises:
            PageRenderError: If the PDF cannot be inspected.
        """
        try:
            info = pdfinfo_from_bytes(pdf_bytes)
        except Exception as exc:
            raise PageRenderError(f"Could not read PDF: {exc}") from exc

        count = int(info["Pages"])
        logger.debug("PDF has %d pages", count)
        return count

    def render_page(self, pdf_bytes: bytes, page_number: int) -> np.ndarray:
        """Render a single PDF page as a BGR image.

        Args:
            pdf_bytes: Raw PDF bytes.
            page_number: 1-based page number.

        Returns:
            Page image as a numpy array in BGR channel order.

        Raises:
            PageRenderError: If the page cannot be rendered.
        """
        try:
            pages = convert_from_bytes(
                pdf_bytes,
                dpi=self.dpi,
                first_page=page_number,
                last_page=page_number,
            )
        except Exception as exc:
            raise PageRenderError(f"Failed to render PDF page {page_number}: {exc}") from exc

        if not pages:
            raise PageRenderError(f"PDF page {page_number} produced no image")

        rgb = np.array(pages[0].convert("RGB"))
        return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)

    def iter_pages(self, pdf_bytes: bytes) -> Iterator[tuple[int, int, np.ndarray]]:
        """Render a PDF page by page.

        Args:
            pdf_bytes: Raw PDF bytes.

        Yields:
            Tuples of ``(page_index, page_count, image)`` with a 0-based index.
        """
        page_count = self.get_page_count(pdf_bytes)
        if page_count == 0:
            raise PageRenderError("PDF contains no pages")

        for index in range(page_count):
            yield index, page_count, self.render_page(pdf_bytes, index + 1)
        logger.info("Rendered %d PDF pages at %d DPI", page_count, self.dpi)
