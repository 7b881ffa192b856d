"""
Positioned text extraction from PDF bytes using pdfplumber.
"""
import logging
from io import BytesIO
from typing import Callable, List, Optional

import pdfplumber

from errors import DocumentReadError
from schema import TextElement

logger = logging.getLogger(__name__)

# Any callable with this shape can replace pdfplumber, e.g. in tests
TextExtractor = Callable[[bytes], List[TextElement]]

NO_TEXT_SUGGESTION = "It may be a scanned image. Please use OCR or export as CSV"


class PdfTextExtractor:
    """Turns PDF bytes into TextElements with y measured down from the first page."""

    def __init__(self, password: Optional[str] = None, x_tolerance: float = 3, y_tolerance: float = 2):
        self.logger = logging.getLogger(self.__class__.__name__)
        self.password = password
        self.x_tolerance = x_tolerance
        self.y_tolerance = y_tolerance

    def __call__(self, data: bytes) -> List[TextElement]:
        return self.extract(data)

    def extract(self, data: bytes) -> List[TextElement]:
        elements: List[TextElement] = []
        try:
            with self._open(data) as pdf:
                page_offset = 0.0
                for page_number, page in enumerate(pdf.pages, start=1):
                    words = page.extract_words(
                        keep_blank_chars=True,
                        x_tolerance=self.x_tolerance,
                        y_tolerance=self.y_tolerance,
                        extra_attrs=["size"],
                    )
                    for word in words:
                        text = word["text"].strip()
                        if not text:
                            continue
                        elements.append(TextElement(
                            x=float(word["x0"]),
                            y=page_offset + float(word["top"]),
                            text=text,
                            font_size=float(word.get("size") or 0.0),
                        ))
                    self.logger.debug(f"Page {page_number}: {len(words)} words")
                    page_offset += float(page.height)
        except Exception as e:
            raise DocumentReadError(f"failed to open PDF: {e}",
                                    suggestion="PDF may be password-protected or damaged") from e

        if not elements:
            raise DocumentReadError("no text found in PDF", suggestion=NO_TEXT_SUGGESTION)

        self.logger.info(f"Extracted {len(elements)} text elements from PDF")
        return elements

    def _open(self, data: bytes):
        """Open with the configured password, retrying once with an empty one."""
        try:
            return pdfplumber.open(BytesIO(data), password=self.password or "")
        except Exception:
            if not self.password:
                raise
            self.logger.warning("Could not open PDF with the given password, retrying with an empty password")
            return pdfplumber.open(BytesIO(data), password="")


def extract_text_elements(data: bytes) -> List[TextElement]:
    return PdfTextExtractor().extract(data)
