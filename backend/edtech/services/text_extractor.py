"""Plain-text extraction for uploaded documents (PDF, DOCX, TXT)."""

import io
import logging
import re

import docx
import pymupdf  # PyMuPDF

from edtech.schemas.documents import DocumentKindType
from edtech.services.errors import ExtractionError

logger = logging.getLogger(__name__)

# Control characters that Postgres TEXT/VARCHAR cannot store (NUL, etc.)
_ILLEGAL_CHARS = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]")

_KIND_BY_SUFFIX: dict[str, DocumentKindType] = {
    ".pdf": "pdf",
    ".docx": "docx",
    ".txt": "txt",
    ".md": "txt",
}


class TextExtractor:
    """Turns an uploaded file into plain text. Binary content is never returned."""

    @staticmethod
    def detect_kind(filename: str) -> DocumentKindType:
        """
        Map a filename to a document kind.

        Raises:
            ExtractionError: If the extension is not supported
        """
        lowered = filename.lower()
        for suffix, kind in _KIND_BY_SUFFIX.items():
            if lowered.endswith(suffix):
                return kind
        raise ExtractionError(f"Unsupported file type: {filename}")

    async def extract(self, filename: str, data: bytes) -> tuple[DocumentKindType, str]:
        """
        Extract plain text from raw file bytes.

        Args:
            filename: Original filename, used to pick the parser
            data: Raw bytes of the file

        Returns:
            (kind, text) tuple

        Raises:
            ExtractionError: If the format is unsupported or parsing fails
        """
        kind = self.detect_kind(filename)
        try:
            if kind == "pdf":
                text = self._extract_pdf(data)
            elif kind == "docx":
                text = self._extract_docx(data)
            else:
                text = data.decode("utf-8", errors="replace")
        except ExtractionError:
            raise
        except Exception as e:
            logger.warning("Text extraction failed for %s: %s", filename, e)
            raise ExtractionError(f"Could not read text from {filename}.") from e

        text = _ILLEGAL_CHARS.sub("", text)
        if not text.strip():
            raise ExtractionError(f"No readable text found in {filename}")
        return kind, text

    @staticmethod
    def _extract_pdf(data: bytes) -> str:
        doc = pymupdf.open(stream=data, filetype="pdf")
        try:
            # Combine all pages with double newline separator
            return "\n\n".join(page.get_text() for page in doc)
        finally:
            doc.close()

    @staticmethod
    def _extract_docx(data: bytes) -> str:
        document = docx.Document(io.BytesIO(data))
        paragraphs = [para.text for para in document.paragraphs if para.text.strip()]
        return "\n\n".join(paragraphs)


# Singleton instance
text_extractor = TextExtractor()
