"""
Text extraction from uploaded resumes.
- pdfplumber for PDFs (text + tables)
- python-docx for DOCX
- plain decode for text formats
"""

import logging
from io import BytesIO
from pathlib import Path

import docx
import pdfplumber

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = (".txt", ".md")


def extract_text(file_bytes: bytes, filename: str) -> tuple[str, dict]:
    """Extract text from a file. Returns (text, metadata)."""
    ext = Path(filename).suffix.lower()
    metadata = {"filename": filename}

    if ext == ".pdf":
        text = _extract_pdf(file_bytes)
        metadata["extractor"] = "pdfplumber"
    elif ext == ".docx":
        text = _extract_docx(file_bytes)
        metadata["extractor"] = "python-docx"
    elif ext in TEXT_EXTENSIONS:
        text = file_bytes.decode("utf-8", errors="replace")
        metadata["extractor"] = "plaintext"
    else:
        text = ""
        metadata["extractor"] = "unsupported"

    metadata["char_count"] = len(text)
    return text, metadata


def _extract_pdf(file_bytes: bytes) -> str:
    try:
        pages_text = []
        with pdfplumber.open(BytesIO(file_bytes)) as pdf:
            for page in pdf.pages:
                text = page.extract_text() or ""
                for table in page.extract_tables() or []:
                    for row in table:
                        if row:
                            text += "\n" + " | ".join(str(cell) if cell else "" for cell in row)
                pages_text.append(text)
        return "\n\n".join(pages_text)
    except Exception as e:
        logger.error("pdfplumber extraction failed: %s", e)
        return ""


def _extract_docx(file_bytes: bytes) -> str:
    try:
        document = docx.Document(BytesIO(file_bytes))
        return "\n\n".join(para.text for para in document.paragraphs if para.text)
    except Exception as e:
        logger.error("DOCX extraction failed: %s", e)
        return ""
