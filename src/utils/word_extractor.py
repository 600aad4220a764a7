"""Turn uploaded word-list files into vocabulary words."""

import io
import logging
import re
from pathlib import Path
from typing import List

import pdfplumber
from pdfplumber.utils.exceptions import MalformedPDFException, PdfminerException

from config import ALLOWED_WORD_FILE_EXTENSIONS
from core.exceptions import WordExtractionError

logger = logging.getLogger(__name__)

WORD_PATTERN = re.compile(r"[A-Za-z][A-Za-z'-]*")


def tokenize_text(text: str) -> List[str]:
    """Split text into lower-cased words, keeping first-seen order and dropping repeats."""
    seen = set()
    words = []
    for match in WORD_PATTERN.finditer(text or ""):
        word = match.group(0).strip("'-").lower()
        if word and word not in seen:
            seen.add(word)
            words.append(word)
    return words


def _pdf_text(content: bytes) -> str:
    if not content.startswith(b"%PDF"):
        raise WordExtractionError("Invalid PDF file format")
    try:
        with pdfplumber.open(io.BytesIO(content)) as pdf:
            text_parts = []
            for page in pdf.pages:
                text = page.extract_text()
                if text:
                    text_parts.append(text)
    except (MalformedPDFException, PdfminerException) as e:
        raise WordExtractionError(f"Invalid or corrupted PDF file: {e}") from e
    return "\n".join(text_parts)


def extract_text(filename: str, content: bytes) -> str:
    """Decode an uploaded file into plain text.

    Raises:
        WordExtractionError: If the file type is unsupported or unreadable.
    """
    extension = Path(filename or "").suffix.lower()
    if extension not in ALLOWED_WORD_FILE_EXTENSIONS:
        raise WordExtractionError(
            f"Invalid file type. Allowed types: {', '.join(ALLOWED_WORD_FILE_EXTENSIONS)}"
        )
    if extension == ".pdf":
        return _pdf_text(content)
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise WordExtractionError("File is not valid UTF-8 text") from e


def extract_words(filename: str, content: bytes) -> List[str]:
    words = tokenize_text(extract_text(filename, content))
    logger.info("Extracted %d words from %s", len(words), filename)
    return words
