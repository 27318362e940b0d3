# backend/app/core/parser.py
"""
Turns uploaded files into plain text.

Decoding is delegated to PyPDF2 (pdf) and python-docx (docx); this module only
picks the decoder and wraps its failures in DocumentParseError.
"""
import io
import logging
from dataclasses import dataclass
from typing import Optional

from PyPDF2 import PdfReader
import docx

logger = logging.getLogger(__name__)

PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TXT_MIME = "text/plain"

ALLOWED_TYPES = {PDF_MIME: "pdf", DOCX_MIME: "docx", TXT_MIME: "txt"}
ALLOWED_EXTENSIONS = {"pdf", "docx", "txt"}


class DocumentParseError(Exception):
    pass


class UnsupportedFileType(DocumentParseError):
    pass


@dataclass
class ParsedDocument:
    text: str
    filename: str
    file_type: str
    word_count: int
    page_count: Optional[int] = None

    @property
    def metadata(self) -> dict:
        return {
            "filename": self.filename,
            "file_type": self.file_type,
            "page_count": self.page_count,
            "word_count": self.word_count,
        }


def word_count(text: str) -> int:
    return len(text.split())


def file_extension(filename: str) -> str:
    if not filename or "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def is_allowed_upload(filename: str, content_type: Optional[str]) -> bool:
    return content_type in ALLOWED_TYPES or file_extension(filename) in ALLOWED_EXTENSIONS


def parse_pdf(data: bytes, filename: str) -> ParsedDocument:
    try:
        reader = PdfReader(io.BytesIO(data))
        # extract_text may return None for scanned pages
        text = "\n".join(page.extract_text() or "" for page in reader.pages)
        pages = len(reader.pages)
    except Exception as e:
        logger.exception("Failed to parse PDF %s", filename)
        raise DocumentParseError(f"Failed to parse PDF file: {e}") from e
    return ParsedDocument(
        text=text, filename=filename, file_type="pdf",
        word_count=word_count(text), page_count=pages,
    )


def parse_docx(data: bytes, filename: str) -> ParsedDocument:
    try:
        document = docx.Document(io.BytesIO(data))
        text = "\n".join(p.text for p in document.paragraphs)
    except Exception as e:
        logger.exception("Failed to parse DOCX %s", filename)
        raise DocumentParseError(f"Failed to parse DOCX file: {e}") from e
    return ParsedDocument(text=text, filename=filename, file_type="docx", word_count=word_count(text))


def parse_txt(data: bytes, filename: str) -> ParsedDocument:
    text = data.decode("utf-8", errors="replace")
    return ParsedDocument(text=text, filename=filename, file_type="txt", word_count=word_count(text))


def parse_document(data: bytes, filename: str, content_type: Optional[str] = None) -> ParsedDocument:
    """
    Dispatch on MIME type first, then on the file extension.
    Raises UnsupportedFileType for anything that is not pdf/docx/txt.
    """
    ext = file_extension(filename)
    if content_type == PDF_MIME or ext == "pdf":
        return parse_pdf(data, filename)
    if content_type == DOCX_MIME or ext == "docx":
        return parse_docx(data, filename)
    if content_type == TXT_MIME or ext == "txt":
        return parse_txt(data, filename)
    raise UnsupportedFileType(f"Unsupported file type: {content_type or ext or 'unknown'}")
