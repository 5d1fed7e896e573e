import csv
import io
import logging
from typing import Optional

import fitz  # pymupdf
from docx import Document as DocxDocument
from fastapi import UploadFile
from openpyxl import load_workbook

from crosscareers.core.config import MAX_UPLOAD_MB
from crosscareers.core.errors import BadRequest, PayloadTooLarge

logger = logging.getLogger(__name__)

PDF = "application/pdf"
DOCX = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
TEXT = "text/plain"
XLSX = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

ALLOWED_CONTENT_TYPES = {PDF, DOCX, TEXT}
SPREADSHEET_INPUT_TYPES = ALLOWED_CONTENT_TYPES | {XLSX}

EXTENSION_TYPES = {
    ".pdf": PDF,
    ".docx": DOCX,
    ".txt": TEXT,
    ".xlsx": XLSX,
}


def resolve_content_type(filename: str, content_type: str, allowed: set = ALLOWED_CONTENT_TYPES) -> str:
    """Trust the declared type when it is known, otherwise fall back to the extension."""
    if content_type in allowed:
        return content_type
    lowered = (filename or "").lower()
    for extension, mapped in EXTENSION_TYPES.items():
        if lowered.endswith(extension) and mapped in allowed:
            return mapped
    raise BadRequest(f"Unsupported file type: {content_type or filename}")


async def read_upload(
    file: UploadFile,
    max_mb: int = MAX_UPLOAD_MB,
    allowed: set = ALLOWED_CONTENT_TYPES,
) -> tuple[bytes, str]:
    """Read at most one byte past the size limit. Returns (data, content_type)."""
    content_type = resolve_content_type(file.filename, file.content_type, allowed)
    limit = max_mb * 1024 * 1024
    data = await file.read(limit + 1)
    if len(data) > limit:
        raise PayloadTooLarge(f"File exceeds the {max_mb}MB limit")
    if not data:
        raise BadRequest("Uploaded file is empty")
    return data, content_type


def parse_pdf(data: bytes) -> str:
    text = ""
    with fitz.open(stream=data, filetype="pdf") as doc:
        for page in doc:
            text += page.get_text()
    return text


def parse_docx(data: bytes) -> str:
    document = DocxDocument(io.BytesIO(data))
    return "\n".join(paragraph.text for paragraph in document.paragraphs)


def parse_xlsx(data: bytes) -> str:
    """Every sheet as CSV under a ``# <sheet name>`` line."""
    workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    blocks = []
    try:
        for sheet in workbook.worksheets:
            buffer = io.StringIO()
            writer = csv.writer(buffer, lineterminator="\n")
            for row in sheet.iter_rows(values_only=True):
                writer.writerow(["" if value is None else value for value in row])
            rows = buffer.getvalue().strip()
            if rows:
                blocks.append(f"# {sheet.title}\n{rows}")
    finally:
        workbook.close()
    return "\n\n".join(blocks)


def extract_text(data: bytes, content_type: str) -> str:
    """Extract plain text from pdf, docx, xlsx or text bytes."""
    try:
        if content_type == PDF:
            text = parse_pdf(data)
        elif content_type == DOCX:
            text = parse_docx(data)
        elif content_type == XLSX:
            text = parse_xlsx(data)
        elif content_type == TEXT:
            try:
                text = data.decode("utf-8")
            except UnicodeDecodeError:
                raise BadRequest("Text files must be UTF-8 encoded")
        else:
            raise BadRequest(f"Unsupported file type: {content_type}")
    except BadRequest:
        raise
    except Exception as e:
        logger.warning(f"Text extraction failed for {content_type}: {e}")
        raise BadRequest("Could not read the uploaded file")

    text = text.strip()
    if not text:
        raise BadRequest("No text could be extracted from the uploaded file")
    return text


SOURCE_TYPES = {PDF: "pdf", DOCX: "docx", TEXT: "txt", XLSX: "xlsx"}


async def resolve_source(content: Optional[str], file: Optional[UploadFile]) -> tuple[str, str, Optional[str]]:
    """
    Pick the generation source. An uploaded file wins over pasted text.

    Returns (text, source_type, file_name).
    """
    if file is not None and file.filename:
        data, content_type = await read_upload(file)
        return extract_text(data, content_type), SOURCE_TYPES[content_type], file.filename
    if content and content.strip():
        return content.strip(), "text", None
    raise BadRequest("Provide either text content or a file upload")
