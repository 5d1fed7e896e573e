"""
Tests for upload reading and text extraction.
"""
import asyncio
import io

import pytest
from fastapi import UploadFile
from openpyxl import Workbook
from starlette.datastructures import Headers

from crosscareers.core.errors import BadRequest, PayloadTooLarge
from crosscareers.services.text_extraction import (
    SPREADSHEET_INPUT_TYPES,
    XLSX,
    extract_text,
    read_upload,
    resolve_content_type,
)


class RecordingFile(io.BytesIO):
    """Remembers how many bytes each read asked for."""

    def __init__(self, data: bytes):
        super().__init__(data)
        self.requested = []

    def read(self, size=-1):
        self.requested.append(size)
        return super().read(size)


def _upload(data: bytes, filename="notes.txt", content_type="text/plain"):
    source = RecordingFile(data)
    return source, UploadFile(file=source, filename=filename, headers=Headers({"content-type": content_type}))


def test_oversize_upload_reads_only_past_the_limit():
    limit = 1024 * 1024
    source, upload = _upload(b"x" * (limit + 500))
    with pytest.raises(PayloadTooLarge):
        asyncio.run(read_upload(upload, max_mb=1))
    assert source.requested == [limit + 1]


def test_upload_within_limit():
    _, upload = _upload(b"hello")
    data, content_type = asyncio.run(read_upload(upload, max_mb=1))
    assert data == b"hello"
    assert content_type == "text/plain"


def test_invalid_utf8_text_is_rejected():
    with pytest.raises(BadRequest) as exc:
        extract_text(b"caf\xe9 menu", "text/plain")
    assert exc.value.message == "Text files must be UTF-8 encoded"


def test_invalid_utf8_upload_returns_400(client, headers, llm):
    response = client.post(
        "/doc/generate-content",
        files={"file": ("notes.txt", b"\xff\xfe broken", "text/plain")},
        headers=headers,
    )
    assert response.status_code == 400
    assert response.json()["message"] == "Text files must be UTF-8 encoded"
    assert llm.calls == []


def test_xlsx_only_accepted_where_allowed():
    assert resolve_content_type("data.xlsx", "application/octet-stream", SPREADSHEET_INPUT_TYPES) == XLSX
    with pytest.raises(BadRequest):
        resolve_content_type("data.xlsx", "application/octet-stream")


def test_xlsx_text_extraction():
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "People"
    sheet.append(["Name", "Age"])
    sheet.append(["Alice", 30])
    workbook.create_sheet("Empty")
    buffer = io.BytesIO()
    workbook.save(buffer)
    assert extract_text(buffer.getvalue(), XLSX) == "# People\nName,Age\nAlice,30"
