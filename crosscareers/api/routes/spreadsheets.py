"""
Excel workbook generator endpoints.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Response, UploadFile
from sqlalchemy.orm import Session

from crosscareers.core.auth_dependency import get_current_user, get_db, require_full_access
from crosscareers.db.models.spreadsheet import SpreadsheetGeneration
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMRunner, get_llm_runner
from crosscareers.services import spreadsheet_service
from crosscareers.services.spreadsheet_service import XLSX_MEDIA_TYPE
from crosscareers.services.text_extraction import SPREADSHEET_INPUT_TYPES, extract_text, read_upload

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/excel", tags=["Spreadsheets"])


def _summary(record: SpreadsheetGeneration) -> dict:
    return {
        "id": record.id,
        "status": record.status,
        "description": record.description,
        "formatInstructions": record.format_instructions,
        "inputPreview": (record.input_preview or "")[:200],
        "fileName": record.file_name,
        "fileType": record.file_type,
        "fileSize": record.file_size,
        "xlsxSize": record.xlsx_size,
        "sheets": [s["name"] for s in (record.workbook or {}).get("sheets", [])],
        "error": record.error,
        "processingTimeMs": record.processing_time_ms,
        "createdAt": record.created_at.isoformat(),
    }


@router.post("/generate-excel")
async def generate_excel(
    input_text: Optional[str] = Form(None, alias="inputText"),
    format_instructions: Optional[str] = Form(None, alias="formatInstructions"),
    file: Optional[UploadFile] = File(None),
    user: User = Depends(require_full_access),
    db: Session = Depends(get_db),
    runner: LLMRunner = Depends(get_llm_runner),
):
    """Pasted text and an uploaded file are combined into the input data."""
    spreadsheet_service.validate_request(input_text or "", format_instructions)

    text = (input_text or "").strip()
    file_name = file_type = file_size = None
    if file is not None and file.filename:
        data, file_type = await read_upload(file, allowed=SPREADSHEET_INPUT_TYPES)
        file_name, file_size = file.filename, len(data)
        extracted = extract_text(data, file_type)
        text = f"{text}\n\n{extracted}" if text else extracted

    record, xlsx = spreadsheet_service.generate_spreadsheet(
        db,
        runner,
        user,
        text,
        format_instructions,
        file_name=file_name,
        file_type=file_type,
        file_size=file_size,
    )
    return Response(
        content=xlsx,
        media_type=XLSX_MEDIA_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="{spreadsheet_service.download_name(record)}"',
            "X-Generation-Id": str(record.id),
        },
    )


@router.get("/history")
def history(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    records = spreadsheet_service.list_generations(db, user)
    return {"success": True, "count": len(records), "generations": [_summary(r) for r in records]}


@router.get("/{generation_id}")
def details(generation_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    record = spreadsheet_service.get_generation(db, user, generation_id)
    return {"success": True, "generation": {**_summary(record), "workbook": record.workbook}}


@router.get("/{generation_id}/download")
def download(generation_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    data, filename = spreadsheet_service.get_download(db, user, generation_id)
    return Response(
        content=data,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
