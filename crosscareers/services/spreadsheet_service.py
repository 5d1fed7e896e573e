"""
Excel workbook generation.

The model designs the workbook as JSON (sheets, rows, formulas, styles and
charts); openpyxl renders the design into an .xlsx file.
"""
import io
import logging
import re
import time
from typing import Optional

from openpyxl import Workbook
from openpyxl.chart import BarChart, LineChart, PieChart, Reference
from openpyxl.formatting.rule import CellIsRule
from openpyxl.styles import Border, Font, PatternFill, Side
from openpyxl.utils import get_column_letter, range_boundaries
from sqlalchemy.orm import Session

from crosscareers.core.errors import ApiError, BadGateway, BadRequest, NotFound
from crosscareers.db.models.spreadsheet import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    STATUS_PROCESSING,
    SpreadsheetGeneration,
)
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMRunner

logger = logging.getLogger(__name__)

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

MAX_INPUT_CHARS = 100000
MIN_INSTRUCTION_CHARS = 10
PREVIEW_CHARS = 1000
ERROR_CHARS = 1000

MAX_SHEETS = 10
MAX_ROWS = 1000
MAX_COLUMNS = 50
SHEET_NAME_CHARS = 31

CELL_REF = re.compile(r"^[A-Z]{1,3}[1-9][0-9]{0,6}$")
RANGE_REF = re.compile(r"^[A-Z]{1,3}[1-9][0-9]{0,6}:[A-Z]{1,3}[1-9][0-9]{0,6}$")
COLUMN_REF = re.compile(r"^[A-Z]{1,3}$")
HEX_COLOR = re.compile(r"^(?:[0-9A-F]{2})?[0-9A-F]{6}$")
SHEET_NAME_FORBIDDEN = re.compile(r"[\\/?*\[\]:]")
# External calls, DDE links and cross-workbook references
UNSAFE_FORMULA = re.compile(r"javascript|webservice|filterxml|register\.id|\bcall\s*\(|\||\[", re.IGNORECASE)

CHART_TYPES = {"bar": BarChart, "line": LineChart, "pie": PieChart}
CELL_IS_OPERATORS = {
    "between",
    "notBetween",
    "equal",
    "notEqual",
    "greaterThan",
    "lessThan",
    "greaterThanOrEqual",
    "lessThanOrEqual",
}

SYSTEM_PROMPT = "You are an expert Excel spreadsheet designer who produces clean, professional workbooks."

WORKBOOK_SHAPE = """{
  "sheets": [
    {
      "name": "Sheet1",
      "data": [["Header1", "Header2", "Header3"], ["Value1", 10, 2.5]],
      "formulas": {"C2": "A2*B2"},
      "styles": {
        "headers": {"fill": "4472C4", "font": {"color": "FFFFFF", "bold": true}},
        "columns": {"A": {"width": 20}, "B": {"width": 15, "numFmt": "#,##0.00"}},
        "conditionalFormats": [
          {"range": "C2:C100", "type": "cellIs", "operator": "greaterThan", "formula": [1000],
           "style": {"fill": "C6EFCE", "font": {"color": "006100"}}}
        ]
      },
      "charts": [{"type": "bar|line|pie", "title": "Sales Report", "dataRange": "A1:C10", "location": "E1"}]
    }
  ],
  "description": "Brief description of what was created"
}"""


def validate_request(input_text: str, format_instructions: Optional[str]) -> None:
    if not format_instructions or len(format_instructions.strip()) < MIN_INSTRUCTION_CHARS:
        raise BadRequest(f"Format instructions must be at least {MIN_INSTRUCTION_CHARS} characters long")
    if len(input_text or "") > MAX_INPUT_CHARS:
        raise BadRequest(f"Input text exceeds maximum length of {MAX_INPUT_CHARS} characters")


def build_prompt(input_text: str, format_instructions: str) -> str:
    return (
        "Create a professional Excel workbook from the input data and format instructions below.\n\n"
        f"Input Data:\n{input_text or 'No input data provided - create from scratch based on instructions'}\n\n"
        f"Format Instructions:\n{format_instructions}\n\n"
        f"Return JSON with this structure:\n{WORKBOOK_SHAPE}\n\n"
        "Rules:\n"
        "- Always include a header row.\n"
        "- Use numbers for numeric values, not strings.\n"
        "- Add formulas where calculations are needed; write them without the leading '='.\n"
        "- Never reference other workbooks or external data sources in formulas.\n"
        "- Colors are 6-digit hex values without '#'."
    )


# ============================================
# DESIGN NORMALIZATION
# ============================================

def _color(value, default: Optional[str]) -> Optional[str]:
    text = str(value or "").lstrip("#").upper()
    return text if HEX_COLOR.match(text) else default


def _sheet_name(raw, position: int, used: set) -> str:
    name = SHEET_NAME_FORBIDDEN.sub("", str(raw or ""))
    name = re.sub(r"\s+", " ", name).strip()[:SHEET_NAME_CHARS] or f"Sheet{position + 1}"
    base, suffix = name, 2
    while name.lower() in used:
        tail = f" ({suffix})"
        name = base[:SHEET_NAME_CHARS - len(tail)] + tail
        suffix += 1
    used.add(name.lower())
    return name


def _cell_value(value):
    if value is None or isinstance(value, (bool, int, float)):
        return value
    return str(value)


def _rows(data: list) -> list[list]:
    rows = []
    for row in data[:MAX_ROWS]:
        if not isinstance(row, list):
            raise ValueError("Each data row must be an array")
        rows.append([_cell_value(v) for v in row[:MAX_COLUMNS]])
    return rows


def _formulas(formulas) -> dict:
    if not isinstance(formulas, dict):
        return {}
    cleaned = {}
    for cell, formula in formulas.items():
        ref = str(cell).upper().replace("$", "")
        if not CELL_REF.match(ref):
            raise ValueError(f"Invalid formula cell reference: {cell}")
        if not isinstance(formula, str) or not formula.strip():
            raise ValueError(f"Formula for {cell} must be a string")
        body = formula.strip().lstrip("=").strip()
        if UNSAFE_FORMULA.search(body):
            raise ValueError(f"Potentially unsafe formula in cell {cell}")
        cleaned[ref] = body
    return cleaned


def _header_style(headers) -> Optional[dict]:
    if not isinstance(headers, dict):
        return None
    font = headers.get("font") if isinstance(headers.get("font"), dict) else {}
    return {
        "fill": _color(headers.get("fill"), "4472C4"),
        "fontColor": _color(font.get("color"), "FFFFFF"),
        "bold": font.get("bold") is not False,
    }


def _column_styles(columns) -> dict:
    if not isinstance(columns, dict):
        return {}
    cleaned = {}
    for letter, spec in columns.items():
        letter = str(letter).upper()
        if not COLUMN_REF.match(letter) or not isinstance(spec, dict):
            continue
        width = spec.get("width")
        cleaned[letter] = {
            "width": float(width) if isinstance(width, (int, float)) and not isinstance(width, bool) and 0 < width <= 255 else None,
            "numFmt": str(spec["numFmt"])[:64] if spec.get("numFmt") else None,
        }
    return cleaned


def _conditional_formats(rules) -> list[dict]:
    if not isinstance(rules, list):
        return []
    cleaned = []
    for rule in rules:
        if not isinstance(rule, dict) or rule.get("type", "cellIs") != "cellIs":
            continue
        ref = str(rule.get("range") or "").upper().replace("$", "")
        if not RANGE_REF.match(ref) or rule.get("operator") not in CELL_IS_OPERATORS:
            continue
        formula = rule.get("formula")
        formula = formula if isinstance(formula, list) else [formula]
        formula = [str(f) for f in formula if isinstance(f, (int, float, str)) and not isinstance(f, bool)]
        if not formula or any(UNSAFE_FORMULA.search(f) for f in formula):
            continue
        style = rule.get("style") if isinstance(rule.get("style"), dict) else {}
        font = style.get("font") if isinstance(style.get("font"), dict) else {}
        cleaned.append({
            "range": ref,
            "operator": rule["operator"],
            "formula": formula,
            "fill": _color(style.get("fill"), None),
            "fontColor": _color(font.get("color"), None),
        })
    return cleaned


def _charts(charts) -> list[dict]:
    if not isinstance(charts, list):
        return []
    cleaned = []
    for chart in charts:
        if not isinstance(chart, dict):
            continue
        data_range = str(chart.get("dataRange") or "").upper().replace("$", "")
        if not RANGE_REF.match(data_range):
            continue
        location = str(chart.get("location") or "E1").upper()
        cleaned.append({
            "type": chart.get("type") if chart.get("type") in CHART_TYPES else "bar",
            "title": str(chart.get("title") or "")[:200],
            "dataRange": data_range,
            "location": location if CELL_REF.match(location) else "E1",
        })
    return cleaned


def normalize_workbook(data) -> dict:
    """
    Validate the model's workbook design and clamp it to something renderable.

    Raises ValueError (so the runner retries) when sheets or rows are missing or a
    formula is malformed or unsafe. Unusable styles and charts are dropped.
    """
    if not isinstance(data, dict) or not isinstance(data.get("sheets"), list) or not data["sheets"]:
        raise ValueError("AI response must contain a non-empty sheets array")

    used_names = set()
    sheets = []
    for position, sheet in enumerate(data["sheets"][:MAX_SHEETS]):
        if not isinstance(sheet, dict) or not isinstance(sheet.get("data"), list):
            raise ValueError("Each sheet must have a data array")
        styles = sheet.get("styles") if isinstance(sheet.get("styles"), dict) else {}
        sheets.append({
            "name": _sheet_name(sheet.get("name"), position, used_names),
            "data": _rows(sheet["data"]),
            "formulas": _formulas(sheet.get("formulas")),
            "styles": {
                "headers": _header_style(styles.get("headers")),
                "columns": _column_styles(styles.get("columns")),
                "conditionalFormats": _conditional_formats(styles.get("conditionalFormats")),
            },
            "charts": _charts(sheet.get("charts")),
        })
    return {"sheets": sheets, "description": str(data.get("description") or "")}


# ============================================
# RENDERING
# ============================================

THIN = Side(style="thin")


def _write_rows(ws, rows: list[list]) -> None:
    for r, row in enumerate(rows, start=1):
        for c, value in enumerate(row, start=1):
            cell = ws.cell(row=r, column=c, value=value)
            # Data is never a formula; only the formulas map may add those
            if isinstance(value, str) and value.startswith("="):
                cell.data_type = "s"


def _apply_styles(ws, styles: dict, has_rows: bool) -> None:
    header = styles.get("headers")
    if header and has_rows:
        for cell in ws[1]:
            cell.fill = PatternFill(fill_type="solid", start_color=header["fill"], end_color=header["fill"])
            cell.font = Font(color=header["fontColor"], bold=header["bold"])
            cell.border = Border(top=THIN, left=THIN, bottom=THIN, right=THIN)

    for letter, spec in styles.get("columns", {}).items():
        if spec.get("width"):
            ws.column_dimensions[letter].width = spec["width"]
        if spec.get("numFmt"):
            for row in range(2, ws.max_row + 1):
                ws[f"{letter}{row}"].number_format = spec["numFmt"]

    for rule in styles.get("conditionalFormats", []):
        fill = PatternFill(fill_type="solid", start_color=rule["fill"], end_color=rule["fill"]) if rule["fill"] else None
        font = Font(color=rule["fontColor"]) if rule["fontColor"] else None
        ws.conditional_formatting.add(
            rule["range"],
            CellIsRule(operator=rule["operator"], formula=rule["formula"], fill=fill, font=font),
        )


def _add_chart(ws, spec: dict) -> None:
    min_col, min_row, max_col, max_row = range_boundaries(spec["dataRange"])
    chart = CHART_TYPES[spec["type"]]()
    if spec["title"]:
        chart.title = spec["title"]
    # First column holds the categories when the range spans several columns
    first_value_col = min_col + 1 if max_col > min_col else min_col
    values = Reference(ws, min_col=first_value_col, min_row=min_row, max_col=max_col, max_row=max_row)
    chart.add_data(values, titles_from_data=True)
    if first_value_col > min_col and max_row > min_row:
        chart.set_categories(Reference(ws, min_col=min_col, min_row=min_row + 1, max_row=max_row))
    ws.add_chart(chart, spec["location"])


def render_workbook(design: dict) -> bytes:
    """Render a normalized workbook design to .xlsx bytes."""
    workbook = Workbook()
    workbook.remove(workbook.active)
    workbook.properties.creator = "CrossCareers"

    for sheet in design["sheets"]:
        ws = workbook.create_sheet(title=sheet["name"])
        rows = sheet["data"]
        _write_rows(ws, rows)
        for ref, body in sheet["formulas"].items():
            ws[ref] = f"={body}"
        _apply_styles(ws, sheet["styles"], bool(rows))
        for chart in sheet["charts"]:
            _add_chart(ws, chart)

        width = max((len(row) for row in rows), default=0)
        if width:
            ws.auto_filter.ref = f"A1:{get_column_letter(width)}{len(rows)}"
            ws.freeze_panes = "A2"

    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


# ============================================
# GENERATION RECORDS
# ============================================

def _mark_failed(db: Session, record: SpreadsheetGeneration, message: str, started: float) -> None:
    record.status = STATUS_FAILED
    record.error = message[:ERROR_CHARS]
    record.processing_time_ms = int((time.perf_counter() - started) * 1000)
    db.commit()


def generate_spreadsheet(
    db: Session,
    runner: LLMRunner,
    user: User,
    input_text: str,
    format_instructions: str,
    file_name: Optional[str] = None,
    file_type: Optional[str] = None,
    file_size: Optional[int] = None,
) -> tuple[SpreadsheetGeneration, bytes]:
    """
    Design and render a workbook. The generation is recorded before the AI call
    and marked completed or failed afterwards.

    Returns (record, xlsx_bytes).
    """
    validate_request(input_text, format_instructions)
    started = time.perf_counter()

    record = SpreadsheetGeneration(
        user_id=user.id,
        input_preview=(input_text or "")[:PREVIEW_CHARS],
        format_instructions=format_instructions.strip()[:PREVIEW_CHARS],
        file_name=file_name,
        file_type=file_type,
        file_size=file_size,
        status=STATUS_PROCESSING,
    )
    db.add(record)
    db.commit()
    db.refresh(record)

    try:
        design = runner.generate_json(
            "spreadsheet",
            build_prompt(input_text, format_instructions.strip()),
            system=SYSTEM_PROMPT,
            validate=normalize_workbook,
        )
        data = render_workbook(design)
    except ApiError as e:
        logger.warning(f"Spreadsheet generation failed: id={record.id}, user_id={user.id}: {e.message}")
        _mark_failed(db, record, e.message, started)
        raise
    except Exception as e:
        logger.error(f"Workbook rendering failed: id={record.id}: {e}", exc_info=True)
        _mark_failed(db, record, str(e), started)
        raise BadGateway("Could not build a workbook from the AI design")

    record.status = STATUS_COMPLETED
    record.workbook = design
    record.description = design["description"]
    record.xlsx_data = data
    record.xlsx_size = len(data)
    record.processing_time_ms = int((time.perf_counter() - started) * 1000)
    db.commit()
    db.refresh(record)
    logger.info(
        f"Spreadsheet generated: id={record.id}, user_id={user.id}, "
        f"sheets={len(design['sheets'])}, ms={record.processing_time_ms}"
    )
    return record, data


def download_name(record: SpreadsheetGeneration) -> str:
    stem = (record.file_name or "").rsplit(".", 1)[0]
    stem = re.sub(r"[^A-Za-z0-9_-]+", "_", stem).strip("_")[:60]
    return f"{stem or 'generated'}.xlsx"


def get_generation(db: Session, user: User, generation_id: int) -> SpreadsheetGeneration:
    record = db.query(SpreadsheetGeneration).filter(
        SpreadsheetGeneration.id == generation_id,
        SpreadsheetGeneration.user_id == user.id,
    ).first()
    if not record:
        raise NotFound("Spreadsheet not found")
    return record


def get_download(db: Session, user: User, generation_id: int) -> tuple[bytes, str]:
    """Returns (data, filename)."""
    record = get_generation(db, user, generation_id)
    if record.status != STATUS_COMPLETED or not record.xlsx_data:
        raise BadRequest("Spreadsheet generation did not complete")
    return record.xlsx_data, download_name(record)


def list_generations(db: Session, user: User) -> list[SpreadsheetGeneration]:
    return (
        db.query(SpreadsheetGeneration)
        .filter(SpreadsheetGeneration.user_id == user.id)
        .order_by(SpreadsheetGeneration.created_at.desc(), SpreadsheetGeneration.id.desc())
        .all()
    )
