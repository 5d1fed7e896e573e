"""
Word (.docx) rendering with python-docx.
"""
import io
import re

from docx import Document
from docx.shared import Pt

DOCX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

BULLET_LINE = re.compile(r"^\s*[-•*]\s+")
MARKDOWN_HEADING = re.compile(r"^(#{1,3})\s+(.*)$")


def _to_bytes(doc) -> bytes:
    buffer = io.BytesIO()
    doc.save(buffer)
    return buffer.getvalue()


def _add_text_block(doc, text: str) -> None:
    """Plain text: blank lines split paragraphs, ``-`` lines become bullets, ``#`` lines headings."""
    for block in re.split(r"\n\s*\n", text.strip()):
        for line in block.splitlines():
            stripped = line.strip()
            if not stripped:
                continue
            heading = MARKDOWN_HEADING.match(stripped)
            if heading:
                doc.add_heading(heading.group(2).strip(), level=len(heading.group(1)))
            elif BULLET_LINE.match(stripped):
                doc.add_paragraph(BULLET_LINE.sub("", stripped), style="List Bullet")
            else:
                doc.add_paragraph(stripped)


def render_text_docx(text: str) -> bytes:
    doc = Document()
    style = doc.styles["Normal"]
    style.font.name = "Calibri"
    style.font.size = Pt(11)
    _add_text_block(doc, text or "")
    return _to_bytes(doc)


def render_structured_docx(content: dict) -> bytes:
    """Render a generated document structure: title, subtitle, sections and metadata."""
    doc = Document()
    doc.add_heading(content.get("title") or "Document", level=0)
    if content.get("subtitle"):
        doc.add_paragraph(content["subtitle"], style="Subtitle")

    for section in content.get("sections") or []:
        if section.get("title"):
            doc.add_heading(section["title"], level=1)
        if section.get("content"):
            _add_text_block(doc, str(section["content"]))
        for bullet in section.get("bullets") or []:
            doc.add_paragraph(str(bullet), style="List Bullet")

    metadata = content.get("metadata") or {}
    if metadata.get("recommendations"):
        doc.add_heading("Recommendations", level=1)
        for item in metadata["recommendations"]:
            doc.add_paragraph(str(item), style="List Bullet")
    if metadata.get("references"):
        doc.add_heading("References", level=1)
        for item in metadata["references"]:
            doc.add_paragraph(str(item), style="List Number")
    return _to_bytes(doc)
