"""
Presentation generation: AI slide outline -> pptx (python-pptx) + pdf (reportlab).
"""
import io
import logging
import re
import time
from typing import Optional

from pptx import Presentation as PptxDeck
from pptx.dml.color import RGBColor
from pptx.enum.shapes import MSO_SHAPE
from pptx.util import Inches, Pt
from sqlalchemy import func
from sqlalchemy.orm import Session

from crosscareers.core.errors import BadRequest, NotFound
from crosscareers.db.models.presentation import Presentation
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMOutputError, LLMRunner
from crosscareers.services.pdf_reports import render_slides_pdf

logger = logging.getLogger(__name__)

PPTX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.presentationml.presentation"

MIN_SLIDES = 1
MAX_SLIDES = 50
MAX_BULLETS = 6
PREVIEW_CHARS = 1000
PROMPT_CONTENT_CHARS = 12000

DESIGNS = {
    "modern": {"primary": "2F5496", "secondary": "4472C4", "accent": "ED7D31", "text": "2F2F2F",
               "heading_font": "Calibri Light", "body_font": "Calibri"},
    "professional": {"primary": "404040", "secondary": "808080", "accent": "C00000", "text": "000000",
                     "heading_font": "Arial", "body_font": "Times New Roman"},
    "creative": {"primary": "5B9BD5", "secondary": "ED7D31", "accent": "A5A5A5", "text": "000000",
                 "heading_font": "Verdana", "body_font": "Georgia"},
    "minimalist": {"primary": "FFFFFF", "secondary": "F5F5F5", "accent": "333333", "text": "333333",
                   "heading_font": "Helvetica", "body_font": "Helvetica"},
    "corporate": {"primary": "1F4E79", "secondary": "2E75B6", "accent": "FFC000", "text": "1F1F1F",
                  "heading_font": "Garamond", "body_font": "Garamond"},
}

SYSTEM_PROMPT = "You are a professional presentation designer who turns source material into clear slide decks."


def validate_options(slide_count: int, design: str) -> None:
    if not MIN_SLIDES <= slide_count <= MAX_SLIDES:
        raise BadRequest(f"Slide count must be between {MIN_SLIDES} and {MAX_SLIDES}")
    if design not in DESIGNS:
        raise BadRequest("Invalid design option", details={"validOptions": list(DESIGNS)})


def _heading_color(palette: dict) -> str:
    # A white primary would vanish on the white content background
    return palette["accent"] if palette["primary"] == "FFFFFF" else palette["primary"]


def build_prompt(content: str, slide_count: int, design: str, include_graphics: bool) -> str:
    return (
        f"Create a {slide_count}-slide presentation in a {design} style from the content below.\n"
        f"Each slide needs a short title, 3 to {MAX_BULLETS} concise bullets and one or two sentences of speaker notes.\n"
        + ("Where a chart or diagram would help, describe it in the notes.\n" if include_graphics else "")
        + 'Return JSON: {"title": "...", "slides": [{"title": "...", "bullets": ["..."], "notes": "..."}]}\n\n'
        f"CONTENT:\n{content[:PROMPT_CONTENT_CHARS]}"
    )


def make_outline_validator(slide_count: int):
    def validate(data) -> dict:
        if not isinstance(data, dict) or not isinstance(data.get("slides"), list) or not data["slides"]:
            raise ValueError("Expected a non-empty 'slides' list")
        slides = []
        for item in data["slides"][:slide_count]:
            if not isinstance(item, dict) or not str(item.get("title") or "").strip():
                raise ValueError("Every slide needs a title")
            bullets = item.get("bullets") if isinstance(item.get("bullets"), list) else []
            slides.append({
                "title": str(item["title"]).strip(),
                "bullets": [str(b).strip() for b in bullets if str(b).strip()][:MAX_BULLETS],
                "notes": str(item.get("notes") or "").strip(),
            })
        title = str(data.get("title") or slides[0]["title"]).strip()
        return {"title": title, "slides": slides}
    return validate


def fallback_outline(content: str, slide_count: int) -> dict:
    """Split the source into sentences and deal them out as bullet slides."""
    sentences = [s.strip() for s in re.split(r"(?<=[.!?])\s+|\n+", content) if s.strip()]
    if not sentences:
        sentences = [content.strip()[:200]]
    title = sentences[0][:80]
    per_slide = max(1, min(MAX_BULLETS, -(-len(sentences) // slide_count)))
    slides = []
    for number, start in enumerate(range(0, len(sentences), per_slide), start=1):
        if number > slide_count:
            break
        chunk = sentences[start:start + per_slide]
        slides.append({
            "title": f"Part {number}: {' '.join(chunk[0].split()[:6])}",
            "bullets": [s[:200] for s in chunk],
            "notes": "",
        })
    return {"title": title, "slides": slides}


def generate_outline(runner: LLMRunner, content: str, slide_count: int, design: str, include_graphics: bool) -> dict:
    try:
        return runner.generate_json(
            "presentation",
            build_prompt(content, slide_count, design, include_graphics),
            system=SYSTEM_PROMPT,
            validate=make_outline_validator(slide_count),
        )
    except LLMOutputError as e:
        logger.warning(f"Slide outline unusable, chunking source instead: {e}")
        return fallback_outline(content, slide_count)


def _style_runs(text_frame, color: str, font: str, size: int, bold: bool = False) -> None:
    for paragraph in text_frame.paragraphs:
        for run in paragraph.runs:
            run.font.color.rgb = RGBColor.from_string(color)
            run.font.name = font
            run.font.size = Pt(size)
            run.font.bold = bold


def render_pptx(outline: dict, design: str, include_graphics: bool) -> bytes:
    palette = DESIGNS[design]
    deck = PptxDeck()
    deck.slide_width = Inches(13.333)
    deck.slide_height = Inches(7.5)

    cover = deck.slides.add_slide(deck.slide_layouts[0])
    cover.background.fill.solid()
    cover.background.fill.fore_color.rgb = RGBColor.from_string(palette["primary"])
    cover_color = palette["text"] if palette["primary"] == "FFFFFF" else "FFFFFF"
    cover.shapes.title.text = outline["title"]
    _style_runs(cover.shapes.title.text_frame, cover_color, palette["heading_font"], 40, bold=True)
    subtitle = cover.placeholders[1]
    subtitle.text = f"{len(outline['slides'])} slides"
    _style_runs(subtitle.text_frame, cover_color, palette["body_font"], 18)

    for slide_data in outline["slides"]:
        slide = deck.slides.add_slide(deck.slide_layouts[1])
        if include_graphics:
            bar = slide.shapes.add_shape(MSO_SHAPE.RECTANGLE, 0, 0, deck.slide_width, Inches(0.25))
            bar.fill.solid()
            bar.fill.fore_color.rgb = RGBColor.from_string(palette["accent"])
            bar.line.fill.background()

        slide.shapes.title.text = slide_data["title"]
        _style_runs(slide.shapes.title.text_frame, _heading_color(palette), palette["heading_font"], 32, bold=True)

        body = slide.placeholders[1].text_frame
        bullets = slide_data["bullets"] or [""]
        body.text = bullets[0]
        for bullet in bullets[1:]:
            body.add_paragraph().text = bullet
        _style_runs(body, palette["text"], palette["body_font"], 20)

        if slide_data.get("notes"):
            slide.notes_slide.notes_text_frame.text = slide_data["notes"]

    buffer = io.BytesIO()
    deck.save(buffer)
    return buffer.getvalue()


def generate_presentation(
    db: Session,
    runner: LLMRunner,
    user: User,
    content: str,
    slide_count: int,
    design: str,
    animation: bool,
    include_graphics: bool,
    source_type: str = "text",
    file_name: Optional[str] = None,
) -> Presentation:
    validate_options(slide_count, design)
    started = time.perf_counter()

    outline = generate_outline(runner, content, slide_count, design, include_graphics)
    pptx_data = render_pptx(outline, design, include_graphics)
    pdf_data = render_slides_pdf(outline["title"], outline["slides"], accent=f"#{_heading_color(DESIGNS[design])}")
    elapsed_ms = int((time.perf_counter() - started) * 1000)

    presentation = Presentation(
        user_id=user.id,
        title=outline["title"][:200],
        topic=outline["title"][:200],
        content_preview=content[:PREVIEW_CHARS],
        source_type=source_type,
        file_name=file_name,
        slide_count=len(outline["slides"]),
        design=design,
        animation=animation,
        include_graphics=include_graphics,
        slides=outline["slides"],
        pptx_data=pptx_data,
        pdf_data=pdf_data,
        pptx_size=len(pptx_data),
        pdf_size=len(pdf_data),
        processing_time_ms=elapsed_ms,
    )
    db.add(presentation)
    db.commit()
    db.refresh(presentation)
    logger.info(
        f"Presentation generated: id={presentation.id}, user_id={user.id}, "
        f"slides={presentation.slide_count}, design={design}, ms={elapsed_ms}"
    )
    return presentation


def get_presentation(db: Session, user: User, presentation_id: int) -> Presentation:
    presentation = db.query(Presentation).filter(
        Presentation.id == presentation_id,
        Presentation.user_id == user.id,
    ).first()
    if not presentation:
        raise NotFound("Presentation not found")
    return presentation


def list_presentations(db: Session, user: User, page: int = 1, limit: int = 10) -> dict:
    page = max(1, page)
    limit = max(1, min(limit, 100))
    query = db.query(Presentation).filter(Presentation.user_id == user.id)
    total = query.count()
    items = (
        query.order_by(Presentation.created_at.desc(), Presentation.id.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return {
        "items": items,
        "pagination": {"page": page, "limit": limit, "total": total, "pages": -(-total // limit)},
    }


def get_download(db: Session, user: User, file_type: str, presentation_id: int) -> tuple[bytes, str, str]:
    """Returns (data, media_type, filename)."""
    if file_type not in ("pptx", "pdf"):
        raise BadRequest("Invalid file type. Use pptx or pdf")
    presentation = get_presentation(db, user, presentation_id)
    safe_title = re.sub(r"[^A-Za-z0-9_-]+", "_", presentation.title).strip("_")[:60] or "presentation"
    if file_type == "pptx":
        return presentation.pptx_data, PPTX_MEDIA_TYPE, f"{safe_title}.pptx"
    return presentation.pdf_data, "application/pdf", f"{safe_title}.pdf"


def get_stats(db: Session, user: User) -> dict:
    scoped = db.query(Presentation).filter(Presentation.user_id == user.id)
    total, avg_slides, avg_ms = scoped.with_entities(
        func.count(Presentation.id),
        func.avg(Presentation.slide_count),
        func.avg(Presentation.processing_time_ms),
    ).one()
    by_design = dict(
        scoped.with_entities(Presentation.design, func.count(Presentation.id))
        .group_by(Presentation.design)
        .all()
    )
    recent = (
        scoped.with_entities(Presentation.topic, Presentation.created_at)
        .order_by(Presentation.created_at.desc(), Presentation.id.desc())
        .limit(5)
        .all()
    )
    return {
        "totalPresentations": total or 0,
        "avgSlideCount": round(float(avg_slides), 1) if avg_slides is not None else 0,
        "designs": by_design,
        "withAnimation": scoped.filter(Presentation.animation.is_(True)).count(),
        "withGraphics": scoped.filter(Presentation.include_graphics.is_(True)).count(),
        "avgProcessingTimeMs": int(avg_ms) if avg_ms is not None else 0,
        "recentTopics": [
            {"topic": topic, "createdAt": created_at.isoformat()} for topic, created_at in recent
        ],
    }
