"""
Structured document generation from text or an uploaded file.
"""
import html
import json
import logging
from typing import Optional

from sqlalchemy.orm import Session

from crosscareers.core.errors import BadRequest
from crosscareers.db.models.generated_content import GeneratedContent
from crosscareers.db.models.user import User
from crosscareers.llm.runner import LLMOutputError, LLMRunner

logger = logging.getLogger(__name__)

PROMPT_CONTENT_CHARS = 15000
FALLBACK_CONTENT_CHARS = 5000
PREVIEW_CHARS = 500

TYPE_GUIDES = {
    "general": "An engaging introduction, 3-5 main points with supporting details, conversational tone, simple language.",
    "concept": "A clear problem statement, proposed approach, expected outcomes and implementation considerations. "
               "Bullet points for key ideas, minimal technical detail.",
    "project_proposal": "Executive Summary, Background, Objectives, Methodology, Timeline, Budget Estimate and "
                        "Expected Outcomes as formal section headings.",
    "blog": "A catchy title, engaging introduction, 3-5 sections with subheadings, conversational tone and a "
            "call to action at the end.",
    "report": "Executive Summary, Methodology, Findings and Recommendations in formal language, with data "
              "visualization suggestions.",
    "article": "Introduction, body and conclusion in a neutral formal tone for an educated audience, with citations.",
    "essay": "A clear thesis, supporting arguments, citations and a conclusion summarizing the main points in an "
             "academic tone.",
    "summary": "Key points only in bullet form, concise language, no introduction or conclusion.",
}

SECTION_STYLES = ("heading1", "heading2", "normal")
COMPLEXITIES = ("basic", "intermediate", "advanced")


def validate_document_type(document_type: str) -> None:
    if document_type not in TYPE_GUIDES:
        raise BadRequest("Invalid document type", details={"validOptions": list(TYPE_GUIDES)})


def count_words(text: str) -> int:
    return len(text.split())


def build_prompt(
    content: str,
    document_type: str,
    style: str,
    word_count: Optional[int],
    page_count: Optional[int],
    include_charts: bool,
    include_images: bool,
) -> str:
    length = []
    if word_count:
        length.append(f"about {word_count} words")
    if page_count:
        length.append(f"about {page_count} pages")
    extras = []
    if include_charts:
        extras.append("suggest charts or tables where data is discussed")
    if include_images:
        extras.append("suggest an illustrative image for each major section")
    return (
        f"As a {document_type.replace('_', ' ')} specialist, rewrite the content below in a {style} tone.\n"
        f"Structure: {TYPE_GUIDES[document_type]}\n"
        + (f"Length: {', '.join(length)}.\n" if length else "")
        + (f"Also {' and '.join(extras)}.\n" if extras else "")
        + "Return JSON:\n"
        '{"title": "...", "subtitle": "...", "sections": [{"type": "...", "title": "...", "content": "...", '
        '"bullets": ["..."], "style": "heading1|heading2|normal"}], "metadata": {"recommendations": ["..."], '
        '"references": ["..."], "wordCount": 0, "complexity": "basic|intermediate|advanced"}}\n\n'
        f'CONTENT:\n"{content[:PROMPT_CONTENT_CHARS]}"'
    )


def _default_title(document_type: str) -> str:
    return document_type.replace("_", " ").title()


def _fallback_sections(content: str) -> list[dict]:
    return [{"type": "text", "title": "Content", "content": content[:FALLBACK_CONTENT_CHARS], "bullets": [], "style": "normal"}]


def _default_metadata(content: str) -> dict:
    return {"recommendations": [], "references": [], "wordCount": count_words(content), "complexity": "basic"}


def make_structure_validator(content: str, document_type: str):
    """Accept any JSON object and fill in whatever the model left out."""
    def validate(data) -> dict:
        if not isinstance(data, dict):
            raise ValueError("Expected an object")
        sections = []
        for item in data.get("sections") if isinstance(data.get("sections"), list) else []:
            if not isinstance(item, dict):
                continue
            body = item.get("content")
            sections.append({
                "type": str(item.get("type") or "text"),
                "title": str(item.get("title") or ""),
                "content": body if isinstance(body, str) else ("" if body is None else str(body)),
                "bullets": [str(b) for b in item.get("bullets") or [] if b] if isinstance(item.get("bullets"), list) else [],
                "style": item.get("style") if item.get("style") in SECTION_STYLES else "normal",
            })
        metadata = data.get("metadata") if isinstance(data.get("metadata"), dict) else {}
        defaults = _default_metadata(content)
        return {
            "title": str(data.get("title") or _default_title(document_type)),
            "subtitle": str(data.get("subtitle") or ""),
            "sections": sections or _fallback_sections(content),
            "metadata": {
                "recommendations": metadata.get("recommendations") if isinstance(metadata.get("recommendations"), list) else [],
                "references": metadata.get("references") if isinstance(metadata.get("references"), list) else [],
                "wordCount": metadata.get("wordCount") if isinstance(metadata.get("wordCount"), int) and metadata["wordCount"] > 0 else defaults["wordCount"],
                "complexity": metadata.get("complexity") if metadata.get("complexity") in COMPLEXITIES else "basic",
            },
        }
    return validate


def parse_client_structure(content: Optional[str]) -> Optional[dict]:
    """
    Read a document structure posted back by the client for Word export.

    Returns None when ``content`` is plain text. A JSON object with a
    ``sections`` list must hold only section objects and an object (or null)
    ``metadata``; anything else is a 400.
    """
    if not content or not content.strip().startswith("{"):
        return None
    try:
        parsed = json.loads(content)
    except json.JSONDecodeError:
        return None
    if not isinstance(parsed, dict) or not isinstance(parsed.get("sections"), list):
        return None
    if not all(isinstance(section, dict) for section in parsed["sections"]):
        raise BadRequest("Invalid document structure: every section must be an object")
    if parsed.get("metadata") is not None and not isinstance(parsed["metadata"], dict):
        raise BadRequest("Invalid document structure: metadata must be an object")

    structure = make_structure_validator("", "general")(parsed)
    structure["title"] = str(parsed.get("title") or "Document")
    if not parsed["sections"]:
        structure["sections"] = []
    return structure


def fallback_structure(content: str, document_type: str) -> dict:
    return {
        "title": _default_title(document_type),
        "subtitle": "",
        "sections": _fallback_sections(content),
        "metadata": _default_metadata(content),
    }


def render_html_preview(structure: dict) -> str:
    """HTML preview with every model-provided string escaped."""
    esc = html.escape
    parts = ['<div class="document-container">', f'<h1 class="document-title">{esc(structure["title"])}</h1>']
    if structure.get("subtitle"):
        parts.append(f'<h2 class="document-subtitle">{esc(structure["subtitle"])}</h2>')
    for section in structure["sections"]:
        parts.append(f'<section class="document-section {esc(section.get("type", ""))}">')
        if section.get("title"):
            tag = {"heading1": "h2", "heading2": "h3"}.get(section.get("style"), "h4")
            parts.append(f'<{tag} class="section-title">{esc(section["title"])}</{tag}>')
        if section.get("content"):
            parts.append(f'<div class="section-content">{esc(section["content"]).replace(chr(10), "<br>")}</div>')
        if section.get("bullets"):
            parts.append('<ul class="section-bullets">')
            parts.extend(f"<li>{esc(b)}</li>" for b in section["bullets"])
            parts.append("</ul>")
        parts.append("</section>")
    parts.append("</div>")
    return "".join(parts)


def generate_content(
    db: Session,
    runner: LLMRunner,
    user: User,
    content: str,
    document_type: str = "report",
    style: str = "professional",
    word_count: Optional[int] = None,
    page_count: Optional[int] = None,
    include_charts: bool = False,
    include_images: bool = False,
) -> GeneratedContent:
    validate_document_type(document_type)
    prompt = build_prompt(content, document_type, style, word_count, page_count, include_charts, include_images)
    try:
        structure = runner.generate_json(
            "document",
            prompt,
            validate=make_structure_validator(content, document_type),
        )
    except LLMOutputError as e:
        logger.warning(f"Document structure unusable, using plain layout: {e}")
        structure = fallback_structure(content, document_type)

    record = GeneratedContent(
        user_id=user.id,
        document_type=document_type,
        style=style,
        title=structure["title"][:200],
        source_preview=content[:PREVIEW_CHARS],
        content=structure,
        word_count=structure["metadata"]["wordCount"],
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info(f"Document generated: id={record.id}, user_id={user.id}, type={document_type}")
    return record


def list_history(db: Session, user: User) -> list[GeneratedContent]:
    return (
        db.query(GeneratedContent)
        .filter(GeneratedContent.user_id == user.id)
        .order_by(GeneratedContent.created_at.desc(), GeneratedContent.id.desc())
        .all()
    )
