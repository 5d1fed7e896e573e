"""
PDF rendering with reportlab.
"""
import html
import io
from typing import Optional

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4, landscape
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import HRFlowable, PageBreak, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle


def _styles() -> dict:
    sample = getSampleStyleSheet()
    return {
        "title": ParagraphStyle("ReportTitle", parent=sample["Title"], fontSize=20, spaceAfter=10),
        "heading": ParagraphStyle("ReportHeading", parent=sample["Heading2"], fontSize=13, spaceBefore=8),
        "body": ParagraphStyle("ReportBody", parent=sample["BodyText"], fontSize=10, leading=14),
        "muted": ParagraphStyle("ReportMuted", parent=sample["BodyText"], fontSize=9, textColor=colors.grey),
        "bullet": ParagraphStyle("ReportBullet", parent=sample["BodyText"], fontSize=11, leftIndent=14, leading=16),
    }


def _p(text, style) -> Paragraph:
    return Paragraph(html.escape(str(text or "")).replace("\n", "<br/>"), style)


def render_exam_report(session) -> bytes:
    """Written test report: summary table followed by every question with its grading."""
    styles = _styles()
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=A4, title=f"Exam {session.id}")
    questions = session.questions or []

    story = [
        _p(f"Written Test Report: {session.job_title}", styles["title"]),
        _p(f"Session #{session.id}", styles["muted"]),
        Spacer(1, 8),
    ]
    summary = Table(
        [
            ["Status", session.status],
            ["Score", f"{session.total_score} / {len(questions)}"],
            ["Experience", f"{session.experience_years} years"],
            ["Duration", f"{session.duration_minutes} minutes"],
            ["Started", session.started_at.strftime("%Y-%m-%d %H:%M") if session.started_at else "-"],
            ["Completed", session.completed_at.strftime("%Y-%m-%d %H:%M") if session.completed_at else "-"],
        ],
        colWidths=[110, doc.width - 110],
    )
    summary.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (0, -1), colors.HexColor("#EEF2F7")),
        ("GRID", (0, 0), (-1, -1), 0.5, colors.HexColor("#CBD5E1")),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
    ]))
    story.extend([summary, Spacer(1, 12)])

    for q in questions:
        story.append(HRFlowable(width="100%", color=colors.HexColor("#CBD5E1")))
        story.append(_p(f"Q{q.get('index', 0) + 1} ({q.get('difficulty', 'medium')}): {q.get('question')}", styles["heading"]))
        story.append(_p(f"Your answer: {q.get('userAnswer') or '(not answered)'}", styles["body"]))
        if "score" in q:
            verdict = "Correct" if q.get("isCorrect") else "Incorrect"
            story.append(_p(f"Result: {verdict} (score {q.get('score', 0)})", styles["body"]))
        if q.get("feedback"):
            story.append(_p(f"Feedback: {q['feedback']}", styles["body"]))
        if q.get("correctedAnswer"):
            story.append(_p(f"Corrected answer: {q['correctedAnswer']}", styles["body"]))
        if q.get("idealAnswer"):
            story.append(_p(f"Ideal answer: {q['idealAnswer']}", styles["muted"]))
        story.append(Spacer(1, 6))

    doc.build(story)
    return buffer.getvalue()


def render_slides_pdf(title: str, slides: list[dict], accent: Optional[str] = None) -> bytes:
    """One landscape page per slide."""
    styles = _styles()
    if accent:
        styles["title"].textColor = colors.HexColor(accent)
        styles["heading"].textColor = colors.HexColor(accent)
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(buffer, pagesize=landscape(A4), title=title)

    story = [Spacer(1, 120), _p(title, styles["title"])]
    for slide in slides:
        story.append(PageBreak())
        story.append(_p(slide.get("title"), styles["heading"]))
        story.append(Spacer(1, 10))
        for bullet in slide.get("bullets") or []:
            story.append(Paragraph(html.escape(str(bullet)), styles["bullet"], bulletText="•"))
        if slide.get("notes"):
            story.append(Spacer(1, 14))
            story.append(_p(slide["notes"], styles["muted"]))

    doc.build(story)
    return buffer.getvalue()
