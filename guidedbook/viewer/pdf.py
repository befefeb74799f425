"""
PDF export - Paginated A4 document with the reader's answers.

Layout runs in two passes:
- layout_report: measures every unit (chapter title, block label, answer
  box) and assigns it a page and a top offset
- render_report_pdf: draws the laid-out pages with reportlab

Each unit is atomic. If a unit does not fit in the remaining page height,
a new page starts before it; answer boxes are never split.
"""

import io
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Callable, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from guidedbook.schemas import Report, ReportBlock


logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 50
BOX_PADDING = 15
CHAPTER_GAP = 20
CHAPTER_TITLE_HEIGHT = 40
CHAPTER_TITLE_ADVANCE = 25
LABEL_RESERVE = 20
BOX_GAP = 20
HEADER_ADVANCE = 25
HEADER_RULE_GAP = 30

# (font, size, leading)
LABEL_FONT = ("Helvetica-Bold", 12, 12)
PROMPT_FONT = ("Helvetica", 10, 10)
ANSWER_FONT = ("Helvetica-Bold", 11, 11)

DEFAULT_READER_NAME = "Usuário"
DEFAULT_FILENAME = "minhas-respostas.pdf"

SplitText = Callable[[str, str, float, float], list[str]]


@dataclass
class BoxLine:
    """One text line inside an answer box, offset from the box top."""
    text: str
    style: str  # "prompt" or "answer"
    offset: float


@dataclass
class LayoutUnit:
    """An atomic piece of the document placed on a page."""
    kind: str  # "chapter_title", "label" or "answer_box"
    page: int
    y: float  # distance from the top edge
    height: float
    lines: list[str] = field(default_factory=list)
    box_lines: list[BoxLine] = field(default_factory=list)


@dataclass
class PageLayout:
    pages: int
    units: list[LayoutUnit]

    def units_on_page(self, page: int) -> list[LayoutUnit]:
        return [unit for unit in self.units if unit.page == page]


def _box_entries(block: ReportBlock) -> list[tuple[Optional[str], str]]:
    if block.kind == "checklist":
        return [(None, f"• {entry.answer}") for entry in block.entries]
    return [(entry.prompt, entry.answer) for entry in block.entries]


def measure_answer_box(
    block: ReportBlock,
    width: float,
    split_text: SplitText = simpleSplit,
) -> tuple[float, list[BoxLine]]:
    """
    Measure an answer box.

    Returns:
        Tuple of (box height, positioned lines)
    """
    inner_width = width - BOX_PADDING * 2
    lines = []
    cursor = BOX_PADDING

    for prompt, answer in _box_entries(block):
        if prompt:
            font, size, leading = PROMPT_FONT
            for line in split_text(prompt, font, size, inner_width):
                lines.append(BoxLine(text=line, style="prompt", offset=cursor))
                cursor += leading
            cursor += 2

        font, size, leading = ANSWER_FONT
        answer_lines = []
        for paragraph in answer.splitlines() or [""]:
            answer_lines.extend(split_text(paragraph, font, size, inner_width) or [""])
        for index, line in enumerate(answer_lines):
            lines.append(BoxLine(text=line, style="answer", offset=cursor + 9 + index * leading))
        cursor += len(answer_lines) * leading + 10

    height = cursor + BOX_PADDING - 10
    return height, lines


def layout_report(
    report: Report,
    page_width: float = PAGE_WIDTH,
    page_height: float = PAGE_HEIGHT,
    margin: float = MARGIN,
    split_text: SplitText = simpleSplit,
) -> PageLayout:
    """
    Assign every report unit to a page.

    The first page starts below the document header. A unit that would
    cross the bottom margin moves to a fresh page, unless the current
    page is still empty.
    """
    usable_width = page_width - margin * 2
    bottom = page_height - margin
    page = 1
    y = margin + HEADER_ADVANCE + HEADER_RULE_GAP
    page_has_units = False
    units = []

    def reserve(height: float):
        nonlocal page, y, page_has_units
        if y + height > bottom and page_has_units:
            page += 1
            y = margin
            page_has_units = False

    for chapter_index, chapter in enumerate(report.chapters):
        if chapter_index > 0:
            y += CHAPTER_GAP

        reserve(CHAPTER_TITLE_HEIGHT)
        units.append(LayoutUnit(
            kind="chapter_title", page=page, y=y,
            height=CHAPTER_TITLE_ADVANCE, lines=[chapter.title],
        ))
        page_has_units = True
        y += CHAPTER_TITLE_ADVANCE

        for block in chapter.blocks:
            font, size, leading = LABEL_FONT
            label_lines = split_text(block.label, font, size, usable_width) if block.label else []
            label_height = len(label_lines) * leading + 5
            reserve(max(LABEL_RESERVE, label_height))
            if label_lines:
                units.append(LayoutUnit(
                    kind="label", page=page, y=y,
                    height=label_height, lines=label_lines,
                ))
                page_has_units = True
                y += label_height

            box_height, box_lines = measure_answer_box(block, usable_width, split_text)
            reserve(box_height)
            units.append(LayoutUnit(
                kind="answer_box", page=page, y=y,
                height=box_height, box_lines=box_lines,
            ))
            page_has_units = True
            y += box_height + BOX_GAP

    return PageLayout(pages=page, units=units)


# -----------------------------------------------------------------------------
# Rendering
# -----------------------------------------------------------------------------

def _draw_footer(c: canvas.Canvas, page: int):
    c.setFont("Helvetica-Oblique", 8)
    c.setFillColorRGB(150 / 255, 150 / 255, 150 / 255)
    c.drawRightString(PAGE_WIDTH - MARGIN, 20, f"Página {page}")


def _draw_header(c: canvas.Canvas, title: str, reader_name: str, on_date: date):
    top = PAGE_HEIGHT - MARGIN
    c.setFont("Helvetica-Bold", 18)
    c.setFillColorRGB(40 / 255, 40 / 255, 40 / 255)
    c.drawString(MARGIN, top, title)

    c.setFont("Helvetica", 10)
    c.setFillColorRGB(100 / 255, 100 / 255, 100 / 255)
    c.drawRightString(PAGE_WIDTH - MARGIN, top, f"{reader_name} | {on_date.strftime('%d/%m/%Y')}")

    rule_y = top - HEADER_ADVANCE
    c.setStrokeColorRGB(226 / 255, 232 / 255, 240 / 255)
    c.setLineWidth(0.5)
    c.line(MARGIN, rule_y, PAGE_WIDTH - MARGIN, rule_y)


def _draw_unit(c: canvas.Canvas, unit: LayoutUnit):
    usable_width = PAGE_WIDTH - MARGIN * 2

    if unit.kind == "chapter_title":
        c.setFont("Times-Bold", 18)
        c.setFillColorRGB(12 / 255, 74 / 255, 110 / 255)
        c.drawString(MARGIN, PAGE_HEIGHT - unit.y, unit.lines[0])

    elif unit.kind == "label":
        font, size, leading = LABEL_FONT
        c.setFont(font, size)
        c.setFillColorRGB(30 / 255, 41 / 255, 59 / 255)
        for index, line in enumerate(unit.lines):
            c.drawString(MARGIN, PAGE_HEIGHT - unit.y - index * leading, line)

    elif unit.kind == "answer_box":
        c.setFillColorRGB(248 / 255, 250 / 255, 252 / 255)
        c.setStrokeColorRGB(226 / 255, 232 / 255, 240 / 255)
        c.rect(MARGIN, PAGE_HEIGHT - unit.y - unit.height, usable_width, unit.height, stroke=1, fill=1)
        for line in unit.box_lines:
            if line.style == "prompt":
                font, size, _ = PROMPT_FONT
                c.setFillColorRGB(100 / 255, 107 / 255, 119 / 255)
            else:
                font, size, _ = ANSWER_FONT
                c.setFillColorRGB(30 / 255, 41 / 255, 59 / 255)
            c.setFont(font, size)
            c.drawString(MARGIN + BOX_PADDING, PAGE_HEIGHT - unit.y - line.offset, line.text)


def render_report_pdf(
    report: Report,
    reader_name: Optional[str] = None,
    on_date: Optional[date] = None,
) -> bytes:
    """
    Render the report as an A4 PDF.

    Args:
        report: Report from build_report
        reader_name: Name shown in the header (default: "Usuário")
        on_date: Date shown in the header (default: today)

    Returns:
        PDF document bytes
    """
    layout = layout_report(report)
    buffer = io.BytesIO()
    c = canvas.Canvas(buffer, pagesize=A4)
    c.setTitle(report.title)

    _draw_header(c, report.title, reader_name or DEFAULT_READER_NAME, on_date or date.today())
    for page in range(1, layout.pages + 1):
        if page > 1:
            c.showPage()
        _draw_footer(c, page)
        for unit in layout.units_on_page(page):
            _draw_unit(c, unit)

    c.save()
    logger.info(f"Rendered answers PDF: {layout.pages} pages, {report.answer_count} answers")
    return buffer.getvalue()
