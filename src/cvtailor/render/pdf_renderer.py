"""PDF resume encoder with manual text layout on a ReportLab canvas.

Text is measured with the standard Helvetica metrics, wrapped greedily at
word boundaries and drawn line by line. ``PdfLayout`` owns the only mutable
layout state (current page and vertical cursor) and is created fresh for
every document.
"""

from __future__ import annotations

from collections.abc import Callable
from io import BytesIO
from typing import Any

from reportlab.lib.pagesizes import letter
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen.canvas import Canvas

from cvtailor.render.layout import Block, build_resume_layout
from cvtailor.types import ContactInfo, SynthesizedContent

PAGE_WIDTH, PAGE_HEIGHT = letter
MARGIN = 50
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
TOP_MARGIN = 50
BOTTOM_MARGIN = 50
SECTION_BREAK_MARGIN = 80
LINE_HEIGHT = 14
SECTION_GAP = 20
BULLET_INDENT = 10

FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"
NAME_SIZE = 18
HEADING_SIZE = 12
BODY_SIZE = 10
SMALL_SIZE = 9

BLACK = (0.0, 0.0, 0.0)
MUTED = (0.4, 0.4, 0.4)
LINK_BLUE = (0.0, 0.4, 0.8)
RULE_GREY = (0.2, 0.2, 0.2)

Color = tuple[float, float, float]


def wrap_text(text: str, max_width: float, measure: Callable[[str], float]) -> list[str]:
    """Greedy word wrap: break before the word that would overflow ``max_width``.

    Words are never split; a word wider than the limit gets a line of its own.
    """
    lines: list[str] = []
    current = ""
    for word in text.split():
        candidate = f"{current} {word}" if current else word
        if current and measure(candidate) > max_width:
            lines.append(current)
            current = word
        else:
            current = candidate
    if current:
        lines.append(current)
    return lines


class PdfLayout:
    """Vertical cursor and page state for one PDF being drawn.

    Transitions: ``draw_line`` moves the cursor down one line and opens a new
    page first if the cursor is already below the bottom margin;
    ``start_section`` adds the section gap and opens a new page if the heading
    would start below the section break margin. ``finish`` flushes the last
    page.
    """

    def __init__(
        self,
        canvas: Any,
        *,
        page_width: float = PAGE_WIDTH,
        page_height: float = PAGE_HEIGHT,
        margin: float = MARGIN,
        top_margin: float = TOP_MARGIN,
        bottom_margin: float = BOTTOM_MARGIN,
        section_break_margin: float = SECTION_BREAK_MARGIN,
        line_height: float = LINE_HEIGHT,
        section_gap: float = SECTION_GAP,
        measure: Callable[[str, str, float], float] = stringWidth,
    ):
        self.canvas = canvas
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.top_margin = top_margin
        self.bottom_margin = bottom_margin
        self.section_break_margin = section_break_margin
        self.line_height = line_height
        self.section_gap = section_gap
        self.measure = measure
        self.page_number = 1
        self.cursor_y = page_height - top_margin

    @property
    def content_width(self) -> float:
        return self.page_width - 2 * self.margin

    def new_page(self) -> None:
        self.canvas.showPage()
        self.page_number += 1
        self.cursor_y = self.page_height - self.top_margin

    def skip(self, amount: float) -> None:
        self.cursor_y -= amount

    def draw_line(self, text: str, *, x: float, font: str, size: float, color: Color = BLACK) -> None:
        if self.cursor_y < self.bottom_margin:
            self.new_page()
        self.canvas.setFillColorRGB(*color)
        self.canvas.setFont(font, size)
        self.canvas.drawString(x, self.cursor_y, text)
        self.cursor_y -= self.line_height

    def draw_text(
        self,
        text: str,
        *,
        indent: float = 0,
        font: str = FONT,
        size: float = BODY_SIZE,
        color: Color = BLACK,
    ) -> None:
        max_width = self.content_width - indent

        def width(value: str) -> float:
            return self.measure(value, font, size)

        for paragraph in text.splitlines():
            for line in wrap_text(paragraph, max_width, width):
                self.draw_line(line, x=self.margin + indent, font=font, size=size, color=color)

    def draw_centered(self, text: str, *, font: str, size: float, color: Color = BLACK) -> None:
        def width(value: str) -> float:
            return self.measure(value, font, size)

        for line in wrap_text(text, self.content_width, width):
            self.draw_line(line, x=self.page_width / 2 - width(line) / 2, font=font, size=size, color=color)

    def start_section(self, title: str) -> None:
        self.cursor_y -= self.section_gap
        if self.cursor_y < self.section_break_margin:
            self.new_page()
        self.draw_text(title.upper(), font=BOLD_FONT, size=HEADING_SIZE)
        self.cursor_y -= 5
        self.canvas.setStrokeColorRGB(*RULE_GREY)
        self.canvas.setLineWidth(1)
        rule_y = self.cursor_y + 5
        self.canvas.line(self.margin, rule_y, self.page_width - self.margin, rule_y)

    def finish(self) -> None:
        self.canvas.save()


def _draw_block(layout: PdfLayout, block: Block) -> None:
    if block.kind == "name":
        layout.draw_centered(block.text, font=BOLD_FONT, size=NAME_SIZE)
        layout.skip(5)
    elif block.kind == "contact":
        layout.draw_centered(block.text, font=FONT, size=SMALL_SIZE)
    elif block.kind == "links":
        layout.draw_centered(block.text, font=FONT, size=SMALL_SIZE, color=LINK_BLUE)
    elif block.kind == "divider":
        # the first section heading draws its own rule
        return
    elif block.kind == "heading":
        layout.start_section(block.text)
    elif block.kind == "paragraph":
        layout.draw_text(block.text)
    elif block.kind == "entry_title":
        layout.skip(block.gap_before)
        layout.draw_text(block.full_text, font=BOLD_FONT)
    elif block.kind == "meta":
        layout.draw_text(block.text, size=SMALL_SIZE, color=MUTED if block.muted else BLACK)
    elif block.kind == "bullet":
        layout.draw_text(block.text, indent=BULLET_INDENT)
    else:
        raise ValueError(f"unsupported layout block '{block.kind}'")


def render_pdf(content: SynthesizedContent, contact: ContactInfo) -> bytes:
    buffer = BytesIO()
    canvas = Canvas(buffer, pagesize=letter)
    canvas.setTitle(f"{contact.full_name} - Resume")
    canvas.setAuthor(contact.full_name)

    layout = PdfLayout(canvas)
    for block in build_resume_layout(content, contact):
        _draw_block(layout, block)
    layout.finish()
    return buffer.getvalue()
