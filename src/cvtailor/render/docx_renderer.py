from __future__ import annotations

from io import BytesIO

from docx import Document
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Inches, Pt, RGBColor
from docx.text.paragraph import Paragraph

from cvtailor.render.layout import Block, build_resume_layout
from cvtailor.types import ContactInfo, SynthesizedContent

PAGE_MARGIN = Inches(0.5)
BULLET_INDENT = Inches(0.25)
MUTED = RGBColor(0x66, 0x66, 0x66)
LINK_BLUE = RGBColor(0x00, 0x66, 0xCC)


def _add_bottom_rule(paragraph: Paragraph) -> None:
    p_pr = paragraph._p.get_or_add_pPr()
    borders = OxmlElement("w:pBdr")
    bottom = OxmlElement("w:bottom")
    bottom.set(qn("w:val"), "single")
    bottom.set(qn("w:sz"), "6")
    bottom.set(qn("w:space"), "1")
    bottom.set(qn("w:color"), "000000")
    borders.append(bottom)
    p_pr.append(borders)


def _centered(document, text: str, *, size: int, bold: bool = False, color: RGBColor | None = None) -> Paragraph:
    paragraph = document.add_paragraph()
    paragraph.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = paragraph.add_run(text)
    run.bold = bold
    run.font.size = Pt(size)
    if color is not None:
        run.font.color.rgb = color
    return paragraph


def _add_block(document, block: Block) -> None:
    if block.kind == "name":
        paragraph = _centered(document, block.text, size=16, bold=True)
        paragraph.paragraph_format.space_after = Pt(5)
    elif block.kind == "contact":
        paragraph = _centered(document, block.text, size=10)
        paragraph.paragraph_format.space_after = Pt(5)
    elif block.kind == "links":
        paragraph = _centered(document, block.text, size=9, color=LINK_BLUE)
        paragraph.paragraph_format.space_after = Pt(10)
    elif block.kind == "divider":
        paragraph = document.add_paragraph()
        _add_bottom_rule(paragraph)
        paragraph.paragraph_format.space_after = Pt(10)
    elif block.kind == "heading":
        paragraph = document.add_paragraph()
        run = paragraph.add_run(block.text)
        run.bold = True
        run.font.size = Pt(12)
        paragraph.paragraph_format.space_before = Pt(10)
        paragraph.paragraph_format.space_after = Pt(5)
    elif block.kind == "paragraph":
        paragraph = document.add_paragraph()
        paragraph.add_run(block.text).font.size = Pt(11)
        paragraph.paragraph_format.space_after = Pt(10)
    elif block.kind == "entry_title":
        paragraph = document.add_paragraph()
        lead = paragraph.add_run(block.lead)
        lead.bold = True
        lead.font.size = Pt(11)
        if block.text:
            paragraph.add_run(block.text).font.size = Pt(11)
        paragraph.paragraph_format.space_before = Pt(block.gap_before * 1.5)
        paragraph.paragraph_format.space_after = Pt(0)
    elif block.kind == "meta":
        paragraph = document.add_paragraph()
        run = paragraph.add_run(block.text)
        run.italic = True
        run.font.size = Pt(10)
        if block.muted:
            run.font.color.rgb = MUTED
        paragraph.paragraph_format.space_after = Pt(3)
    elif block.kind == "bullet":
        paragraph = document.add_paragraph()
        paragraph.add_run(block.text).font.size = Pt(11)
        paragraph.paragraph_format.left_indent = BULLET_INDENT
        paragraph.paragraph_format.space_after = Pt(0)
    else:
        raise ValueError(f"unsupported layout block '{block.kind}'")


def render_docx(content: SynthesizedContent, contact: ContactInfo) -> bytes:
    document = Document()
    for section in document.sections:
        section.top_margin = PAGE_MARGIN
        section.bottom_margin = PAGE_MARGIN
        section.left_margin = PAGE_MARGIN
        section.right_margin = PAGE_MARGIN

    normal = document.styles["Normal"]
    normal.font.name = "Calibri"
    normal.font.size = Pt(11)
    document.core_properties.title = f"{contact.full_name} - Resume"
    document.core_properties.author = contact.full_name

    for block in build_resume_layout(content, contact):
        _add_block(document, block)

    buffer = BytesIO()
    document.save(buffer)
    return buffer.getvalue()
