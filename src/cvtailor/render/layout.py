"""Format-neutral resume layout shared by the DOCX and PDF encoders.

``build_resume_layout`` flattens synthesized content into an ordered list of
blocks. Both encoders walk the same list, so section order and omission rules
live in exactly one place.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from cvtailor.types import ContactInfo, SynthesizedContent

BlockKind = Literal[
    "name",
    "contact",
    "links",
    "divider",
    "heading",
    "paragraph",
    "entry_title",
    "meta",
    "bullet",
]

SKILL_SEPARATOR = " • "
BULLET = "•"


@dataclass(frozen=True, slots=True)
class Block:
    kind: BlockKind
    text: str = ""
    # bold leading run of an entry title ("Position" in "Position | Company")
    lead: str = ""
    muted: bool = False
    gap_before: float = 0.0

    @property
    def full_text(self) -> str:
        return f"{self.lead}{self.text}"


def join_present(parts: list[str], separator: str = " | ") -> str:
    return separator.join(part.strip() for part in parts if part and part.strip())


def contact_line(contact: ContactInfo) -> str:
    return join_present([contact.email, contact.phone, contact.address])


def links_line(contact: ContactInfo) -> str:
    links = []
    if contact.linkedin:
        links.append(f"LinkedIn: {contact.linkedin}")
    if contact.github:
        links.append(f"GitHub: {contact.github}")
    return join_present(links)


def build_resume_layout(content: SynthesizedContent, contact: ContactInfo) -> list[Block]:
    blocks: list[Block] = [Block("name", contact.full_name)]

    contact_text = contact_line(contact)
    if contact_text:
        blocks.append(Block("contact", contact_text))
    link_text = links_line(contact)
    if link_text:
        blocks.append(Block("links", link_text))
    blocks.append(Block("divider"))

    if content.summary.strip():
        blocks.append(Block("heading", "PROFESSIONAL SUMMARY"))
        blocks.append(Block("paragraph", content.summary.strip()))

    skills = [skill.strip() for skill in content.skills if skill and skill.strip()]
    if skills:
        blocks.append(Block("heading", "SKILLS"))
        blocks.append(Block("paragraph", SKILL_SEPARATOR.join(skills)))

    if content.experience:
        blocks.append(Block("heading", "PROFESSIONAL EXPERIENCE"))
        for job in content.experience:
            title_rest = f" | {job.company}" if job.company else ""
            blocks.append(Block("entry_title", title_rest, lead=job.position, gap_before=5))
            meta = join_present([job.location, job.period])
            if meta:
                blocks.append(Block("meta", meta, muted=True))
            for achievement in job.achievements:
                if achievement and achievement.strip():
                    blocks.append(Block("bullet", f"{BULLET} {achievement.strip()}"))

    if content.education:
        blocks.append(Block("heading", "EDUCATION"))
        for edu in content.education:
            title_rest = f" - {edu.institution}" if edu.institution else ""
            blocks.append(Block("entry_title", title_rest, lead=edu.degree))
            meta = join_present([edu.graduation, edu.details])
            if meta:
                blocks.append(Block("meta", meta))

    certifications = [cert.strip() for cert in content.certifications if cert and cert.strip()]
    if certifications:
        blocks.append(Block("heading", "CERTIFICATIONS"))
        for cert in certifications:
            blocks.append(Block("bullet", f"{BULLET} {cert}"))

    for section in content.additional_sections:
        if not section.title.strip() and not section.content.strip():
            continue
        if section.title.strip():
            blocks.append(Block("heading", section.title.strip().upper()))
        if section.content.strip():
            blocks.append(Block("paragraph", section.content.strip()))

    return blocks
