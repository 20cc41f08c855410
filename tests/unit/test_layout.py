from __future__ import annotations

from cvtailor.render.layout import build_resume_layout, contact_line, links_line
from cvtailor.types import ContactInfo, SynthesizedContent


def _headings(blocks) -> list[str]:
    return [block.text for block in blocks if block.kind == "heading"]


def test_empty_sections_are_omitted() -> None:
    content = SynthesizedContent(summary="Engineer", skills=["Python", "Go"])

    blocks = build_resume_layout(content, ContactInfo(full_name="Dana Reyes"))

    assert _headings(blocks) == ["PROFESSIONAL SUMMARY", "SKILLS"]
    assert blocks[0].kind == "name"
    assert [block.kind for block in blocks[:2]] == ["name", "divider"]


def test_section_order_and_entry_blocks() -> None:
    content = SynthesizedContent.model_validate(
        {
            "summary": "Engineer",
            "skills": ["Python"],
            "experience": [
                {
                    "position": "Senior Engineer",
                    "company": "Acme Corp",
                    "location": "Remote",
                    "period": "2020 - Present",
                    "achievements": ["Built backend systems", "  "],
                }
            ],
            "education": [{"degree": "BSc", "institution": "State University", "graduation": "2017"}],
            "certifications": ["AWS Solutions Architect"],
            "additionalSections": [{"title": "Languages", "content": "English, Spanish"}],
        }
    )

    blocks = build_resume_layout(content, ContactInfo(full_name="Dana Reyes"))

    assert _headings(blocks) == [
        "PROFESSIONAL SUMMARY",
        "SKILLS",
        "PROFESSIONAL EXPERIENCE",
        "EDUCATION",
        "CERTIFICATIONS",
        "LANGUAGES",
    ]
    titles = [block for block in blocks if block.kind == "entry_title"]
    assert titles[0].full_text == "Senior Engineer | Acme Corp"
    assert titles[0].lead == "Senior Engineer"
    assert titles[1].full_text == "BSc - State University"
    bullets = [block.text for block in blocks if block.kind == "bullet"]
    assert bullets == ["• Built backend systems", "• AWS Solutions Architect"]
    meta = [block for block in blocks if block.kind == "meta"]
    assert meta[0].text == "Remote | 2020 - Present"
    assert meta[0].muted is True


def test_skills_are_joined_with_bullet_separator() -> None:
    blocks = build_resume_layout(SynthesizedContent(skills=["Python", "", "SQL"]), ContactInfo(full_name="D"))

    paragraph = next(block for block in blocks if block.kind == "paragraph")
    assert paragraph.text == "Python • SQL"


def test_untitled_additional_section_renders_content_only() -> None:
    content = SynthesizedContent.model_validate({"additionalSections": [{"title": "", "content": "Volunteer"}]})

    blocks = build_resume_layout(content, ContactInfo(full_name="D"))

    assert _headings(blocks) == []
    assert blocks[-1].text == "Volunteer"


def test_header_lines_skip_missing_contact_fields() -> None:
    contact = ContactInfo(
        full_name="Dana Reyes",
        email="dana@example.com",
        address="Austin, TX",
        github="github.com/dana",
    )

    assert contact_line(contact) == "dana@example.com | Austin, TX"
    assert links_line(contact) == "GitHub: github.com/dana"
    kinds = [block.kind for block in build_resume_layout(SynthesizedContent(), contact)]
    assert kinds == ["name", "contact", "links", "divider"]
