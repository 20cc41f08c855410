from __future__ import annotations

from cvtailor.types import ProfileData

RESUME_WRITER_PROMPT = """
You are a professional resume/CV writer. Your task is to generate a tailored, ATS-friendly resume based on the candidate's profile and the job description provided.

IMPORTANT GUIDELINES:
1. Tailor the resume to match the job requirements
2. Use action verbs and quantifiable achievements
3. Keep it concise and professional
4. Highlight relevant skills and experiences
5. Use keywords from the job description naturally
6. Format experience descriptions with bullet points
7. Do NOT fabricate information - only use what's provided

OUTPUT FORMAT (JSON):
{
  "summary": "Professional summary tailored to the job (2-3 sentences)",
  "skills": ["skill1", "skill2"],
  "experience": [
    {
      "position": "Job Title",
      "company": "Company Name",
      "location": "City, State",
      "period": "Start - End",
      "achievements": ["Achievement 1 with metrics", "Achievement 2"]
    }
  ],
  "education": [
    {
      "degree": "Degree Name",
      "institution": "School Name",
      "graduation": "Year",
      "details": "Optional details"
    }
  ],
  "certifications": ["Cert 1", "Cert 2"],
  "additionalSections": [
    {
      "title": "Section Title",
      "content": "Content"
    }
  ]
}
""".strip()

JOB_DETAILS_PROMPT = (
    "Extract the job title and company name from the following job description. "
    'Return as JSON: {"jobTitle": "...", "companyName": "..."}. '
    'If not found, use "Not specified".'
)


def _labeled(label: str, value: object) -> str | None:
    if value is None or value == "":
        return None
    return f"**{label}:** {value}"


def _period(start: str, end: str) -> str:
    if not start and not end:
        return ""
    return f"{start or 'Unknown'} - {end or 'Present'}"


def build_resume_user_prompt(profile: ProfileData, job_description: str) -> str:
    """Render the candidate profile and the job posting as the writer's user message.

    Fields the candidate left empty are dropped instead of being filled with
    placeholders, and sections without entries are left out entirely, so the
    model has nothing to invent from.
    """
    contact = profile.contact
    lines = [
        "Generate a tailored resume for the following candidate applying to this job:",
        "",
        "## CANDIDATE PROFILE",
        "",
    ]
    header = [
        _labeled("Name", contact.full_name),
        _labeled("Email", contact.email),
        _labeled("Phone", contact.phone),
        _labeled("Location", contact.address),
        _labeled("LinkedIn", contact.linkedin),
        _labeled("GitHub", contact.github),
        _labeled("Years of Experience", contact.experience_years or None),
    ]
    lines.extend(item for item in header if item)

    if profile.employment:
        lines.extend(["", "### Employment History"])
        for job in profile.employment:
            lines.append(f"- **{job.position}** at **{job.company}**")
            if job.location:
                lines.append(f"  Location: {job.location}")
            period = _period(job.start_date, job.end_date)
            if period:
                lines.append(f"  Period: {period}")
            if job.description:
                lines.append(f"  Description: {job.description}")

    if profile.education:
        lines.extend(["", "### Education"])
        for edu in profile.education:
            lines.append(f"- **{edu.degree}** - {edu.institution}")
            if edu.location:
                lines.append(f"  Location: {edu.location}")
            if edu.graduation_date:
                lines.append(f"  Graduation: {edu.graduation_date}")
            if edu.gpa:
                lines.append(f"  GPA: {edu.gpa}")

    if profile.certifications:
        lines.extend(["", "### Certifications"])
        for cert in profile.certifications:
            line = f"- {cert.name}"
            if cert.issuer:
                line += f" ({cert.issuer})"
            if cert.date_obtained:
                line += f" - {cert.date_obtained}"
            if cert.expiry_date:
                line += f", expires {cert.expiry_date}"
            if cert.credential_id:
                line += f", credential {cert.credential_id}"
            lines.append(line)

    if profile.skills:
        lines.extend(["", "### Skills"])
        lines.append(", ".join(f"{skill.name} ({skill.proficiency})" for skill in profile.skills))

    if profile.additional_info:
        lines.extend(["", "### Additional Information"])
        for info in profile.additional_info:
            lines.append(f"- {info.category}: {info.content}")

    lines.extend(
        [
            "",
            "---",
            "",
            "## JOB DESCRIPTION",
            "",
            job_description,
            "",
            "---",
            "",
            "Generate a professional, tailored resume in the JSON format specified. "
            "Focus on making the candidate's experience relevant to this specific job.",
        ]
    )
    return "\n".join(lines)


def build_resume_messages(profile: ProfileData, job_description: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": RESUME_WRITER_PROMPT},
        {"role": "user", "content": build_resume_user_prompt(profile, job_description)},
    ]


def build_job_details_messages(job_text: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": JOB_DETAILS_PROMPT},
        {"role": "user", "content": job_text},
    ]
