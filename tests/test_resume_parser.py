import zipfile

import pytest

from applypilot.models import ParsedResume
from applypilot.resume_parser import (
    classify_skill,
    extract_contact,
    extract_links,
    extract_location,
    extract_text,
    looks_binary,
    parse_resume_text,
)

SAMPLE = """Jane Doe
Austin, TX | jane.doe@example.com | (512) 555-0142
linkedin.com/in/janedoe | https://github.com/janedoe

Summary
Backend engineer with eight years of Python and distributed systems experience.
Enjoys mentoring and building reliable data pipelines.

Experience
Senior Engineer | Acme Corp
Jan 2021 - Present
- Led migration of billing services to Kubernetes
- Cut p99 latency by 40%

Software Engineer at Initech
2017 - 2020
- Built ETL jobs in Python and SQL

Education
University of Texas at Austin
B.S. Computer Science
2013 - 2017
GPA: 3.8

Skills
Languages: Python, Go, SQL
Tools: Docker, Jira, Figma
Communication, Mentoring

Projects
Ledger CLI
A command line budgeting tool
https://github.com/janedoe/ledger
- Parses bank CSV exports
"""


@pytest.mark.parametrize("raw", ["", "   \n\n", "%PDF-1.4 \x00\x01 endstream", "no headings at all", "•••"])
def test_parse_is_total(raw):
    parsed = parse_resume_text(raw)
    assert isinstance(parsed, ParsedResume)
    for field in ("contact", "summary", "experience", "education", "skills", "projects"):
        assert hasattr(parsed, field)


def test_parse_non_string_input_degrades_to_empty():
    assert parse_resume_text(None) == ParsedResume()


def test_experience_fixture():
    parsed = parse_resume_text("Experience\nSenior Engineer\nAcme Corp\n2019 - Present\n- Did X\n- Did Y")
    assert len(parsed.experience) == 1
    exp = parsed.experience[0]
    assert exp.title == "Senior Engineer"
    assert exp.company == "Acme Corp"
    assert exp.start_date == "2019"
    assert exp.end_date == "Present"
    assert exp.bullets == ["Did X", "Did Y"]


def test_full_resume():
    parsed = parse_resume_text(SAMPLE)

    c = parsed.contact
    assert c.name == "Jane Doe"
    assert c.email == "jane.doe@example.com"
    assert c.phone == "(512) 555-0142"
    assert c.linkedin == "https://linkedin.com/in/janedoe"
    assert c.portfolio == "https://github.com/janedoe"
    assert c.location == "Austin, TX"

    assert parsed.summary.startswith("Backend engineer with eight years")

    assert [(e.title, e.company) for e in parsed.experience] == [
        ("Senior Engineer", "Acme Corp"),
        ("Software Engineer", "Initech"),
    ]
    first = parsed.experience[0]
    assert (first.start_date, first.end_date) == ("Jan 2021", "Present")
    assert len(first.bullets) == 2
    assert (parsed.experience[1].start_date, parsed.experience[1].end_date) == ("2017", "2020")

    edu = parsed.education[0]
    assert edu.school == "University of Texas at Austin"
    assert edu.degree == "B.S. Computer Science"
    assert (edu.start_year, edu.end_year, edu.gpa) == ("2013", "2017", "3.8")

    skills = {s.name: s.category for s in parsed.skills}
    assert skills["Python"] == "Technical"
    assert skills["Go"] == "Technical"
    assert skills["Jira"] == "Tool"
    assert skills["Mentoring"] == "Soft"

    project = parsed.projects[0]
    assert project.name == "Ledger CLI"
    assert project.description == "A command line budgeting tool"
    assert project.link == "https://github.com/janedoe/ledger"
    assert project.bullets == ["Parses bank CSV exports"]


def test_summary_falls_back_to_sentence_like_preamble():
    text = "Jane Doe\nPlatform engineer who loves automating boring infrastructure work\n\nSkills\nPython"
    assert parse_resume_text(text).summary == "Platform engineer who loves automating boring infrastructure work"


def test_extract_contact_skips_headings_and_contact_lines():
    contact = extract_contact(["SUMMARY", "jane@example.com", "555-123-4567", "Jane Q. Doe"])
    assert contact.name == "Jane Q. Doe"
    assert contact.phone == "555-123-4567"


def test_extract_links_adds_scheme():
    assert extract_links("www.linkedin.com/in/x and gitlab.com/x/y.") == (
        "https://www.linkedin.com/in/x",
        "https://gitlab.com/x/y",
    )


def test_extract_location_remote_fallback():
    assert extract_location("Open to Remote work") == "Remote"
    assert extract_location("nothing here") == ""


def test_classify_skill_short_keys_need_word_boundaries():
    assert classify_skill("Go") == "Technical"
    assert classify_skill("Google Docs") == "Soft"
    assert classify_skill("Power BI") == "Tool"
    assert classify_skill("Spanish (fluent)") == "Language"


def test_looks_binary():
    assert looks_binary("%PDF-1.7 obj")
    assert not looks_binary("Jane Doe")


def test_extract_text_txt_and_docx(tmp_path):
    txt = tmp_path / "resume.txt"
    txt.write_text("Jane Doe\nPython", encoding="utf-8")
    assert extract_text(txt) == "Jane Doe\nPython"

    docx = tmp_path / "resume.docx"
    ns = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
    xml = (
        f'<w:document xmlns:w="{ns}"><w:body>'
        "<w:p><w:r><w:t>Jane </w:t></w:r><w:r><w:t>Doe</w:t></w:r></w:p>"
        "<w:p><w:r><w:t>Python</w:t></w:r></w:p>"
        "</w:body></w:document>"
    )
    with zipfile.ZipFile(docx, "w") as zf:
        zf.writestr("word/document.xml", xml)
    assert extract_text(docx) == "Jane Doe\nPython"


def test_extract_text_rejects_unknown_format(tmp_path):
    path = tmp_path / "resume.rtf"
    path.write_text("{\\rtf1}", encoding="utf-8")
    with pytest.raises(ValueError):
        extract_text(path)
