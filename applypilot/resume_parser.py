"""Extract structured profile data from resume text.

Every field has its own pure extraction step so the heuristics can be
pinned down one at a time.  Parsing is total: any string yields a
well-formed ``ParsedResume``; missing data degrades to empty values.
Callers are expected to drop binary content (see ``looks_binary``) first.
"""
from __future__ import annotations

import re
import shutil
import subprocess
import zipfile
from pathlib import Path
from xml.etree import ElementTree

from applypilot.log import get_logger
from applypilot.models import (
    Contact,
    EducationItem,
    ExperienceItem,
    ParsedResume,
    ProjectItem,
    SkillItem,
)
from applypilot.sections import Section, heading_name, section_text, segment
from applypilot.tables import DEGREE_RE, SKILL_CATEGORIES
from applypilot.text import normalize_text, unique_strings

log = get_logger(__name__)

HEADER_LINES = 25
SUMMARY_LINES = 3
MAX_SKILLS = 40
MAX_SKILL_LEN = 40
MAX_EXPERIENCE = 8
MAX_EDUCATION = 5
MAX_PROJECTS = 8
MAX_BULLETS = 8

# ── Text extraction ──────────────────────────────────────────────────────

_BINARY_MARKERS = ("%PDF-", "endstream", "xref", "/Type /Page")


def looks_binary(text: str) -> bool:
    """True for raw PDF bytes that were stored as text."""
    return any(marker in (text or "") for marker in _BINARY_MARKERS)


def extract_text(path: Path) -> str:
    """Return plain text from a PDF, DOCX, or TXT file."""
    suffix = path.suffix.lower()
    if suffix in (".txt", ".md"):
        return path.read_text(encoding="utf-8", errors="ignore")
    if suffix == ".docx":
        return _extract_docx(path)
    if suffix == ".pdf":
        return _extract_pdf(path)
    raise ValueError(f"Unsupported resume format: {suffix}")


def _extract_pdf(path: Path) -> str:
    # pdftotext keeps word spacing better than pypdf
    if shutil.which("pdftotext"):
        result = subprocess.run(
            ["pdftotext", "-layout", str(path), "-"],
            capture_output=True,
            text=True,
            timeout=30,
        )
        if result.returncode == 0 and result.stdout.strip():
            return result.stdout

    from pypdf import PdfReader

    reader = PdfReader(str(path))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _extract_docx(path: Path) -> str:
    ns = "{http://schemas.openxmlformats.org/wordprocessingml/2006/main}"
    texts: list[str] = []
    with zipfile.ZipFile(path) as zf:
        with zf.open("word/document.xml") as f:
            tree = ElementTree.parse(f)
            for para in tree.iter(f"{ns}p"):
                parts = [node.text for node in para.iter(f"{ns}t") if node.text]
                texts.append("".join(parts))
    return "\n".join(texts)


# ── Patterns ─────────────────────────────────────────────────────────────

_EMAIL_RE = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
_PHONE_RE = re.compile(r"(?:\+?1[\s.-]?)?(?:\(?\d{3}\)?[\s.-]?)\d{3}[\s.-]?\d{4}")
_URL_RE = re.compile(r"https?://[^\s)|,]+", re.IGNORECASE)
_LINKEDIN_RE = re.compile(r"(?:https?://)?(?:www\.)?linkedin\.com/[^\s)|,]+", re.IGNORECASE)
_BARE_PORTFOLIO_RE = re.compile(
    r"\b(?:www\.)?(?:github\.com|gitlab\.com|behance\.net|medium\.com)/[^\s)|,]+", re.IGNORECASE
)
_CITY_STATE_RE = re.compile(r"\b[A-Za-z][A-Za-z .'-]*,\s*[A-Z]{2}\b")
_REMOTE_RE = re.compile(r"\bremote\b", re.IGNORECASE)
_DIGIT_RUN_RE = re.compile(r"\d{3}")

_MONTH = r"(?:jan|feb|mar|apr|may|jun|jul|aug|sep|sept|oct|nov|dec)[a-z]*\.?\s+"
_YEAR_MONTH = rf"(?:{_MONTH})?(?:19|20)\d{{2}}(?:[-/](?:1[0-2]|0?[1-9]))?"
_DATE_RANGE_RE = re.compile(
    rf"({_YEAR_MONTH})\s*(?:-|to)\s*(present|current|{_YEAR_MONTH})",
    re.IGNORECASE,
)
_YEAR_PAIR_RE = re.compile(r"((?:19|20)\d{2})(?:\s*-\s*((?:19|20)\d{2}|present))?", re.IGNORECASE)
_GPA_RE = re.compile(r"GPA[:\s]*([0-4]\.\d{1,2})", re.IGNORECASE)
_BULLET_RE = re.compile(r"^[-*]\s*")
_SKILL_LABEL_RE = re.compile(r"^[A-Za-z][A-Za-z &/]{1,30}:\s*")
_SKILL_SPLIT_RE = re.compile(r"[\n,;|]+|(?:^|\s)[-*]\s+", re.MULTILINE)
_TITLE_COMPANY_SPLIT_RE = re.compile(r"\s*\|\s*|\s+@\s+|\s+at\s+|,\s+", re.IGNORECASE)
_BLOCK_SPLIT_RE = re.compile(r"\n\s*\n")


def _clean_url(url: str) -> str:
    v = (url or "").strip().rstrip(".;")
    if not v:
        return ""
    if re.match(r"^https?://", v, re.IGNORECASE):
        return v
    return f"https://{v}"


def _blocks(body: str, cap: int) -> list[list[str]]:
    """Blank-line separated entries as lists of non-empty stripped lines."""
    out: list[list[str]] = []
    for block in _BLOCK_SPLIT_RE.split(body or ""):
        lines = [l.strip() for l in block.split("\n") if l.strip()]
        if lines:
            out.append(lines)
        if len(out) >= cap:
            break
    return out


def _bullets(lines: list[str]) -> list[str]:
    return [_BULLET_RE.sub("", l).strip() for l in lines if _BULLET_RE.match(l)][:MAX_BULLETS]


# ── Field extraction ─────────────────────────────────────────────────────


def extract_contact(header: list[str]) -> Contact:
    """Name, email, phone, links and location from the header lines."""
    top = "\n".join(header)
    email = _EMAIL_RE.search(top)
    phone = _PHONE_RE.search(top)

    name = ""
    for line in header:
        if "@" in line or _URL_RE.search(line) or _LINKEDIN_RE.search(line):
            continue
        if line.lower().startswith("www.") or _DIGIT_RUN_RE.search(line):
            continue
        if heading_name(line) or len(line.split()) > 5:
            continue
        name = line
        break

    linkedin, portfolio = extract_links(top)
    return Contact(
        name=name,
        email=email.group(0) if email else "",
        phone=phone.group(0).strip() if phone else "",
        linkedin=linkedin,
        portfolio=portfolio,
        location=extract_location(top),
    )


def extract_links(text: str) -> tuple[str, str]:
    """First LinkedIn URL and first other http(s) URL (the portfolio)."""
    linkedin = _LINKEDIN_RE.search(text or "")
    portfolio = ""
    for m in _URL_RE.finditer(text or ""):
        if "linkedin.com" not in m.group(0).lower():
            portfolio = m.group(0)
            break
    if not portfolio:
        bare = _BARE_PORTFOLIO_RE.search(text or "")
        portfolio = bare.group(0) if bare else ""
    return _clean_url(linkedin.group(0) if linkedin else ""), _clean_url(portfolio)


def extract_location(text: str) -> str:
    m = _CITY_STATE_RE.search(text or "")
    if m:
        return m.group(0).strip()
    remote = _REMOTE_RE.search(text or "")
    return remote.group(0) if remote else ""


def extract_summary(sections: list[Section]) -> str:
    """First lines of the summary block joined into one paragraph."""
    body = section_text(sections, "summary")
    if body:
        lines = [l.strip() for l in body.split("\n") if l.strip()]
        return " ".join(lines[:SUMMARY_LINES]).strip()

    # Without a heading, only sentence-like lines in the preamble qualify.
    preamble = section_text(sections, "summary", include_implicit=True)
    lines = [
        l.strip() for l in preamble.split("\n")[1:]
        if len(l.split()) >= 6
        and not (_EMAIL_RE.search(l) or _PHONE_RE.search(l) or _URL_RE.search(l))
    ]
    return " ".join(lines[:SUMMARY_LINES]).strip()


def classify_skill(name: str) -> str:
    v = (name or "").lower()
    for category, keys in SKILL_CATEGORIES:
        for key in keys:
            if len(key) <= 3:
                if re.search(rf"(?<![a-z0-9]){re.escape(key)}(?![a-z0-9])", v):
                    return category
            elif key in v:
                return category
    return "Soft"


def extract_skills(sections: list[Section]) -> list[SkillItem]:
    body = section_text(sections, "skills")
    if not body:
        return []
    cleaned = "\n".join(_SKILL_LABEL_RE.sub("", l.strip()) for l in body.split("\n"))
    tokens = [t.strip() for t in _SKILL_SPLIT_RE.split(cleaned)]
    names = unique_strings(t for t in tokens if t and len(t) <= MAX_SKILL_LEN)[:MAX_SKILLS]
    return [SkillItem(name=n, category=classify_skill(n)) for n in names]


def _split_title_company(lines: list[str]) -> tuple[str, str]:
    first = lines[0] if lines else ""
    first = _DATE_RANGE_RE.sub("", first).strip(" |,-") or first
    parts = [p.strip() for p in _TITLE_COMPANY_SPLIT_RE.split(first) if p.strip()]
    if len(parts) >= 2:
        return parts[0], parts[1]

    company = ""
    if len(lines) > 1 and not _BULLET_RE.match(lines[1]):
        company = _DATE_RANGE_RE.sub("", lines[1]).strip(" |,-")
    return first, company


def extract_experience(sections: list[Section]) -> list[ExperienceItem]:
    items: list[ExperienceItem] = []
    for lines in _blocks(section_text(sections, "experience"), MAX_EXPERIENCE):
        block = "\n".join(lines)
        title, company = _split_title_company(lines)
        dates = _DATE_RANGE_RE.search(block)
        end = dates.group(2) if dates else ""
        if end.lower() in ("present", "current"):
            end = "Present"

        bullets = _bullets(lines)
        if not bullets:
            bullets = [l for l in lines[2:] if len(l) > 25 and not _DATE_RANGE_RE.fullmatch(l)][:6]

        location = _CITY_STATE_RE.search(block)
        item = ExperienceItem(
            title=title,
            company=company,
            location=location.group(0).strip() if location else "",
            start_date=dates.group(1) if dates else "",
            end_date=end,
            bullets=bullets,
        )
        if item.title or item.company:
            items.append(item)
    return items


def extract_education(sections: list[Section]) -> list[EducationItem]:
    items: list[EducationItem] = []
    for lines in _blocks(section_text(sections, "education"), MAX_EDUCATION):
        block = "\n".join(lines)
        years = _YEAR_PAIR_RE.search(block)
        gpa = _GPA_RE.search(block)
        degree = next((l for l in lines[1:] if DEGREE_RE.search(l)), lines[1] if len(lines) > 1 else "")
        end_year = (years.group(2) or "") if years else ""
        item = EducationItem(
            school=lines[0],
            degree=degree,
            start_year=years.group(1) if years else "",
            end_year="Present" if end_year.lower() == "present" else end_year,
            gpa=gpa.group(1) if gpa else "",
        )
        if item.school or item.degree:
            items.append(item)
    return items


def extract_projects(sections: list[Section]) -> list[ProjectItem]:
    items: list[ProjectItem] = []
    for lines in _blocks(section_text(sections, "projects"), MAX_PROJECTS):
        block = "\n".join(lines)
        link = _URL_RE.search(block)
        bullets = _bullets(lines)
        if not bullets:
            bullets = [l for l in lines[1:] if len(l) > 20 and not _URL_RE.fullmatch(l)][:4]
        description = next(
            (l for l in lines[1:] if not _BULLET_RE.match(l) and not _URL_RE.fullmatch(l)),
            " ".join(lines[1:3]),
        )
        items.append(ProjectItem(
            name=lines[0],
            description=description.strip(),
            link=link.group(0) if link else "",
            bullets=bullets,
        ))
    return items


# ── Public API ───────────────────────────────────────────────────────────


def parse_resume_text(raw_text: str | None) -> ParsedResume:
    """Structured resume data from free text; never raises for string input."""
    text = normalize_text(raw_text if isinstance(raw_text, str) else "")
    if not text:
        return ParsedResume()

    lines = [l.strip() for l in text.split("\n") if l.strip()]
    sections = segment(text)

    parsed = ParsedResume(
        contact=extract_contact(lines[:HEADER_LINES]),
        summary=extract_summary(sections),
        experience=extract_experience(sections),
        education=extract_education(sections),
        skills=extract_skills(sections),
        projects=extract_projects(sections),
    )
    log.debug(
        "Parsed resume — name=%r, experience=%d, education=%d, skills=%d, projects=%d",
        parsed.contact.name, len(parsed.experience), len(parsed.education),
        len(parsed.skills), len(parsed.projects),
    )
    return parsed
