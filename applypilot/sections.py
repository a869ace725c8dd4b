"""Split resume/profile text into labelled sections and discover custom fields."""
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Mapping

from applypilot.log import get_logger
from applypilot.models import CustomField
from applypilot.tables import CUSTOM_FIELD_KEYS, PARSED_SECTIONS, SECTION_HEADINGS

log = get_logger(__name__)

_MIN_CUSTOM_VALUE_LEN = 24
_MAX_HEADING_LEN = 45
_MAX_CAPS_HEADING_WORDS = 4

# A line that opens one of the parser's own sections ends a loose block.
_STANDARD_HEADING_RE = re.compile(
    r"^(experience|work experience|education|skills|projects|summary|profile|about"
    r"|certifications?|licenses?|languages?|awards?|volunteer|volunteering)\b",
    re.IGNORECASE,
)
_TITLE_CASE_LABEL_RE = re.compile(r"^[A-Z][A-Za-z ]{2,30}:$")


@dataclass
class Section:
    name: str
    heading: str
    body: str
    implicit: bool = False


def _heading_map(known_headings: Mapping[str, str] | Iterable[str]) -> dict[str, str]:
    if isinstance(known_headings, Mapping):
        return {k.lower().strip(): v for k, v in known_headings.items()}
    return {h.lower().strip(): h.lower().strip() for h in known_headings}


def heading_name(line: str, known_headings: Mapping[str, str] | Iterable[str] = SECTION_HEADINGS) -> str:
    """Canonical section name when *line* is a known heading, else ``""``."""
    key = (line or "").strip().rstrip(":").strip().lower()
    if not key:
        return ""
    return _heading_map(known_headings).get(key, "")


def segment(
    text: str | None,
    known_headings: Mapping[str, str] | Iterable[str] = SECTION_HEADINGS,
) -> list[Section]:
    """Ordered sections; text before the first heading lands in an implicit summary."""
    headings = _heading_map(known_headings)
    sections: list[Section] = []
    name, heading, implicit = "summary", "", True
    body: list[str] = []

    def flush() -> None:
        sections.append(Section(name, heading, "\n".join(body).strip(), implicit))

    for raw in (text or "").splitlines():
        line = raw.strip()
        canonical = headings.get(line.rstrip(":").strip().lower()) if line else None
        if canonical:
            if body or not implicit:
                flush()
            name, heading, implicit = canonical, line, False
            body = []
            continue
        if not line and not body:
            continue
        body.append(line)

    if body or not implicit:
        flush()
    return sections


def section_text(sections: list[Section], name: str, *, include_implicit: bool = False) -> str:
    """First non-empty body of the canonical section *name*."""
    for section in sections:
        if section.name != name or not section.body:
            continue
        if section.implicit and not include_implicit:
            continue
        return section.body
    return ""


def _loose_section(lines: list[str], key: str) -> str:
    """Block after a ``key`` / ``key:`` line, ended by a blank line or a standard heading."""
    key = key.lower()
    start = -1
    inline = ""
    for i, raw in enumerate(lines):
        low = raw.strip().lower()
        if low == key or low == f"{key}:":
            start = i
            break
        if low.startswith(f"{key}:"):
            start = i
            inline = raw.strip()[len(key) + 1:].strip()
            break
    if start == -1:
        return ""

    out: list[str] = [inline] if inline else []
    for raw in lines[start + 1:]:
        cur = raw.strip()
        if not cur:
            if out:
                break
            continue
        if _STANDARD_HEADING_RE.match(cur):
            break
        out.append(cur)
    return "\n".join(out).strip()


def is_heading_like(line: str) -> bool:
    """ALL-CAPS short line or a ``Title Case:`` label."""
    t = (line or "").strip()
    if not t or len(t) > _MAX_HEADING_LEN:
        return False
    if len(re.sub(r"[^a-zA-Z]", "", t)) < 3:
        return False
    if t == t.upper():
        # "AWS, GCP, SQL" is a list, not a heading
        return "," not in t and len(t.split()) <= _MAX_CAPS_HEADING_WORDS
    return bool(_TITLE_CASE_LABEL_RE.match(t))


def infer_custom_fields(text: str | None) -> list[CustomField]:
    """Fields for non-standard sections (certifications, awards, unknown headings)."""
    lines = (text or "").replace("\r", "\n").split("\n")
    output: list[CustomField] = []

    for label, keys in CUSTOM_FIELD_KEYS:
        value = next((v for v in (_loose_section(lines, k) for k in keys) if v), "")
        if value:
            output.append(CustomField(label=label, value=value))

    consumed = {f.label.lower() for f in output}
    first_line = next((l.strip() for l in lines if l.strip()), "")
    known_needles = [needle for _, keys in CUSTOM_FIELD_KEYS for needle in keys]

    for i, raw in enumerate(lines):
        line = raw.strip()
        if not is_heading_like(line) or line == first_line:
            continue
        label = line.rstrip(":").strip()
        lower = label.lower()
        if SECTION_HEADINGS.get(lower) in PARSED_SECTIONS:
            continue
        if any(needle in lower for needle in known_needles):
            continue
        if lower in consumed:
            continue

        block: list[str] = []
        for nxt in lines[i + 1:]:
            cur = nxt.strip()
            if not cur:
                if block:
                    break
                continue
            if is_heading_like(cur):
                break
            block.append(cur)
        value = "\n".join(block).strip()
        if len(value) >= _MIN_CUSTOM_VALUE_LEN:
            output.append(CustomField(label=label, value=value))
            consumed.add(lower)

    log.debug("Inferred %d custom field(s)", len(output))
    return output
