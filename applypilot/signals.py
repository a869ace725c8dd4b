"""
Candidate signal builder.

Turns everything known about the candidate (resume text, stored profile,
LinkedIn snapshot, explicit keywords and titles) into provenance-tagged term
pools.  Pure: callers pass plain data, nothing here touches the store.
"""
from __future__ import annotations

import re
from typing import Any, Iterable

from applypilot.models import TERM_WEIGHTS, CandidateSignal, Posting
from applypilot.tables import COUNTRY_ALIASES, STOP_WORDS, TITLE_CATALOG
from applypilot.text import tokenize, unique_strings

MAX_PERSONA_TITLES = 12
MAX_SKILL_POOL = 80
RESUME_TOKEN_WINDOW = 120
LINKEDIN_TOKEN_WINDOW = 80
MAX_LINKEDIN_TERMS = 24
MAX_PROFILE_TERMS = 36
MAX_LOCATION_HINTS = 8
RECENT_TITLE_WINDOW = 12

_QUERY_PUNCT_RE = re.compile(r'[()"]')
_BOOLEAN_OPS = frozenset({"and", "or", "not"})
_LOCATION_SPLIT_RE = re.compile(r"[,\-/]")

_FIT_CLASSES = ("role", "focus", "preference", "name")


def _content_terms(tokens: Iterable[str]) -> list[str]:
    return [t for t in tokens if t not in STOP_WORDS]


def _dedupe(values: Iterable[str]) -> list[str]:
    return list(dict.fromkeys(values))


def query_terms(query: str | None) -> list[str]:
    """Search-box words minus quotes, parentheses and boolean operators.

    Words are split on whitespace only so that terms like ``node.js`` survive.
    """
    cleaned = _QUERY_PUNCT_RE.sub(" ", query or "")
    words = (w.strip(",;:").lower() for w in cleaned.split())
    return _dedupe(w for w in words if len(w) > 2 and w not in _BOOLEAN_OPS and w not in STOP_WORDS)


def location_hints(locations: Iterable[str]) -> list[str]:
    hints: list[str] = []
    for loc in locations:
        for part in _LOCATION_SPLIT_RE.split(loc.lower()):
            part = part.strip()
            if len(part) > 2 and part not in COUNTRY_ALIASES and part not in hints:
                hints.append(part)
    return hints[:MAX_LOCATION_HINTS]


def catalog_titles(text: str | None) -> list[str]:
    lowered = (text or "").lower()
    return [title for title in TITLE_CATALOG if title in lowered]


def persona_titles(
    titles: Iterable[str],
    profile: dict[str, Any],
    recent_job_titles: Iterable[str],
    resume_text: str,
    linkedin_text: str,
) -> list[str]:
    """Ordered union of every title the candidate has held or is aiming for."""
    experience_titles = [e.get("title", "") for e in profile.get("experience") or [] if isinstance(e, dict)]
    recent = list(recent_job_titles)[-RECENT_TITLE_WINDOW:]
    merged = unique_strings([
        *titles,
        *experience_titles,
        *recent,
        *catalog_titles(resume_text),
        *catalog_titles(linkedin_text),
    ])
    return _dedupe(t.lower() for t in merged)[:MAX_PERSONA_TITLES]


def skill_pool(profile: dict[str, Any], resume_text: str, linkedin_text: str) -> list[str]:
    # Skill names stay whole so multi-word skills match as phrases.
    profile_skills = [
        ((s.get("name") if isinstance(s, dict) else str(s)) or "").strip().lower()
        for s in profile.get("skills") or []
    ]
    pool = [
        *profile_skills,
        *tokenize(resume_text)[:RESUME_TOKEN_WINDOW],
        *tokenize(linkedin_text)[:LINKEDIN_TOKEN_WINDOW],
    ]
    return _dedupe(t for t in _content_terms(pool) if len(t) > 2)[:MAX_SKILL_POOL]


def profile_terms(profile: dict[str, Any]) -> list[str]:
    parts: list[str] = [profile.get("summary") or ""]
    for item in profile.get("experience") or []:
        if isinstance(item, dict):
            parts += [
                item.get("title") or "",
                item.get("company") or "",
                item.get("description") or "",
                *(item.get("bullets") or []),
            ]
    for item in profile.get("projects") or []:
        if isinstance(item, dict):
            parts += [
                item.get("name") or "",
                item.get("description") or "",
                *(item.get("skills") or []),
                *(item.get("bullets") or []),
            ]
    return _dedupe(tokenize(" ".join(parts)))[:MAX_PROFILE_TERMS]


def build_signal(
    resume_text: str | None = "",
    profile: dict[str, Any] | None = None,
    linkedin_text: str | None = "",
    keywords: Iterable[str] = (),
    titles: Iterable[str] = (),
    *,
    query: str = "",
    locations: Iterable[str] = (),
    resume_meta: dict[str, Any] | None = None,
    recent_job_titles: Iterable[str] = (),
    excluded: Iterable[str] = (),
) -> CandidateSignal:
    profile = profile or {}
    meta = resume_meta or {}
    resume_text = resume_text or ""
    linkedin_text = linkedin_text or ""
    preferred = unique_strings(locations)

    return CandidateSignal(
        role_terms=tokenize(meta.get("target_role")),
        focus_terms=[t for skill in meta.get("focus_skills") or [] for t in tokenize(skill)],
        preference_terms=tokenize(meta.get("job_preferences")),
        name_terms=tokenize(meta.get("name")),
        query_terms=query_terms(query),
        keyword_terms=_dedupe(t for kw in keywords for t in tokenize(kw)),
        persona_titles=persona_titles(titles, profile, recent_job_titles, resume_text, linkedin_text),
        skill_pool=skill_pool(profile, resume_text, linkedin_text),
        linkedin_terms=_content_terms(tokenize(linkedin_text))[:MAX_LINKEDIN_TERMS],
        profile_terms=profile_terms(profile),
        preferred_locations=[loc.lower() for loc in preferred],
        location_hints=location_hints(preferred),
        excluded_terms={t for term in excluded for t in tokenize(term)},
    )


def fit_score(signal: CandidateSignal, posting: Posting) -> int:
    """0–100 fit of a posting against the resume-workshop terms of *signal*."""
    job_terms = set(tokenize(f"{posting.title} {posting.company} {posting.description}"))
    pools = {
        "role": signal.role_terms,
        "focus": signal.focus_terms,
        "preference": signal.preference_terms,
        "name": signal.name_terms,
    }
    score = sum(
        TERM_WEIGHTS[kind]
        for kind in _FIT_CLASSES
        for term in pools[kind]
        if term in job_terms
    )
    return max(0, min(100, score * 4))
