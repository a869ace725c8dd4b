"""
Job search aggregator.

Runs: fan out to every job board → merge in fixed source order → rank →
attach deep links to third-party search pages.
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from datetime import datetime
from typing import Any
from urllib.parse import quote

from applypilot.config import DEFAULT_SOURCE_TIMEOUT
from applypilot.log import get_logger
from applypilot.models import CandidateSignal, Posting, RankedPosting, SearchFilters
from applypilot.ranker import rank
from applypilot.signals import RECENT_TITLE_WINDOW, build_signal, fit_score
from applypilot.sources import JobSource, get_sources
from applypilot.text import unique_strings

log = get_logger(__name__)

# Extra time the aggregator grants beyond the per-request timeout.
DEADLINE_GRACE = 2.0
MIN_RESUME_CHARS = 80
RESUME_TEXT_LIMIT = 8000
LINKEDIN_TEXT_LIMIT = 4000


# ── Deep links ───────────────────────────────────────────────────────────

def linkedin_search_url(posting: Posting) -> str:
    return f"https://www.linkedin.com/jobs/search/?keywords={quote(_role_company_location(posting), safe='')}"


def indeed_search_url(posting: Posting) -> str:
    return f"https://www.indeed.com/jobs?q={quote(_role_company_location(posting), safe='')}"


def company_careers_url(posting: Posting) -> str:
    company = posting.company or "Company"
    return f"https://www.google.com/search?q={quote(f'{company} careers', safe='')}"


def _role_company_location(posting: Posting) -> str:
    return f"{posting.title or 'Job'} {posting.company or 'Company'} {posting.location or ''}".strip()


# ── Fan-out ──────────────────────────────────────────────────────────────

def _search_source(source: JobSource, query_terms: list[str], location_hint: str, level_hint: str) -> list[Posting]:
    """Wrapper for parallel source searching."""
    try:
        return source.fetch(query_terms, location_hint, level_hint)
    except Exception as exc:
        log.error("[%s] FAILED: %s", source.name, exc)
        return []


def fetch_all(
    sources: list[JobSource],
    query_terms: list[str],
    location_hint: str = "",
    level_hint: str = "",
    deadline: float | None = None,
) -> list[Posting]:
    """Query every source concurrently; merge in *sources* order.

    A source still running after *deadline* seconds contributes nothing.
    """
    if not sources:
        return []
    if deadline is None:
        deadline = max(s.timeout for s in sources) + DEADLINE_GRACE

    log.info("Searching %d source(s) in parallel...", len(sources))
    pool = ThreadPoolExecutor(max_workers=len(sources))
    try:
        futures = [
            pool.submit(_search_source, src, query_terms, location_hint, level_hint)
            for src in sources
        ]
        done, _ = wait(futures, timeout=deadline)
        merged: list[Posting] = []
        for src, future in zip(sources, futures):
            if future not in done:
                log.warning("[%s] unavailable: no answer within %.1fs", src.name, deadline)
                continue
            merged.extend(future.result())
    finally:
        pool.shutdown(wait=False, cancel_futures=True)

    log.info("Total postings from sources: %d", len(merged))
    return merged


def rank_job_search(
    query_text: str,
    location_text: str = "",
    filters: SearchFilters | dict[str, Any] | None = None,
    *,
    sources: list[JobSource] | None = None,
    signal: CandidateSignal | None = None,
    timeout: float = DEFAULT_SOURCE_TIMEOUT,
    now: datetime | None = None,
) -> list[RankedPosting]:
    """Search all job boards and return at most 15 ranked, deep-linked postings."""
    if not isinstance(filters, SearchFilters):
        filters = SearchFilters.from_dict(filters)
    locations = unique_strings([*filters.locations, location_text])
    if signal is None:
        signal = build_signal(query=query_text, keywords=filters.keywords, locations=locations)
    if sources is None:
        sources = get_sources(timeout=timeout)

    query_terms = signal.search_terms or query_text.split()
    primary_location = locations[0] if locations else ""
    postings = fetch_all(
        sources,
        query_terms,
        primary_location,
        filters.level,
        deadline=timeout + DEADLINE_GRACE,
    )

    selected = rank(postings, signal, filters, now=now)
    results = [
        RankedPosting(
            posting=s.posting,
            relevance=s.score,
            linkedin_url=linkedin_search_url(s.posting),
            indeed_url=indeed_search_url(s.posting),
            company_site_url=company_careers_url(s.posting),
            fit=fit_score(signal, s.posting),
        )
        for s in selected
    ]
    log.info("Returning %d jobs from %d sources",
             len(results), len({r.posting.source for r in results}))
    return results


# ── Store glue ───────────────────────────────────────────────────────────

def _latest(items: list[dict[str, Any]], key: str = "created_at") -> dict[str, Any] | None:
    if not items:
        return None
    # ISO timestamps sort lexically; items without one keep list order.
    return max(enumerate(items), key=lambda pair: (str(pair[1].get(key) or ""), pair[0]))[1]


def signal_from_store(
    data: dict[str, Any],
    query: str = "",
    locations: list[str] | None = None,
    keywords: list[str] | None = None,
    titles: list[str] | None = None,
) -> CandidateSignal:
    """Build the candidate signal from a loaded store document."""
    resumes = [r for r in data.get("resumes") or [] if len((r.get("content") or "").strip()) > MIN_RESUME_CHARS]
    resume = _latest(resumes) or {}
    linkedin = _latest(data.get("linkedin_profiles") or []) or {}
    linkedin_text = " ".join(
        linkedin.get(k) or "" for k in ("headline", "about", "raw_text")
    ).strip()
    profile = data.get("profile") or {}
    recent_titles = [j.get("title") or "" for j in (data.get("jobs") or [])[-RECENT_TITLE_WINDOW:]]

    return build_signal(
        (resume.get("content") or "")[:RESUME_TEXT_LIMIT],
        profile,
        linkedin_text[:LINKEDIN_TEXT_LIMIT],
        keywords or [],
        titles or [],
        query=query,
        locations=locations or [],
        resume_meta={
            "target_role": resume.get("target_role") or "",
            "focus_skills": resume.get("focus_skills") or [],
            "job_preferences": resume.get("job_preferences") or "",
            "name": resume.get("name") or "",
        },
        recent_job_titles=recent_titles,
    )


def personalization_status(data: dict[str, Any]) -> dict[str, dict[str, Any]]:
    """Which personalization inputs a search can draw on right now."""
    resume = _latest(data.get("resumes") or [])
    resume_ready = len(((resume or {}).get("content") or "").strip()) > MIN_RESUME_CHARS

    profile = data.get("profile") or {}
    profile_ready = (
        any(profile.get(k) for k in ("skills", "experience", "projects"))
        or bool((profile.get("summary") or "").strip())
    )

    linkedin = _latest(data.get("linkedin_profiles") or []) or {}
    linkedin_ready = any((linkedin.get(k) or "").strip() for k in ("headline", "about", "raw_text"))

    return {
        "resume": {
            "ready": resume_ready,
            "detail": (resume.get("name") or "Latest resume detected") if resume_ready else "No readable resume found",
        },
        "profile": {
            "ready": profile_ready,
            "detail": "Profile has enough signals" if profile_ready else "Add skills/experience in Profile",
        },
        "linkedin": {
            "ready": linkedin_ready,
            "detail": "LinkedIn snapshot available" if linkedin_ready else "No LinkedIn snapshot yet",
        },
    }
