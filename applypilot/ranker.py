"""Filter, score and select postings with source diversity.

Every soft filter relaxes instead of emptying the pool, and a small result
set is topped up from a broader pool.
"""
from __future__ import annotations

import re
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Iterable
from urllib.parse import urlparse

from applypilot.log import get_logger
from applypilot.models import CandidateSignal, Posting, ScoredPosting, SearchFilters
from applypilot.tables import ATS_DOMAINS, REMOTE_PHRASES, US_PHRASES, US_STATE_CODE_RE, US_WORD_RE
from applypilot.text import tokenize

log = get_logger(__name__)

TARGET_SIZE = 15
FLOOR_SIZE = 10
MAX_PER_SOURCE = 8

# Score components
BODY_HIT, TITLE_HIT, CATEGORY_HIT = 1, 4, 1
US_BOOST, NON_US_PENALTY = 5, -6
REMOTE_BOOST = 2
FRESH_BOOST, RECENT_BOOST = 4, 2
ATS_BOOST = 3
PERSONA_BOOST = 6
SKILL_WINDOW = 36
SKILL_CAP, LINKEDIN_CAP, PROFILE_CAP = 8, 4, 4

_DATE_PREFIX_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})")


# ── Text heuristics ──────────────────────────────────────────────────────

def is_remote(text: str | None) -> bool:
    lowered = (text or "").lower()
    return any(phrase in lowered for phrase in REMOTE_PHRASES)


def is_us(text: str | None) -> bool:
    """US-indicative text: country names, state names, ``US``/``USA`` or ``, ST`` codes."""
    text = text or ""
    lowered = text.lower()
    if any(phrase in lowered for phrase in US_PHRASES):
        return True
    return bool(US_WORD_RE.search(text) or US_STATE_CODE_RE.search(text))


def is_ats(url: str | None) -> bool:
    try:
        host = (urlparse(url or "").hostname or "").lower()
    except ValueError:
        return False
    return bool(host) and any(domain in host for domain in ATS_DOMAINS)


def location_text(posting: Posting) -> str:
    return f"{posting.location or ''} {posting.description or ''}"


def haystack(posting: Posting) -> str:
    parts = [
        posting.title,
        posting.company,
        posting.category,
        posting.level,
        posting.location,
        posting.description,
        " ".join(posting.tags or []),
    ]
    return " ".join(p for p in parts if p).lower()


# ── Dates ────────────────────────────────────────────────────────────────

def parse_date(value: str | int | float | None) -> datetime | None:
    """Best-effort UTC datetime; numbers are unix seconds.  None when unparseable."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    text = str(value).strip()
    if text.isdigit():
        return parse_date(int(text))
    try:
        parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        m = _DATE_PREFIX_RE.match(text)
        if not m:
            return None
        try:
            parsed = datetime(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def within_days(value: str | int | float | None, days: int, now: datetime) -> bool:
    """True when *value* is at most *days* old; no limit or no date always passes."""
    if not days or days <= 0:
        return True
    posted = parse_date(value)
    if posted is None:
        return True
    return now - posted <= timedelta(days=days)


# ── Filters ──────────────────────────────────────────────────────────────

def dedupe(postings: Iterable[Posting]) -> list[Posting]:
    seen: set[str] = set()
    unique: list[Posting] = []
    for p in postings:
        key = p.dedup_key()
        if key in seen:
            continue
        seen.add(key)
        unique.append(p)
    return unique


def filter_remote(postings: list[Posting]) -> list[Posting]:
    return [p for p in postings if p.remote or is_remote(location_text(p))]


def filter_region(postings: list[Posting]) -> list[Posting]:
    result = []
    for p in postings:
        text = location_text(p)
        if is_us(text) or is_remote(text):
            result.append(p)
    return result


def filter_excluded(postings: list[Posting], excluded: set[str]) -> list[Posting]:
    if not excluded:
        return postings
    return [p for p in postings if not excluded.intersection(tokenize(p.title))]


def filter_location(
    postings: list[Posting], signal: CandidateSignal, remote_only: bool
) -> list[Posting]:
    preferred = signal.preferred_locations
    hints = signal.location_hints

    def matches(p: Posting) -> bool:
        text = location_text(p).lower()
        if any(loc in text for loc in preferred):
            return True
        if any(hint in text for hint in hints):
            return True
        return remote_only and is_remote(text)

    return [p for p in postings if matches(p)]


def filter_level(postings: list[Posting], level: str) -> list[Posting]:
    level = (level or "").lower()
    if not level:
        return postings
    return [p for p in postings if level in (p.level or "").lower()]


def candidate_pool(
    recent: list[Posting], signal: CandidateSignal, filters: SearchFilters
) -> list[Posting]:
    """Apply the hard filters, then the first non-empty of the soft filter fallbacks."""
    remote_pool = filter_remote(recent) if filters.remote_only else recent
    region_pool = filter_region(remote_pool) if filters.us_only else remote_pool

    if signal.preferred_locations and filters.relocation != "yes":
        located = filter_location(region_pool, signal, filters.remote_only)
    else:
        located = region_pool

    strict = filter_level(located, filters.level)
    relaxed = filter_level(region_pool, filters.level)
    pool = strict or relaxed or region_pool or remote_pool
    if pool is not strict:
        log.debug("Location/level filters relaxed: strict=%d relaxed=%d region=%d",
                  len(strict), len(relaxed), len(region_pool))
    return pool


# ── Scoring ──────────────────────────────────────────────────────────────

def _hits(terms: Iterable[str], text: str) -> int:
    return sum(1 for term in terms if term and term in text)


def score_posting(
    posting: Posting,
    signal: CandidateSignal,
    filters: SearchFilters,
    now: datetime,
    terms: list[str] | None = None,
) -> int:
    terms = signal.search_terms if terms is None else terms
    body = haystack(posting)
    title = (posting.title or "").lower()
    category = (posting.category or "").lower()
    loc_text = location_text(posting)

    score = 0
    for term in terms:
        if term in body:
            score += BODY_HIT
        if term in title:
            score += TITLE_HIT
        if term in category:
            score += CATEGORY_HIT

    us = is_us(loc_text)
    if us:
        score += US_BOOST
    elif filters.us_only:
        score += NON_US_PENALTY
    if is_remote(loc_text):
        score += REMOTE_BOOST

    if within_days(posting.posted_date, 7, now):
        score += FRESH_BOOST
    elif within_days(posting.posted_date, 30, now):
        score += RECENT_BOOST

    if is_ats(posting.url):
        score += ATS_BOOST
    if any(t and t in title for t in signal.persona_titles):
        score += PERSONA_BOOST

    score += min(SKILL_CAP, _hits(signal.skill_pool[:SKILL_WINDOW], body))
    score += min(LINKEDIN_CAP, _hits(signal.linkedin_terms, body))
    score += min(PROFILE_CAP, _hits(signal.profile_terms, body))
    return score


def backfill_score(posting: Posting, terms: list[str]) -> int:
    body = haystack(posting)
    title = (posting.title or "").lower()
    score = sum((1 if t in body else 0) + (2 if t in title else 0) for t in terms)
    loc_text = location_text(posting)
    if is_us(loc_text):
        score += 2
    if is_remote(loc_text):
        score += 1
    return score


def _by_score(items: list[ScoredPosting]) -> list[ScoredPosting]:
    # sorted() is stable, so ties keep merge order.
    return sorted(items, key=lambda s: -s.score)


# ── Selection ────────────────────────────────────────────────────────────

def select_diverse(
    ranked: list[ScoredPosting], cap: int = TARGET_SIZE, per_source: int = MAX_PER_SOURCE
) -> list[ScoredPosting]:
    """Round-robin across sources, one per source per round."""
    groups: dict[str, list[ScoredPosting]] = {}
    for item in ranked:
        groups.setdefault(item.posting.source or "Unknown Source", []).append(item)
    for source, items in groups.items():
        groups[source] = _by_score(items)

    selected: list[ScoredPosting] = []
    counts: Counter[str] = Counter()
    rnd = 0
    while len(selected) < cap:
        added = 0
        for source, items in groups.items():
            if len(selected) >= cap:
                break
            if rnd >= len(items) or counts[source] >= per_source:
                continue
            selected.append(items[rnd])
            counts[source] += 1
            added += 1
        if not added:
            break
        rnd += 1
    return selected


def backfill(
    selected: list[ScoredPosting],
    pool: list[Posting],
    terms: list[str],
    floor: int = FLOOR_SIZE,
    cap: int = TARGET_SIZE,
    per_source: int = MAX_PER_SOURCE,
) -> list[ScoredPosting]:
    """Top up a short selection from *pool* by a simplified score.

    The first pass respects the per-source cap and fills up to *cap*.  If that
    still leaves the selection under *floor*, a second pass ignores the
    source cap until the floor is met or the pool runs out.
    """
    if len(selected) >= floor:
        return selected

    result = list(selected)
    seen = {str(s.posting.id) for s in result}
    counts = Counter(s.posting.source for s in result)
    capped = len({p.source for p in pool}) > 1
    candidates = _by_score([ScoredPosting(p, backfill_score(p, terms)) for p in pool])

    def take(limit: int, respect_cap: bool) -> None:
        for item in candidates:
            if len(result) >= limit:
                break
            pid = str(item.posting.id)
            if pid in seen:
                continue
            if respect_cap and counts[item.posting.source] >= per_source:
                continue
            result.append(item)
            seen.add(pid)
            counts[item.posting.source] += 1

    take(cap, respect_cap=capped)
    if len(result) < floor:
        take(floor, respect_cap=False)
    log.debug("Backfilled %d → %d postings", len(selected), len(result))
    return result


# ── Pipeline ─────────────────────────────────────────────────────────────

def rank(
    postings: Iterable[Posting],
    signal: CandidateSignal,
    filters: SearchFilters | None = None,
    now: datetime | None = None,
) -> list[ScoredPosting]:
    """Dedupe, filter, score and select; at most ``TARGET_SIZE`` results."""
    filters = filters or SearchFilters()
    now = now or datetime.now(timezone.utc)

    postings = list(postings)
    deduped = dedupe(postings)
    if not deduped:
        return []

    recent = [p for p in deduped if within_days(p.posted_date, filters.posted_within_days, now)]
    recent = filter_excluded(recent, signal.excluded_terms)
    pool = candidate_pool(recent, signal, filters)

    terms = signal.search_terms
    scored = _by_score([ScoredPosting(p, score_posting(p, signal, filters, now, terms)) for p in pool])

    threshold = max(0, filters.min_relevance)
    relevant = [s for s in scored if s.score >= threshold] or scored

    selected = select_diverse(relevant)
    # Backfill never reintroduces postings the region filter removed.
    broad = filter_region(recent) if filters.us_only else recent
    selected = backfill(selected, broad, terms)

    log.info("Ranked %d postings (%d unique, %d in pool) → %d selected from %d sources",
             len(postings), len(deduped), len(pool), len(selected),
             len({s.posting.source for s in selected}))
    return selected
