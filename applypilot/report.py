"""Markdown report of a ranked job search."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from urllib.parse import urlparse

from applypilot.config import REPORTS_DIR
from applypilot.log import get_logger
from applypilot.models import CandidateSignal, RankedPosting

log = get_logger(__name__)


def _short_url_label(url: str) -> str:
    try:
        host = urlparse(url).hostname or ""
    except ValueError:
        return "Link"
    parts = host.replace("www.", "").split(".")
    return parts[0].capitalize() if parts and parts[0] else "Link"


def _clip(text: str, width: int) -> str:
    text = (text or "").replace("|", "/")
    return text[:width] + ("…" if len(text) > width else "")


def build_search_report(
    results: list[RankedPosting],
    query: str,
    *,
    saved_urls: set[str] | None = None,
    signal: CandidateSignal | None = None,
    top_terms: int = 8,
) -> str:
    saved_urls = saved_urls or set()
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    lines: list[str] = [f"# Job Search Report — {date}", ""]

    sources = sorted({r.posting.source for r in results})
    lines.append(f"**Query:** {query or '(profile only)'}")
    lines.append(f"**{len(results)}** jobs from **{len(sources)}** sources ({', '.join(sources) or 'none'})")
    if signal is not None:
        terms = [t for t, _ in signal.weighted_terms.most_common(top_terms)]
        lines.append(f"**Top signal terms:** {', '.join(terms) or 'none'}")
    lines.append("")

    if not results:
        lines.append("_No jobs found. Try a broader query, a longer posting window or `us_only: false`._")
        lines.append("")
        return "\n".join(lines)

    lines.append("## Top Matches")
    lines.append("")
    for r in results:
        p = r.posting
        badge = "✅" if p.url in saved_urls else "\U0001f517"
        lines.append(f"### {badge} {p.title} @ {p.company}")
        lines.append(f"- **Relevance:** {r.relevance} · **Resume fit:** {r.fit} — {p.source}")
        lines.append(f"- **Location:** {p.location}")
        if p.level or p.category:
            lines.append(f"- **Level / category:** {p.level or '—'} / {p.category or '—'}")
        lines.append(f"- **Apply:** [{_short_url_label(p.url)}]({p.url})")
        lines.append(
            f"- **Search:** [LinkedIn]({r.linkedin_url}) · [Indeed]({r.indeed_url})"
            f" · [Careers]({r.company_site_url})"
        )
        lines.append("")

    lines.append("---")
    lines.append("")
    lines.append("## Quick Reference")
    lines.append("")
    lines.append("| # | Role | Company | Location | Score | Fit | Source | Apply |")
    lines.append("|--:|------|---------|----------|------:|----:|--------|-------|")
    for i, r in enumerate(results, 1):
        p = r.posting
        loc = (p.location or "").split(",")[0][:18]
        link = f"[{_short_url_label(p.url)}]({p.url})"
        lines.append(
            f"| {i} | {_clip(p.title, 40)} | {_clip(p.company, 22)} | {loc} | {r.relevance} | {r.fit} | {p.source} | {link} |"
        )
    lines.append("")

    log.info("Built search report: %d jobs", len(results))
    return "\n".join(lines)


def write_search_report(content: str) -> Path:
    REPORTS_DIR.mkdir(parents=True, exist_ok=True)
    stamp = datetime.now(timezone.utc).strftime("%Y-%m-%d_%H%M%S")
    path = REPORTS_DIR / f"search_{stamp}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path
