"""The Muse — free public jobs API (no key required).

Docs: https://www.themuse.com/developers/api/v2
"""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

from applypilot.log import get_logger
from applypilot.models import Posting
from applypilot.sources.base import JobSource, SourceUnavailable, apply_url, posting_id

log = get_logger(__name__)

API_URL = "https://www.themuse.com/api/public/jobs"
PAGES = (1, 2, 3)
DEFAULT_LOCATION = "United States"


def _first_name(items: list | None) -> str:
    if items and isinstance(items[0], dict):
        return items[0].get("name") or ""
    return ""


class TheMuseSource(JobSource):
    name = "The Muse"

    def _fetch_page(self, params: dict, page: int) -> list[Posting]:
        try:
            data = self._get_json(API_URL, params={**params, "page": page})
        except SourceUnavailable as exc:
            log.warning("The Muse page %d error: %s", page, exc)
            return []

        postings: list[Posting] = []
        for index, hit in enumerate(data.get("results") or []):
            title = hit.get("name") or "Untitled Role"
            company = (hit.get("company") or {}).get("name") or "Unknown Company"
            landing = (hit.get("refs") or {}).get("landing_page")
            postings.append(
                Posting(
                    id=posting_id("muse", hit.get("id"), landing, f"p{page}-{index}"),
                    title=title,
                    company=company,
                    location=_first_name(hit.get("locations")) or "Remote",
                    url=apply_url(landing, title, company),
                    description=hit.get("contents") or "No description available",
                    level=_first_name(hit.get("levels")),
                    category=_first_name(hit.get("categories")),
                    source=self.name,
                    posted_date=hit.get("publication_date"),
                )
            )
        return postings

    def _fetch_location(self, location: str, level: str) -> list[Posting]:
        """Pages 1–3 in parallel, concatenated in page order."""
        params: dict = {"descending": "true"}
        if location:
            params["location"] = location
        if level:
            params["level"] = level

        with ThreadPoolExecutor(max_workers=len(PAGES)) as pool:
            pages = list(pool.map(lambda p: self._fetch_page(params, p), PAGES))
        return [p for page in pages for p in page]

    def _fetch(self, query_terms: list[str], location_hint: str, level_hint: str) -> list[Posting]:
        # The Muse filters by location/level only; widen the location until something comes back.
        for location in (location_hint or DEFAULT_LOCATION, DEFAULT_LOCATION, ""):
            postings = self._fetch_location(location, level_hint)
            if postings:
                return postings
            log.debug("The Muse location=%r returned nothing", location)
        return []
