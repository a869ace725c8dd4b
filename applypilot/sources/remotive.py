"""Remotive — free API for remote tech jobs (no API key required).

Docs: https://remotive.com/api/remote-jobs
"""
from __future__ import annotations

from applypilot.log import get_logger
from applypilot.models import Posting
from applypilot.sources.base import JobSource, apply_url, posting_id

log = get_logger(__name__)

API_URL = "https://remotive.com/api/remote-jobs"

# Remotive's search is an AND over words; long queries return nothing.
MAX_SEARCH_TERMS = 6


class RemotiveSource(JobSource):
    name = "Remotive"

    def _fetch(self, query_terms: list[str], location_hint: str, level_hint: str) -> list[Posting]:
        search = " ".join(query_terms[:MAX_SEARCH_TERMS])
        data = self._get_json(API_URL, params={"search": search} if search else None)

        postings: list[Posting] = []
        for index, hit in enumerate(data.get("jobs") or []):
            title = hit.get("title") or "Untitled Role"
            company = hit.get("company_name") or "Unknown Company"
            postings.append(
                Posting(
                    id=posting_id("remotive", hit.get("id"), hit.get("url"), index),
                    title=title,
                    company=company,
                    location=hit.get("candidate_required_location") or "Remote",
                    url=apply_url(hit.get("url"), title, company),
                    description=hit.get("description") or "No description available",
                    level=hit.get("job_type") or "",
                    category=hit.get("category") or "",
                    source=self.name,
                    posted_date=hit.get("publication_date"),
                    remote=True,
                    tags=[str(t) for t in hit.get("tags") or []],
                )
            )
        log.debug("Remotive search=%r returned %d jobs", search, len(postings))
        return postings
