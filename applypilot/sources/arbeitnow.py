"""Arbeitnow — free job board API, one unfiltered feed.

Docs: https://www.arbeitnow.com/blog/job-board-api
"""
from __future__ import annotations

from applypilot.models import Posting
from applypilot.sources.base import JobSource, apply_url, posting_id

API_URL = "https://www.arbeitnow.com/api/job-board-api"


class ArbeitnowSource(JobSource):
    name = "Arbeitnow"

    def _fetch(self, query_terms: list[str], location_hint: str, level_hint: str) -> list[Posting]:
        # The feed takes no query; relevance is left entirely to the ranker.
        data = self._get_json(API_URL)

        postings: list[Posting] = []
        for index, hit in enumerate(data.get("data") or []):
            title = hit.get("title") or "Untitled Role"
            company = hit.get("company_name") or "Unknown Company"
            remote = bool(hit.get("remote"))
            tags = [str(t) for t in hit.get("tags") or []]
            job_types = hit.get("job_types") or []
            postings.append(
                Posting(
                    id=posting_id("arbeitnow", hit.get("slug"), hit.get("url"), index),
                    title=title,
                    company=company,
                    location=hit.get("location") or ("Remote" if remote else "Unknown"),
                    url=apply_url(hit.get("url"), title, company),
                    description=hit.get("description") or "No description available",
                    level=str(job_types[0]) if job_types else "",
                    category=tags[0] if tags else "",
                    source=self.name,
                    posted_date=hit.get("created_at"),
                    remote=remote,
                    tags=tags,
                )
            )
        return postings
