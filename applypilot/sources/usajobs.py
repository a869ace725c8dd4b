"""USAJobs — federal job search API.

Requires USAJOBS_HOST, USAJOBS_USER_AGENT and USAJOBS_AUTH_KEY; request a key
at https://developer.usajobs.gov/.  Without all three the source stays inert.
"""
from __future__ import annotations

from typing import Callable

from applypilot.config import DEFAULT_SOURCE_TIMEOUT, USAJOBS_ENV_KEYS, get_env
from applypilot.models import Posting
from applypilot.sources.base import JobSource, apply_url

API_URL = "https://data.usajobs.gov/api/search"
RESULTS_PER_PAGE = 50
MAX_KEYWORD_TERMS = 6


class UsaJobsSource(JobSource):
    name = "USAJobs"

    def __init__(
        self,
        env_getter: Callable[[str], str] = get_env,
        timeout: float = DEFAULT_SOURCE_TIMEOUT,
        session=None,
    ) -> None:
        super().__init__(timeout=timeout, session=session)
        self.host, self.user_agent, self.auth_key = (env_getter(k) for k in USAJOBS_ENV_KEYS)

    def is_configured(self) -> bool:
        return bool(self.host and self.user_agent and self.auth_key)

    def _fetch(self, query_terms: list[str], location_hint: str, level_hint: str) -> list[Posting]:
        params: dict = {
            "Keyword": " ".join(query_terms[:MAX_KEYWORD_TERMS]),
            "ResultsPerPage": str(RESULTS_PER_PAGE),
        }
        if location_hint:
            params["LocationName"] = location_hint
        headers = {
            "Host": self.host,
            "User-Agent": self.user_agent,
            "Authorization-Key": self.auth_key,
        }
        data = self._get_json(API_URL, params=params, headers=headers)

        items = (data.get("SearchResult") or {}).get("SearchResultItems") or []
        postings: list[Posting] = []
        for index, item in enumerate(items):
            d = item.get("MatchedObjectDescriptor") or {}
            title = d.get("PositionTitle") or "Untitled Role"
            company = d.get("OrganizationName") or "US Government"
            duties = ((d.get("UserArea") or {}).get("Details") or {}).get("MajorDuties") or []
            grades = d.get("JobGrade") or []
            schedules = d.get("PositionSchedule") or []
            postings.append(
                Posting(
                    id=f"usajobs-{d.get('PositionID') or d.get('PositionURI') or index}",
                    title=title,
                    company=company,
                    location=d.get("PositionLocationDisplay") or "United States",
                    url=apply_url(d.get("PositionURI"), title, company),
                    description=" ".join(str(x) for x in duties) or "No description available",
                    level=(grades[0] or {}).get("Code", "") if grades else "",
                    category=(schedules[0] or {}).get("Name", "") if schedules else "",
                    source=self.name,
                    posted_date=d.get("PublicationStartDate"),
                )
            )
        return postings
