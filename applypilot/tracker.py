"""Track saved jobs and their applications in the JSON store."""
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from applypilot.log import get_logger
from applypilot.models import Posting, RankedPosting
from applypilot.store import JsonStore

log = get_logger(__name__)

STATUSES: tuple[str, ...] = (
    "INTERESTED", "DRAFTING", "READY", "APPLIED", "RECRUITER_SCREEN",
    "TECHNICAL", "ONSITE", "OFFER", "REJECTED", "WITHDRAWN",
)
CHECKLIST_KEYS: tuple[str, ...] = ("research", "tailor", "prep_buttons", "review", "submitted")
DEFAULT_PRIORITY = 50


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def _job_record(posting: Posting, priority: int, fit: int) -> dict[str, Any]:
    now = _now()
    return {
        "id": f"job-{uuid.uuid4().hex[:12]}",
        "company": posting.company,
        "title": posting.title,
        "location": posting.location,
        "remote_policy": "Remote" if posting.remote else "",
        "link": posting.url,
        "description": posting.description,
        "source": posting.source or "Job Search",
        "priority_score": priority,
        "fit_score": fit,
        "created_at": now,
        "updated_at": now,
    }


def promote_posting(store: JsonStore, ranked: RankedPosting | Posting) -> dict[str, Any]:
    """Persist a search result as a Job plus an INTERESTED Application.

    Returns the application.  A posting whose URL is already saved returns
    the existing application; a saved job without one gets a new application
    attached instead of a second job record.
    """
    posting = ranked.posting if isinstance(ranked, RankedPosting) else ranked
    priority = DEFAULT_PRIORITY
    fit = 0
    if isinstance(ranked, RankedPosting):
        priority = max(1, min(100, ranked.relevance))
        fit = ranked.fit

    result: dict[str, Any] = {}

    def mutate(data: dict[str, Any]) -> None:
        jobs = data.setdefault("jobs", [])
        apps = data.setdefault("applications", [])
        job = next((j for j in jobs if posting.url and j.get("link") == posting.url), None)
        if job is not None:
            existing = next((a for a in apps if a.get("job_id") == job.get("id")), None)
            if existing is not None:
                result.update(existing)
                return
        else:
            job = _job_record(posting, priority, fit)
            jobs.append(job)
        now = _now()
        app = {
            "id": f"app-{uuid.uuid4().hex[:12]}",
            "job_id": job["id"],
            "status": "INTERESTED",
            "notes": "",
            "checklist": {key: False for key in CHECKLIST_KEYS},
            "created_at": now,
            "updated_at": now,
        }
        apps.append(app)
        result.update(app)

    store.update(mutate)
    log.info("Saved %s @ %s [%s]", posting.title, posting.company, result.get("status"))
    return result


def get_applications(store: JsonStore) -> list[dict[str, Any]]:
    """Applications joined with their job records."""
    data = store.read()
    jobs = {j.get("id"): j for j in data.get("jobs") or []}
    return [{**app, "job": jobs.get(app.get("job_id"), {})} for app in data.get("applications") or []]


def get_saved_urls(store: JsonStore) -> set[str]:
    return {j["link"] for j in store.read().get("jobs") or [] if j.get("link")}


def update_status(store: JsonStore, application_id: str, status: str) -> bool:
    """Update status of an existing application (e.g. INTERESTED -> APPLIED)."""
    status = status.upper()
    if status not in STATUSES:
        raise ValueError(f"Unknown status {status!r}; expected one of {', '.join(STATUSES)}")

    found: list[str] = []

    def mutate(data: dict[str, Any]) -> None:
        for app in data.get("applications") or []:
            if app.get("id") == application_id:
                found.append(app.get("status", ""))
                app["status"] = status
                app["updated_at"] = _now()
                return

    store.update(mutate)
    if not found:
        return False
    log.debug("Updated %s: %s → %s", application_id, found[0] or "UNKNOWN", status)
    return True
