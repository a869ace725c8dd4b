"""Shared adapter contract: fetch never raises, failures mean zero postings."""
from __future__ import annotations

import hashlib
import re
from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote_plus

import requests

from applypilot.config import DEFAULT_SOURCE_TIMEOUT
from applypilot.log import get_logger
from applypilot.models import Posting

log = get_logger(__name__)

_HTTP_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


class SourceUnavailable(Exception):
    """A provider answered with a non-2xx status, bad JSON, or not at all."""


def is_http_url(value: Any) -> bool:
    return isinstance(value, str) and bool(_HTTP_URL_RE.match(value))


def fallback_url(title: str, company: str) -> str:
    return f"https://www.google.com/search?q={quote_plus(f'{title} {company} careers')}"


def apply_url(url: Any, title: str, company: str) -> str:
    return url if is_http_url(url) else fallback_url(title or "Job", company or "Company")


def posting_id(prefix: str, raw_id: Any, url: Any, fallback: Any) -> str:
    """Adapter-prefixed id; a missing provider id falls back to the URL, then *fallback*."""
    if raw_id not in (None, ""):
        return f"{prefix}-{raw_id}"
    if is_http_url(url):
        return f"{prefix}-{hashlib.sha1(url.encode('utf-8')).hexdigest()[:12]}"
    return f"{prefix}-{fallback}"


class JobSource(ABC):
    name: str = "Unknown Source"

    def __init__(self, timeout: float = DEFAULT_SOURCE_TIMEOUT, session: requests.Session | None = None) -> None:
        self.timeout = timeout
        self.http = session or requests

    def is_configured(self) -> bool:
        return True

    def fetch(self, query_terms: list[str], location_hint: str = "", level_hint: str = "") -> list[Posting]:
        """Postings for the query; ``[]`` when inert or unavailable."""
        if not self.is_configured():
            log.debug("[%s] not configured — skipping", self.name)
            return []
        try:
            postings = self._fetch(list(query_terms or []), location_hint or "", level_hint or "")
        except SourceUnavailable as exc:
            log.warning("[%s] unavailable: %s", self.name, exc)
            return []
        except (AttributeError, KeyError, TypeError) as exc:
            log.warning("[%s] malformed payload: %s", self.name, exc)
            return []
        log.info("[%s] returned %d postings", self.name, len(postings))
        return postings

    @abstractmethod
    def _fetch(self, query_terms: list[str], location_hint: str, level_hint: str) -> list[Posting]:
        pass

    def _get_json(
        self, url: str, *, params: dict | None = None, headers: dict | None = None, expect: type = dict
    ) -> Any:
        """GET *url* and decode JSON, mapping every failure to SourceUnavailable."""
        try:
            r = self.http.get(url, params=params, headers=headers, timeout=self.timeout)
        except requests.RequestException as exc:
            raise SourceUnavailable(f"request failed: {exc}") from exc
        if not 200 <= r.status_code < 300:
            raise SourceUnavailable(f"HTTP {r.status_code} from {url}")
        try:
            data = r.json()
        except ValueError as exc:
            raise SourceUnavailable(f"malformed JSON from {url}") from exc
        if not isinstance(data, expect):
            raise SourceUnavailable(f"unexpected {type(data).__name__} payload from {url}")
        return data
