from .base import JobSource, SourceUnavailable, fallback_url, is_http_url
from .themuse import TheMuseSource
from .remotive import RemotiveSource
from .arbeitnow import ArbeitnowSource
from .usajobs import UsaJobsSource

from applypilot.config import DEFAULT_SOURCE_TIMEOUT, get_env
from applypilot.log import get_logger

log = get_logger(__name__)

__all__ = [
    "JobSource", "SourceUnavailable", "fallback_url", "is_http_url",
    "TheMuseSource", "RemotiveSource", "ArbeitnowSource", "UsaJobsSource",
    "get_sources",
]


def get_sources(env_getter=get_env, timeout: float = DEFAULT_SOURCE_TIMEOUT) -> list[JobSource]:
    """All adapters in merge order; USAJobs is included even when inert."""
    sources: list[JobSource] = [
        TheMuseSource(timeout=timeout),
        RemotiveSource(timeout=timeout),
        ArbeitnowSource(timeout=timeout),
        UsaJobsSource(env_getter, timeout=timeout),
    ]
    for src in sources:
        if src.is_configured():
            log.debug("Registered source: %s", src.name)
        else:
            log.info("Source %s has no credentials — it will return nothing", src.name)
    return sources
