import os

# Keep test runs out of logs/ before applypilot.log configures the root logger.
os.environ.setdefault("APPLYPILOT_LOG_FILE", "0")

from datetime import datetime, timezone

import pytest

from applypilot.models import Posting

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_posting():
    counter = {"n": 0}

    def _make(**overrides):
        counter["n"] += 1
        n = counter["n"]
        fields = dict(
            id=f"test-{n}",
            title=f"Engineer {n}",
            company=f"Company {n}",
            location="Austin, TX",
            url=f"https://example.com/jobs/{n}",
            description="Build things.",
            source="The Muse",
            posted_date="2026-03-01T00:00:00Z",
        )
        fields.update(overrides)
        return Posting(**fields)

    return _make
