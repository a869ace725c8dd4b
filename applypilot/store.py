"""Single-document JSON store with advisory file locking.

The whole pipeline state (profile, jobs, applications, resumes, LinkedIn
snapshots, settings) is one JSON document.  Writers take an exclusive lock,
apply a mutator to a fresh read and swap the file in atomically; the last
writer wins.
"""
from __future__ import annotations

import copy
import fcntl
import json
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Callable, Iterator

from applypilot.config import STORE_PATH
from applypilot.log import get_logger

log = get_logger(__name__)

DEFAULT_DOCUMENT: dict[str, Any] = {
    "profile": {
        "summary": "",
        "contact_info": "",
        "location": "",
        "linkedin": "",
        "portfolio": "",
        "experience": [],
        "education": [],
        "projects": [],
        "skills": [],
        "custom_fields": [],
    },
    "jobs": [],
    "applications": [],
    "resumes": [],
    "linkedin_profiles": [],
    "settings": {},
}


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        op = fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH
        fcntl.flock(f.fileno(), op)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class JsonStore:
    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path else STORE_PATH
        self.lock_path = self.path.with_suffix(self.path.suffix + ".lock")

    @contextmanager
    def _locked(self, exclusive: bool) -> Iterator[None]:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.lock_path, "a+", encoding="utf-8") as f:
            _lock(f, exclusive=exclusive)
            try:
                yield
            finally:
                _unlock(f)

    def _load(self) -> dict[str, Any]:
        data = copy.deepcopy(DEFAULT_DOCUMENT)
        if not self.path.exists():
            return data
        with open(self.path, "r", encoding="utf-8") as f:
            loaded = json.load(f)
        if not isinstance(loaded, dict):
            raise ValueError(f"{self.path.name} must contain a JSON object, got {type(loaded).__name__}")
        data.update(loaded)
        return data

    def _write(self, data: dict[str, Any]) -> None:
        fd, tmp = tempfile.mkstemp(dir=self.path.parent, prefix=self.path.name, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, default=str)
            os.replace(tmp, self.path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise

    def read(self) -> dict[str, Any]:
        """The current document, with defaults for any missing collection."""
        with self._locked(exclusive=False):
            return self._load()

    def update(self, mutator: Callable[[dict[str, Any]], Any]) -> dict[str, Any]:
        """Apply *mutator* to a fresh copy and persist it.

        The mutator edits the document in place; a returned dict replaces it.
        """
        with self._locked(exclusive=True):
            data = self._load()
            result = mutator(data)
            if isinstance(result, dict):
                data = result
            self._write(data)
        log.debug("Store updated → %s", self.path.name)
        return data
