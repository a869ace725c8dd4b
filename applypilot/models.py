"""Data models for postings, candidate signals and parsed resumes."""
from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from typing import Any

from applypilot.text import tokenize

# Per-class multipliers for CandidateSignal.weighted_terms.
TERM_WEIGHTS: dict[str, int] = {
    "role": 4,
    "focus": 3,
    "preference": 2,
    "persona": 2,
    "name": 1,
    "skill": 1,
}


@dataclass
class Posting:
    id: str
    title: str
    company: str
    location: str
    url: str
    description: str = ""
    level: str = ""
    category: str = ""
    source: str = "Unknown Source"
    posted_date: str | int | float | None = None
    remote: bool = False
    tags: list[str] = field(default_factory=list)

    def dedup_key(self) -> str:
        return f"{self.title}|{self.company}|{self.location}".lower()


@dataclass
class ScoredPosting:
    posting: Posting
    score: int


@dataclass
class RankedPosting:
    posting: Posting
    relevance: int
    linkedin_url: str
    indeed_url: str
    company_site_url: str
    # 0-100 overlap with the target role, focus skills and preferences
    fit: int = 0

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self.posting)
        data.pop("tags", None)
        data.update(
            relevance=self.relevance,
            fit=self.fit,
            linkedin_url=self.linkedin_url,
            indeed_url=self.indeed_url,
            company_site_url=self.company_site_url,
        )
        return data


@dataclass
class SearchFilters:
    locations: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    remote_only: bool = False
    relocation: str = "any"
    level: str = ""
    min_relevance: int | float = 1
    us_only: bool = True
    posted_within_days: int = 30

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "SearchFilters":
        data = data or {}
        relocation = str(data.get("relocation") or "any").lower()
        if relocation not in ("any", "yes", "no"):
            relocation = "any"
        min_relevance = data.get("min_relevance")
        posted = data.get("posted_within_days")
        return cls(
            locations=[str(x) for x in data.get("locations") or []],
            keywords=[str(x) for x in data.get("keywords") or []],
            remote_only=bool(data.get("remote_only", False)),
            relocation=relocation,
            level=str(data.get("level") or ""),
            min_relevance=1 if min_relevance is None else min_relevance,
            us_only=data.get("us_only") is not False,
            posted_within_days=30 if posted is None else int(posted),
        )


@dataclass
class CandidateSignal:
    """Provenance-tagged term pools; weights are applied at scoring time."""

    role_terms: list[str] = field(default_factory=list)
    focus_terms: list[str] = field(default_factory=list)
    preference_terms: list[str] = field(default_factory=list)
    name_terms: list[str] = field(default_factory=list)
    query_terms: list[str] = field(default_factory=list)
    keyword_terms: list[str] = field(default_factory=list)
    persona_titles: list[str] = field(default_factory=list)
    skill_pool: list[str] = field(default_factory=list)
    linkedin_terms: list[str] = field(default_factory=list)
    profile_terms: list[str] = field(default_factory=list)
    preferred_locations: list[str] = field(default_factory=list)
    location_hints: list[str] = field(default_factory=list)
    excluded_terms: set[str] = field(default_factory=set)

    @property
    def persona_terms(self) -> list[str]:
        return [t for title in self.persona_titles for t in tokenize(title)]

    @property
    def search_terms(self) -> list[str]:
        """Query, keyword, persona-title and top skill terms, deduplicated."""
        merged = [
            *self.query_terms,
            *self.keyword_terms,
            *self.persona_terms,
            *self.skill_pool[:24],
        ]
        return [t for t in dict.fromkeys(merged) if t not in self.excluded_terms]

    @property
    def weighted_terms(self) -> Counter[str]:
        weights: Counter[str] = Counter()
        pools = (
            ("role", self.role_terms),
            ("focus", self.focus_terms),
            ("preference", self.preference_terms),
            ("name", self.name_terms),
            ("persona", self.persona_terms),
            ("skill", self.skill_pool),
        )
        for kind, terms in pools:
            for term in terms:
                weights[term] += TERM_WEIGHTS[kind]
        return weights


@dataclass
class Contact:
    name: str = ""
    email: str = ""
    phone: str = ""
    linkedin: str = ""
    portfolio: str = ""
    location: str = ""


@dataclass
class ExperienceItem:
    title: str = ""
    company: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    bullets: list[str] = field(default_factory=list)


@dataclass
class EducationItem:
    school: str = ""
    degree: str = ""
    start_year: str = ""
    end_year: str = ""
    gpa: str = ""


@dataclass
class SkillItem:
    name: str
    category: str = "Soft"


@dataclass
class ProjectItem:
    name: str = ""
    description: str = ""
    link: str = ""
    bullets: list[str] = field(default_factory=list)


@dataclass
class ParsedResume:
    contact: Contact = field(default_factory=Contact)
    summary: str = ""
    experience: list[ExperienceItem] = field(default_factory=list)
    education: list[EducationItem] = field(default_factory=list)
    skills: list[SkillItem] = field(default_factory=list)
    projects: list[ProjectItem] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class CustomField:
    label: str
    value: str
