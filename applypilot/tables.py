"""Heuristic vocabularies used by the ranker, the signal builder and the parser.

Kept in one place so they can be extended without touching scoring code.
"""
from __future__ import annotations

import re

STOP_WORDS: frozenset[str] = frozenset({
    "and", "or", "not", "with", "for", "the", "a", "an", "to", "of", "in", "on",
})

# Country aliases that carry no information as a location hint.
COUNTRY_ALIASES: frozenset[str] = frozenset({"united states", "usa", "us"})

REMOTE_PHRASES: tuple[str, ...] = ("remote", "work from home")

US_STATES: tuple[str, ...] = (
    "alabama", "alaska", "arizona", "arkansas", "california", "colorado",
    "connecticut", "delaware", "florida", "georgia", "hawaii", "idaho",
    "illinois", "indiana", "iowa", "kansas", "kentucky", "louisiana", "maine",
    "maryland", "massachusetts", "michigan", "minnesota", "mississippi",
    "missouri", "montana", "nebraska", "nevada", "new hampshire", "new jersey",
    "new mexico", "new york", "north carolina", "north dakota", "ohio",
    "oklahoma", "oregon", "pennsylvania", "rhode island", "south carolina",
    "south dakota", "tennessee", "texas", "utah", "vermont", "virginia",
    "washington", "west virginia", "wisconsin", "wyoming", "district of columbia",
)

US_STATE_CODES: tuple[str, ...] = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "FL", "GA", "HI", "ID",
    "IL", "IN", "IA", "KS", "KY", "LA", "ME", "MD", "MA", "MI", "MN", "MS",
    "MO", "MT", "NE", "NV", "NH", "NJ", "NM", "NY", "NC", "ND", "OH", "OK",
    "OR", "PA", "RI", "SC", "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV",
    "WI", "WY", "DC",
)

US_PHRASES: tuple[str, ...] = ("united states", "u.s.") + US_STATES

# Matched against the original-case text: "US" must not match "join us" or "business".
US_WORD_RE = re.compile(r"\b(?:USA|US|usa)\b")
US_STATE_CODE_RE = re.compile(r",\s*(?:%s)\b" % "|".join(US_STATE_CODES))

ATS_DOMAINS: tuple[str, ...] = (
    "greenhouse.io",
    "lever.co",
    "myworkdayjobs.com",
    "icims.com",
    "smartrecruiters.com",
    "ashbyhq.com",
    "jobs.ashbyhq.com",
)

TITLE_CATALOG: tuple[str, ...] = (
    "software engineer",
    "frontend engineer",
    "backend engineer",
    "full stack engineer",
    "product manager",
    "data analyst",
    "data scientist",
    "machine learning engineer",
    "devops engineer",
    "site reliability engineer",
    "qa engineer",
    "security engineer",
    "cloud engineer",
    "ui engineer",
    "ux designer",
)

# Ordered: the first category whose keywords match wins, default "Soft".
SKILL_CATEGORIES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Technical", (
        "python", "javascript", "typescript", "java", "c++", "c#", "go",
        "react", "node", "sql", "postgresql", "mysql", "aws", "azure", "docker", "kubernetes",
    )),
    ("Tool", (
        "excel", "jira", "figma", "tableau", "power bi", "postman", "git",
        "github", "notion",
    )),
    ("Language", (
        "english", "spanish", "french", "hindi", "urdu", "arabic", "german",
    )),
)

# Skills picked up from a LinkedIn snapshot; stored as "Technical".
LINKEDIN_SKILLS: tuple[str, ...] = (
    "python", "javascript", "typescript", "react", "next.js", "node.js", "sql",
    "aws", "azure", "gcp", "docker", "kubernetes", "java", "c++", "c#", "go",
    "terraform", "graphql", "rest", "machine learning", "data engineering",
    "snowflake", "dbt", "airflow", "pandas", "numpy", "tableau", "power bi",
)

# Heading aliases -> canonical section name.
SECTION_HEADINGS: dict[str, str] = {
    "experience": "experience",
    "work experience": "experience",
    "professional experience": "experience",
    "employment": "experience",
    "employment history": "experience",
    "education": "education",
    "skills": "skills",
    "technical skills": "skills",
    "core skills": "skills",
    "projects": "projects",
    "personal projects": "projects",
    "summary": "summary",
    "professional summary": "summary",
    "profile": "summary",
    "about": "summary",
    "about me": "summary",
    "objective": "summary",
    "certifications": "certifications",
    "certification": "certifications",
    "licenses": "certifications",
    "languages": "languages",
    "awards": "awards",
    "honors": "awards",
    "volunteer": "volunteer",
    "volunteering": "volunteer",
    "publications": "publications",
    "patents": "patents",
    "interests": "interests",
}

# Sections the parser consumes directly; never reported as custom fields.
PARSED_SECTIONS: frozenset[str] = frozenset({"summary", "experience", "education", "skills", "projects"})

CUSTOM_FIELD_KEYS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Certifications", ("certifications", "licenses", "license")),
    ("Languages", ("languages", "language")),
    ("Awards", ("awards", "achievements", "honors")),
    ("Volunteer", ("volunteer", "volunteering", "community")),
    ("Publications", ("publications", "publication")),
    ("Patents", ("patents", "patent")),
    ("Interests", ("interests", "hobbies")),
)

DEGREE_RE = re.compile(
    r"(?<![a-z])(b\.?s\.?|b\.?a\.?|bachelor|m\.?s\.?|m\.?a\.?|master|ph\.?d|doctor|mba|associate)(?![a-z])",
    re.IGNORECASE,
)
