"""Fold parsed resumes, LinkedIn snapshots and inferred custom fields into the stored profile."""
from __future__ import annotations

import re
import uuid
from dataclasses import asdict
from datetime import datetime, timezone
from typing import Any

from applypilot.log import get_logger
from applypilot.models import CustomField, ParsedResume
from applypilot.resume_parser import parse_resume_text
from applypilot.sections import infer_custom_fields
from applypilot.store import JsonStore
from applypilot.tables import LINKEDIN_SKILLS

log = get_logger(__name__)

CUSTOM_FIELD_SOURCES = ("Resume", "LinkedIn", "Manual")
SNAPSHOT_TEXT_LIMIT = 20000
SUMMARY_LIMIT = 300


def _new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def has_useful_data(parsed: ParsedResume) -> bool:
    c = parsed.contact
    return any([
        parsed.summary, c.email, c.linkedin, c.portfolio,
        parsed.experience, parsed.education, parsed.skills, parsed.projects,
    ])


def _merge_items(
    existing: list[dict[str, Any]],
    incoming: list[dict[str, Any]],
    key_fields: tuple[str, ...],
    prefix: str,
    replace: bool,
) -> list[dict[str, Any]]:
    stamped = [{"id": _new_id(prefix), **item} for item in incoming]
    if replace:
        return stamped

    def key(item: dict[str, Any]) -> str:
        return "|".join(str(item.get(f) or "").strip().lower() for f in key_fields)

    merged = list(existing)
    seen = {key(item) for item in merged}
    for item in stamped:
        k = key(item)
        if k in seen:
            continue
        seen.add(k)
        merged.append(item)
    return merged


def merge_parsed_resume(
    profile: dict[str, Any], parsed: ParsedResume, replace: bool = False
) -> dict[str, Any]:
    """Update *profile* in place from *parsed* and return it.

    Contact and summary are overwritten only by non-empty values.  With
    ``replace=True`` each parsed section replaces the stored one; otherwise
    new entries are appended and duplicates skipped.
    """
    contact = parsed.contact
    if contact.email:
        profile["contact_info"] = contact.email
    for field_name in ("location", "linkedin", "portfolio"):
        value = getattr(contact, field_name)
        if value:
            profile[field_name] = value
    if contact.name and not profile.get("name"):
        profile["name"] = contact.name
    if parsed.summary:
        profile["summary"] = parsed.summary

    sections = (
        ("experience", parsed.experience, ("title", "company"), "exp"),
        ("education", parsed.education, ("school", "degree"), "edu"),
        ("skills", parsed.skills, ("name",), "skill"),
        ("projects", parsed.projects, ("name",), "proj"),
    )
    for name, items, key_fields, prefix in sections:
        profile[name] = _merge_items(
            profile.get(name) or [],
            [asdict(item) for item in items],
            key_fields,
            prefix,
            replace,
        )
    return profile


def upsert_custom_field(profile: dict[str, Any], label: str, value: str, source: str = "Manual") -> None:
    """Insert or overwrite a custom field by case-insensitive label."""
    label = (label or "").strip()
    value = (value or "").strip()
    if not label or not value:
        return
    if source not in CUSTOM_FIELD_SOURCES:
        raise ValueError(f"Unknown custom field source: {source!r}")

    fields = profile.setdefault("custom_fields", [])
    for existing in fields:
        if (existing.get("label") or "").lower() == label.lower():
            existing.update(value=value, source=source, updated_at=_now())
            return
    fields.append({
        "id": _new_id("custom"),
        "label": label,
        "value": value,
        "source": source,
        "updated_at": _now(),
    })


def refresh_profile_from_text(
    store: JsonStore, text: str, replace: bool = True
) -> tuple[ParsedResume, list[CustomField]]:
    """Parse *text*, then merge structure and custom fields into the stored profile."""
    parsed = parse_resume_text(text)
    if not has_useful_data(parsed):
        raise ValueError("Could not extract useful fields from the resume text")
    custom = infer_custom_fields(text)

    def mutate(data: dict[str, Any]) -> None:
        profile = data.setdefault("profile", {})
        merge_parsed_resume(profile, parsed, replace=replace)
        for field in custom:
            upsert_custom_field(profile, field.label, field.value, "Resume")

    store.update(mutate)
    log.info("Profile refreshed: %d experience, %d skills, %d custom fields",
             len(parsed.experience), len(parsed.skills), len(custom))
    return parsed, custom


# ── LinkedIn snapshots ───────────────────────────────────────────────────

def linkedin_skills(text: str) -> list[str]:
    """Known skills mentioned as whole words in *text*, in table order."""
    low = (text or "").lower()
    return [
        skill for skill in LINKEDIN_SKILLS
        if re.search(rf"(?<![a-z0-9]){re.escape(skill)}(?![a-z0-9])", low)
    ]


def ingest_linkedin_snapshot(
    store: JsonStore,
    profile_url: str,
    *,
    name: str = "",
    headline: str = "",
    about: str = "",
    location: str = "",
    raw_text: str = "",
) -> dict[str, Any]:
    """Store a LinkedIn profile snapshot and fold it into the profile.

    The snapshot feeds the search signal.  The profile gains the URL and
    location when it has none, a summary from headline and about, any known
    skills it lacks, and LinkedIn-sourced custom fields.  Returns the snapshot.
    """
    profile_url = (profile_url or "").strip()
    if not profile_url:
        raise ValueError("A LinkedIn profile URL is required")

    now = _now()
    snapshot = {
        "id": _new_id("li"),
        "profile_url": profile_url,
        "name": name.strip(),
        "headline": headline.strip(),
        "location": location.strip(),
        "about": about.strip(),
        "raw_text": raw_text[:SNAPSHOT_TEXT_LIMIT],
        "created_at": now,
        "updated_at": now,
    }
    blob = "\n".join([snapshot["headline"], snapshot["about"], snapshot["raw_text"]])
    skills = linkedin_skills(blob)
    custom = infer_custom_fields(blob)

    def mutate(data: dict[str, Any]) -> None:
        data.setdefault("linkedin_profiles", []).append(snapshot)
        profile = data.setdefault("profile", {})
        if not profile.get("linkedin"):
            profile["linkedin"] = profile_url
        if snapshot["location"] and not profile.get("location"):
            profile["location"] = snapshot["location"]
        contact = profile.get("contact_info") or ""
        if snapshot["name"] and snapshot["name"] not in contact:
            profile["contact_info"] = " | ".join(p for p in (snapshot["name"], contact) if p)
        summary = " ".join(p for p in (snapshot["headline"], snapshot["about"]) if p)
        if summary:
            profile["summary"] = summary[:SUMMARY_LIMIT]

        known = {(s.get("name") or "").lower() for s in profile.get("skills") or []}
        profile["skills"] = list(profile.get("skills") or [])
        for skill in skills:
            if skill not in known:
                profile["skills"].append({"id": _new_id("skill"), "name": skill, "category": "Technical"})
        for field in custom:
            upsert_custom_field(profile, field.label, field.value, "LinkedIn")

    store.update(mutate)
    log.info("LinkedIn snapshot %s stored: %d skills, %d custom fields",
             snapshot["id"], len(skills), len(custom))
    return snapshot


# ── Resume workshop ──────────────────────────────────────────────────────

def update_resume_workshop(
    store: JsonStore,
    resume_id: str,
    target_role: str = "",
    focus_skills: list[str] | None = None,
    job_preferences: str = "",
) -> bool:
    """Set the target role, focus skills and preferences on a stored resume.

    Returns False when no resume has *resume_id*.
    """
    found = False

    def mutate(data: dict[str, Any]) -> None:
        nonlocal found
        for resume in data.get("resumes") or []:
            if resume.get("id") != resume_id:
                continue
            resume["target_role"] = (target_role or "").strip()
            resume["focus_skills"] = [s.strip() for s in focus_skills or [] if s and s.strip()]
            resume["job_preferences"] = (job_preferences or "").strip()
            resume["updated_at"] = _now()
            found = True
            return

    store.update(mutate)
    if found:
        log.info("Resume %s targeting %r", resume_id, (target_role or "").strip())
    return found
