import pytest

from applypilot.models import Contact, ExperienceItem, ParsedResume, SkillItem
from applypilot.profile_builder import (
    has_useful_data,
    ingest_linkedin_snapshot,
    linkedin_skills,
    merge_parsed_resume,
    refresh_profile_from_text,
    update_resume_workshop,
    upsert_custom_field,
)
from applypilot.store import JsonStore

RESUME = """JANE DOE
jane@example.com

SUMMARY
Platform engineer focused on reliable infrastructure.

EXPERIENCE
Senior Engineer | Acme Corp
2019 - Present
- Built deploy tooling

SKILLS
Python, Terraform

CERTIFICATIONS
AWS Certified Solutions Architect - Associate
"""


def _parsed(*titles, email="jane@example.com", summary="Engineer"):
    return ParsedResume(
        contact=Contact(name="Jane Doe", email=email, location="Austin, TX"),
        summary=summary,
        experience=[ExperienceItem(title=t, company="Acme") for t in titles],
        skills=[SkillItem(name="Python", category="Technical")],
    )


def test_has_useful_data():
    assert not has_useful_data(ParsedResume())
    assert not has_useful_data(ParsedResume(contact=Contact(name="Only A Name")))
    assert has_useful_data(ParsedResume(contact=Contact(email="a@b.co")))


def test_merge_replace_overwrites_sections():
    profile = {"experience": [{"id": "exp-old", "title": "Old", "company": "Gone"}], "name": "Keep Me"}
    merge_parsed_resume(profile, _parsed("Engineer"), replace=True)

    assert [e["title"] for e in profile["experience"]] == ["Engineer"]
    assert profile["experience"][0]["id"].startswith("exp-")
    assert profile["contact_info"] == "jane@example.com"
    assert profile["location"] == "Austin, TX"
    assert profile["name"] == "Keep Me"
    assert profile["skills"][0]["name"] == "Python"


def test_merge_append_skips_duplicates():
    profile = {}
    merge_parsed_resume(profile, _parsed("Engineer"))
    merge_parsed_resume(profile, _parsed("ENGINEER ", "Lead"))

    assert [e["title"] for e in profile["experience"]] == ["Engineer", "Lead"]
    assert len(profile["skills"]) == 1
    assert profile["name"] == "Jane Doe"


def test_merge_keeps_existing_values_for_empty_fields():
    profile = {"contact_info": "old@example.com", "summary": "Existing summary"}
    merge_parsed_resume(profile, _parsed("Engineer", email="", summary=""))
    assert profile["contact_info"] == "old@example.com"
    assert profile["summary"] == "Existing summary"


def test_upsert_custom_field_matches_label_case_insensitively():
    profile = {}
    upsert_custom_field(profile, "Clearance", "Secret", "Resume")
    upsert_custom_field(profile, "clearance", "Top Secret", "Manual")
    upsert_custom_field(profile, "Empty", "   ")

    (field,) = profile["custom_fields"]
    assert field["label"] == "Clearance"
    assert field["value"] == "Top Secret"
    assert field["source"] == "Manual"
    assert field["id"].startswith("custom-")


def test_upsert_custom_field_rejects_unknown_source():
    with pytest.raises(ValueError):
        upsert_custom_field({}, "Clearance", "Secret", "Email")


def test_refresh_profile_from_text(tmp_path):
    store = JsonStore(tmp_path / "state.json")
    parsed, custom = refresh_profile_from_text(store, RESUME)

    profile = store.read()["profile"]
    assert profile["contact_info"] == "jane@example.com"
    assert profile["summary"].startswith("Platform engineer")
    assert [(e["title"], e["company"]) for e in profile["experience"]] == [("Senior Engineer", "Acme Corp")]
    assert {"Python", "Terraform"} <= {s["name"] for s in profile["skills"]}

    fields = {f["label"]: f for f in profile["custom_fields"]}
    assert fields["Certifications"]["value"] == "AWS Certified Solutions Architect - Associate"
    assert fields["Certifications"]["source"] == "Resume"
    assert len(custom) == len(profile["custom_fields"])


def test_refresh_profile_rejects_empty_text(tmp_path):
    store = JsonStore(tmp_path / "state.json")
    with pytest.raises(ValueError):
        refresh_profile_from_text(store, "   ")
    assert store.read()["profile"]["experience"] == []


LINKEDIN_RAW = """Experience
Platform Engineer at Acme

Certifications
Certified Kubernetes Administrator (CKA)

Languages
English, Spanish
"""


def test_linkedin_skills_match_whole_words():
    assert linkedin_skills("Go, C++ and Power BI dashboards") == ["c++", "go", "power bi"]
    assert linkedin_skills("Google and a good restaurant") == []


def test_ingest_linkedin_snapshot_updates_profile(tmp_path):
    store = JsonStore(tmp_path / "state.json")
    store.update(lambda data: data["profile"].update(
        contact_info="jane@example.com", skills=[{"id": "skill-1", "name": "Python", "category": "Technical"}]
    ))

    snapshot = ingest_linkedin_snapshot(
        store,
        "https://www.linkedin.com/in/jane",
        name="Jane Doe",
        headline="Platform Engineer at Acme",
        about="I run Kubernetes and Terraform for data teams, mostly in Python and Airflow.",
        location="Austin, TX",
        raw_text=LINKEDIN_RAW,
    )

    data = store.read()
    assert data["linkedin_profiles"] == [snapshot]
    assert snapshot["id"].startswith("li-")
    assert snapshot["raw_text"] == LINKEDIN_RAW

    profile = data["profile"]
    assert profile["linkedin"] == "https://www.linkedin.com/in/jane"
    assert profile["location"] == "Austin, TX"
    assert profile["contact_info"] == "Jane Doe | jane@example.com"
    assert profile["summary"].startswith("Platform Engineer at Acme I run Kubernetes")
    assert [s["name"] for s in profile["skills"]] == ["Python", "kubernetes", "terraform", "airflow"]
    assert profile["skills"][-1]["category"] == "Technical"

    fields = {f["label"]: f for f in profile["custom_fields"]}
    assert "CKA" in fields["Certifications"]["value"]
    assert "Spanish" in fields["Languages"]["value"]
    assert {fields["Certifications"]["source"], fields["Languages"]["source"]} == {"LinkedIn"}


def test_ingest_linkedin_snapshot_keeps_existing_url_and_location(tmp_path):
    store = JsonStore(tmp_path / "state.json")
    store.update(lambda data: data["profile"].update(linkedin="https://www.linkedin.com/in/old", location="Denver, CO"))

    ingest_linkedin_snapshot(store, "https://www.linkedin.com/in/new", location="Austin, TX", raw_text="x" * 25000)

    data = store.read()
    assert data["profile"]["linkedin"] == "https://www.linkedin.com/in/old"
    assert data["profile"]["location"] == "Denver, CO"
    assert data["profile"]["summary"] == ""
    assert len(data["linkedin_profiles"][0]["raw_text"]) == 20000


def test_ingest_linkedin_snapshot_requires_url(tmp_path):
    store = JsonStore(tmp_path / "state.json")
    with pytest.raises(ValueError):
        ingest_linkedin_snapshot(store, "  ", headline="Engineer")
    assert store.read()["linkedin_profiles"] == []


def test_update_resume_workshop(tmp_path):
    store = JsonStore(tmp_path / "state.json")
    store.update(lambda data: data["resumes"].append({"id": "resume-1", "content": "text"}))

    assert update_resume_workshop(store, "resume-1", "  Site Reliability Engineer ", [" kubernetes ", "", "go"],
                                  " remote first ")
    assert not update_resume_workshop(store, "resume-9", "Anything")

    (resume,) = store.read()["resumes"]
    assert resume["target_role"] == "Site Reliability Engineer"
    assert resume["focus_skills"] == ["kubernetes", "go"]
    assert resume["job_preferences"] == "remote first"
