import json

from applypilot import cli
from applypilot.models import RankedPosting
from applypilot.store import JsonStore


def _fake_results(make_posting):
    return [
        RankedPosting(
            posting=make_posting(title=f"Engineer {i}", url=f"https://example.com/cli/{i}"),
            relevance=20 - i,
            linkedin_url="https://www.linkedin.com/jobs/search/?keywords=x",
            indeed_url="https://www.indeed.com/jobs?q=x",
            company_site_url="https://www.google.com/search?q=x",
        )
        for i in range(3)
    ]


def test_search_json_and_save(tmp_path, monkeypatch, capsys, make_posting):
    captured = {}

    def fake_rank(query, location, filters, **kwargs):
        captured.update(query=query, location=location, filters=filters)
        return _fake_results(make_posting)

    monkeypatch.setattr(cli, "rank_job_search", fake_rank)
    store_path = tmp_path / "state.json"
    code = cli.main([
        "--store", str(store_path), "search", "python developer",
        "--location", "Denver, CO", "--remote-only", "--any-region",
        "--config", str(tmp_path / "missing.yaml"), "--json", "--save", "2",
    ])

    assert code == 0
    printed = json.loads(capsys.readouterr().out)
    assert [row["title"] for row in printed] == ["Engineer 0", "Engineer 1", "Engineer 2"]
    assert printed[0]["relevance"] == 20
    assert printed[0]["fit"] == 0

    filters = captured["filters"]
    assert filters.remote_only is True
    assert filters.us_only is False
    assert captured["location"] == "Denver, CO"
    assert len(JsonStore(store_path).read()["applications"]) == 2


def test_parse_and_save(tmp_path, capsys):
    resume = tmp_path / "resume.txt"
    resume.write_text(
        "Jane Doe\njane@example.com\n\nSkills\nPython, Go\n\nCERTIFICATIONS\nCertified Kubernetes Administrator (CKA)\n",
        encoding="utf-8",
    )
    store_path = tmp_path / "state.json"

    assert cli.main(["--store", str(store_path), "parse", str(resume), "--save"]) == 0
    payload = json.loads(capsys.readouterr().out)
    assert payload["contact"]["email"] == "jane@example.com"

    data = JsonStore(store_path).read()
    (saved,) = data["resumes"]
    assert saved["original_file_name"] == "resume.txt"
    assert data["profile"]["contact_info"] == "jane@example.com"


def test_parse_missing_file_returns_error(tmp_path):
    assert cli.main(["parse", str(tmp_path / "nope.txt")]) == 1


def test_applications_listing_and_status(tmp_path, capsys, make_posting, monkeypatch):
    store_path = tmp_path / "state.json"
    assert cli.main(["--store", str(store_path), "applications"]) == 0
    assert "No applications tracked yet." in capsys.readouterr().out

    monkeypatch.setattr(cli, "rank_job_search", lambda *a, **kw: _fake_results(make_posting)[:1])
    cli.main(["--store", str(store_path), "search", "x", "--config", str(tmp_path / "none.yaml"),
              "--json", "--save", "1"])
    capsys.readouterr()
    app_id = JsonStore(store_path).read()["applications"][0]["id"]

    assert cli.main(["--store", str(store_path), "applications", "--set-status", app_id, "applied"]) == 0
    assert "APPLIED" in capsys.readouterr().out
    assert cli.main(["--store", str(store_path), "applications", "--set-status", app_id, "bogus"]) == 1
    assert cli.main(["--store", str(store_path), "applications", "--set-status", "app-none", "offer"]) == 1


def test_linkedin_snapshot_resume_meta_and_status(tmp_path, capsys):
    store_path = tmp_path / "state.json"
    store = ["--store", str(store_path)]

    assert cli.main([*store, "status", "--json"]) == 0
    assert json.loads(capsys.readouterr().out)["linkedin"]["ready"] is False

    raw = tmp_path / "linkedin.txt"
    raw.write_text("Languages\nEnglish, German\n", encoding="utf-8")
    assert cli.main([*store, "linkedin", "https://www.linkedin.com/in/jane", "--headline", "Data Engineer",
                     "--about", "Airflow and dbt pipelines", "--raw-file", str(raw)]) == 0
    assert "Stored LinkedIn snapshot li-" in capsys.readouterr().out

    assert cli.main([*store, "status"]) == 0
    out = capsys.readouterr().out
    assert "linkedin  ready    LinkedIn snapshot available" in out
    assert "profile   ready    Profile has enough signals" in out

    JsonStore(store_path).update(lambda data: data["resumes"].append({"id": "resume-1", "content": "text"}))
    assert cli.main([*store, "resume-meta", "resume-1", "--role", "Data Engineer",
                     "--skill", "airflow", "--skill", "dbt", "--preferences", "remote"]) == 0
    assert cli.main([*store, "resume-meta", "resume-2", "--role", "x"]) == 1

    data = JsonStore(store_path).read()
    assert data["resumes"][0]["focus_skills"] == ["airflow", "dbt"]
    assert data["profile"]["linkedin"] == "https://www.linkedin.com/in/jane"
    assert {s["name"] for s in data["profile"]["skills"]} == {"dbt", "airflow"}
    assert data["profile"]["custom_fields"][0]["source"] == "LinkedIn"


def test_linkedin_without_url_returns_error(tmp_path):
    assert cli.main(["--store", str(tmp_path / "state.json"), "linkedin", ""]) == 1
