from applypilot.models import CandidateSignal, RankedPosting
from applypilot.report import build_search_report


def _ranked(posting, relevance, fit=0):
    return RankedPosting(
        posting=posting,
        relevance=relevance,
        fit=fit,
        linkedin_url="https://www.linkedin.com/jobs/search/?keywords=x",
        indeed_url="https://www.indeed.com/jobs?q=x",
        company_site_url="https://www.google.com/search?q=x",
    )


def test_report_lists_matches_and_quick_reference(make_posting):
    saved = make_posting(title="Backend | Platform Engineer", company="Acme", url="https://boards.greenhouse.io/acme/1")
    other = make_posting(title="Data Engineer", company="Initech", source="Remotive")
    report = build_search_report([_ranked(saved, 30), _ranked(other, 20)], "python", saved_urls={saved.url})

    assert "**Query:** python" in report
    assert "**2** jobs from **2** sources (Remotive, The Muse)" in report
    assert "### ✅ Backend | Platform Engineer @ Acme" in report
    assert "[Boards](https://boards.greenhouse.io/acme/1)" in report
    assert "| 1 | Backend / Platform Engineer | Acme | Austin | 30 | 0 | The Muse |" in report
    assert "| 2 | Data Engineer | Initech | Austin | 20 | 0 | Remotive |" in report


def test_empty_report():
    report = build_search_report([], "")
    assert "(profile only)" in report
    assert "No jobs found" in report
    assert "Quick Reference" not in report


def test_report_shows_fit_and_strongest_signal_terms(make_posting):
    signal = CandidateSignal(role_terms=["platform"], focus_terms=["kubernetes"], name_terms=["resume"])
    report = build_search_report([_ranked(make_posting(title="Platform Engineer"), 25, fit=28)], "", signal=signal)

    assert "**Top signal terms:** platform, kubernetes, resume" in report
    assert "**Resume fit:** 28" in report
    assert "| 25 | 28 | The Muse |" in report
