import pytest

from applypilot.config import DEFAULT_SOURCE_TIMEOUT, load_settings, source_timeout


def test_missing_file_gives_defaults(tmp_path):
    settings = load_settings(tmp_path / "absent.yaml")
    assert settings["filters"]["us_only"] is True
    assert settings["filters"]["posted_within_days"] == 30
    assert settings["source_timeout"] == DEFAULT_SOURCE_TIMEOUT


def test_filters_section_overrides_defaults(tmp_path):
    path = tmp_path / "search.yaml"
    path.write_text("filters:\n  remote_only: true\n  keywords: [python]\nsource_timeout: 3\n", encoding="utf-8")

    settings = load_settings(path)
    assert settings["filters"]["remote_only"] is True
    assert settings["filters"]["keywords"] == ["python"]
    assert settings["filters"]["min_relevance"] == 1
    assert settings["source_timeout"] == 3


def test_top_level_filter_keys_are_accepted(tmp_path):
    path = tmp_path / "search.yaml"
    path.write_text("level: senior\nunrelated: 1\n", encoding="utf-8")

    filters = load_settings(path)["filters"]
    assert filters["level"] == "senior"
    assert "unrelated" not in filters


def test_non_mapping_file_is_rejected(tmp_path):
    path = tmp_path / "search.yaml"
    path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_settings(path)


def test_source_timeout_env_wins(monkeypatch):
    monkeypatch.setenv("SOURCE_TIMEOUT_SECONDS", "2.5")
    assert source_timeout({"source_timeout": 10}) == 2.5


def test_source_timeout_falls_back_on_bad_values(monkeypatch):
    monkeypatch.delenv("SOURCE_TIMEOUT_SECONDS", raising=False)
    assert source_timeout({"source_timeout": 4}) == 4.0
    assert source_timeout({"source_timeout": "soon"}) == DEFAULT_SOURCE_TIMEOUT
    assert source_timeout({"source_timeout": -1}) == DEFAULT_SOURCE_TIMEOUT
    assert source_timeout(None) == DEFAULT_SOURCE_TIMEOUT
