"""
Command line interface for applypilot.

    applypilot search "backend engineer" --location "Austin, TX" --save 3
    applypilot parse resume.pdf --save
    applypilot applications [--set-status APP_ID STATUS]
    applypilot linkedin https://www.linkedin.com/in/jane --headline "Platform Engineer"
    applypilot resume-meta resume-1 --role "SRE" --skill kubernetes
    applypilot status
"""
from __future__ import annotations

import argparse
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from applypilot.config import ensure_dirs, load_settings, source_timeout
from applypilot.log import configure, get_logger
from applypilot.models import SearchFilters
from applypilot.profile_builder import ingest_linkedin_snapshot, refresh_profile_from_text, update_resume_workshop
from applypilot.report import build_search_report, write_search_report
from applypilot.resume_parser import extract_text, parse_resume_text
from applypilot.search import personalization_status, rank_job_search, signal_from_store
from applypilot.sections import infer_custom_fields
from applypilot.store import JsonStore
from applypilot.tracker import get_applications, get_saved_urls, promote_posting, update_status

log = get_logger(__name__)


def _filters_from_args(args: argparse.Namespace, defaults: dict[str, Any]) -> SearchFilters:
    merged = dict(defaults)
    if args.keyword:
        merged["keywords"] = args.keyword
    if args.remote_only:
        merged["remote_only"] = True
    if args.any_region:
        merged["us_only"] = False
    for key in ("relocation", "level", "min_relevance", "posted_within_days"):
        value = getattr(args, key)
        if value is not None:
            merged[key] = value
    return SearchFilters.from_dict(merged)


def cmd_search(args: argparse.Namespace) -> int:
    settings = load_settings(Path(args.config) if args.config else None)
    filters = _filters_from_args(args, settings["filters"])
    store = JsonStore(args.store)
    data = store.read()

    locations = [*filters.locations, args.location] if args.location else filters.locations
    signal = signal_from_store(data, args.query, locations, filters.keywords)
    results = rank_job_search(
        args.query,
        args.location or "",
        filters,
        signal=signal,
        timeout=source_timeout(settings),
    )

    if args.json:
        print(json.dumps([r.to_dict() for r in results], indent=2, default=str))
    else:
        report = build_search_report(results, args.query, saved_urls=get_saved_urls(store), signal=signal)
        print(report)
        if args.report:
            ensure_dirs()
            write_search_report(report)

    for r in results[: max(0, args.save)]:
        promote_posting(store, r)
    return 0


def cmd_parse(args: argparse.Namespace) -> int:
    path = Path(args.file)
    text = extract_text(path)
    parsed = parse_resume_text(text)
    custom = infer_custom_fields(text)

    payload = parsed.to_dict()
    payload["custom_fields"] = [{"label": f.label, "value": f.value} for f in custom]
    print(json.dumps(payload, indent=2))

    if args.save:
        store = JsonStore(args.store)
        now = datetime.now(timezone.utc).isoformat(timespec="seconds")

        def add_resume(data: dict[str, Any]) -> None:
            resumes = data.setdefault("resumes", [])
            resumes.append({
                "id": f"resume-{len(resumes) + 1}",
                "name": parsed.contact.name or path.stem,
                "original_file_name": path.name,
                "content": text,
                "version": 1,
                "created_at": now,
            })

        store.update(add_resume)
        refresh_profile_from_text(store, text, replace=not args.merge)
    return 0


def cmd_applications(args: argparse.Namespace) -> int:
    store = JsonStore(args.store)
    if args.set_status:
        app_id, status = args.set_status
        if not update_status(store, app_id, status):
            log.error("No application with id %s", app_id)
            return 1

    apps = get_applications(store)
    if not apps:
        print("No applications tracked yet.")
        return 0
    for app in apps:
        job = app.get("job") or {}
        print(f"{app.get('id')}  {app.get('status', ''):<16} {job.get('title', '')} @ {job.get('company', '')}")
    return 0


def cmd_linkedin(args: argparse.Namespace) -> int:
    raw_text = Path(args.raw_file).read_text(encoding="utf-8") if args.raw_file else ""
    snapshot = ingest_linkedin_snapshot(
        JsonStore(args.store),
        args.url,
        name=args.name,
        headline=args.headline,
        about=args.about,
        location=args.location,
        raw_text=raw_text,
    )
    print(f"Stored LinkedIn snapshot {snapshot['id']}")
    return 0


def cmd_resume_meta(args: argparse.Namespace) -> int:
    if not update_resume_workshop(JsonStore(args.store), args.resume_id, args.role, args.skill, args.preferences):
        log.error("No resume with id %s", args.resume_id)
        return 1
    print(f"Updated {args.resume_id}")
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    status = personalization_status(JsonStore(args.store).read())
    if args.json:
        print(json.dumps(status, indent=2))
        return 0
    for name, item in status.items():
        mark = "ready" if item["ready"] else "missing"
        print(f"{name:<9} {mark:<8} {item['detail']}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="applypilot", description="Job search ranking and resume parsing")
    parser.add_argument("--store", default=None, help="Path to the JSON store (default: data/applypilot.json)")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING…")
    sub = parser.add_subparsers(dest="command", required=True)

    p_search = sub.add_parser("search", help="Search all job boards and rank the results")
    p_search.add_argument("query", nargs="?", default="", help="Search text, e.g. 'python AND backend'")
    p_search.add_argument("--location", default="", help="Preferred location, e.g. 'Austin, TX'")
    p_search.add_argument("--keyword", action="append", default=[], help="Extra keyword (repeatable)")
    p_search.add_argument("--remote-only", action="store_true")
    p_search.add_argument("--any-region", action="store_true", help="Do not restrict to US-based postings")
    p_search.add_argument("--relocation", choices=("any", "yes", "no"), default=None)
    p_search.add_argument("--level", default=None)
    p_search.add_argument("--min-relevance", dest="min_relevance", type=float, default=None)
    p_search.add_argument("--days", dest="posted_within_days", type=int, default=None,
                          help="Only postings from the last N days (0 = no limit)")
    p_search.add_argument("--config", default=None, help="Search settings YAML (default: config/search.yaml)")
    p_search.add_argument("--save", type=int, default=0, help="Track the top N results as applications")
    p_search.add_argument("--report", action="store_true", help="Also write the report under reports/")
    p_search.add_argument("--json", action="store_true", help="Print results as JSON")
    p_search.set_defaults(func=cmd_search)

    p_parse = sub.add_parser("parse", help="Parse a resume (.pdf, .docx, .txt, .md)")
    p_parse.add_argument("file")
    p_parse.add_argument("--save", action="store_true", help="Store the resume and refresh the profile")
    p_parse.add_argument("--merge", action="store_true", help="Append to profile sections instead of replacing")
    p_parse.set_defaults(func=cmd_parse)

    p_apps = sub.add_parser("applications", help="List tracked applications")
    p_apps.add_argument("--set-status", nargs=2, metavar=("APP_ID", "STATUS"))
    p_apps.set_defaults(func=cmd_applications)

    p_li = sub.add_parser("linkedin", help="Store a LinkedIn profile snapshot and refresh the profile")
    p_li.add_argument("url", help="LinkedIn profile URL")
    p_li.add_argument("--name", default="")
    p_li.add_argument("--headline", default="")
    p_li.add_argument("--about", default="")
    p_li.add_argument("--location", default="")
    p_li.add_argument("--raw-file", dest="raw_file", default=None, help="Text file with the copied profile page")
    p_li.set_defaults(func=cmd_linkedin)

    p_meta = sub.add_parser("resume-meta", help="Set the target role, focus skills and preferences of a resume")
    p_meta.add_argument("resume_id")
    p_meta.add_argument("--role", default="")
    p_meta.add_argument("--skill", action="append", default=[], help="Focus skill (repeatable)")
    p_meta.add_argument("--preferences", default="")
    p_meta.set_defaults(func=cmd_resume_meta)

    p_status = sub.add_parser("status", help="Show which personalization inputs are available")
    p_status.add_argument("--json", action="store_true")
    p_status.set_defaults(func=cmd_status)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    if args.log_level:
        configure(args.log_level)
    try:
        return args.func(args)
    except (FileNotFoundError, ValueError) as exc:
        log.error("%s", exc)
        return 1


if __name__ == "__main__":
    sys.exit(main())
