"""
Run translation sync from CLI.

    python -m scripts.run_translation_sync sync [--locale CODE ...] [--json]
    python -m scripts.run_translation_sync projects [--json]

Exit codes: 0 when the run finished (even with per-locale failures),
1 when it faulted or the remote service failed, 2 on invalid arguments or
missing configuration.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from collections.abc import Sequence

from app.connectors.base import RemoteServiceError
from app.domain.translation_sync import SyncState, SyncSummary
from app.logging_utils import configure_logging
from app.services.translation_sync_service import TranslationSyncService
from db.models.sync_run import SyncRunTrigger
from translation_sync.errors import MissingConfigurationError

EXIT_OK = 0
EXIT_FAULTED = 1
EXIT_USAGE = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Mirror remote translations into the local string tables."
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    sync_parser = subparsers.add_parser("sync", help="Download and import every catalog locale.")
    sync_parser.add_argument(
        "--locale",
        dest="locales",
        action="append",
        default=None,
        help="Restrict the run to this catalog locale; repeatable.",
    )
    sync_parser.add_argument("--json", dest="as_json", action="store_true", help="Print JSON.")

    projects_parser = subparsers.add_parser("projects", help="List remote projects.")
    projects_parser.add_argument("--json", dest="as_json", action="store_true", help="Print JSON.")
    return parser


def main(argv: Sequence[str] | None = None, service: TranslationSyncService | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging()
    service = service or TranslationSyncService()

    if args.command == "projects":
        return _list_projects(service, as_json=args.as_json)
    return _sync(service, locales=args.locales, as_json=args.as_json)


def _list_projects(service: TranslationSyncService, *, as_json: bool) -> int:
    try:
        projects = asyncio.run(service.list_projects())
    except RemoteServiceError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_FAULTED

    if as_json:
        print(json.dumps([{"id": p.id, "name": p.name} for p in projects], indent=2))
    else:
        for project in projects:
            print(f"{project.id}\t{project.name}")
    return EXIT_OK


def _sync(service: TranslationSyncService, *, locales: list[str] | None, as_json: bool) -> int:
    try:
        service.ensure_configured()
    except MissingConfigurationError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return EXIT_USAGE

    summary = service.run_blocking(trigger=SyncRunTrigger.CLI, locale_filter=locales)

    if as_json:
        print(json.dumps(summary.as_dict(), indent=2))
    else:
        print(format_summary(summary))
    return EXIT_OK if summary.state is SyncState.DONE else EXIT_FAULTED


def format_summary(summary: SyncSummary) -> str:
    lines = [f"Translation sync {summary.run_id}: {summary.state.value}"]
    for item in summary.as_dict()["locales"]:
        line = f"  {item['locale']:<12} {item['status']:<8}"
        if item["status"] == "success":
            line += f" {item['entries_imported']} entries"
        elif item["message"]:
            line += f" {item['message']}"
        lines.append(line.rstrip())
    if summary.error:
        lines.append(f"  error: {summary.error}")
    lines.append(
        f"  succeeded={len(summary.succeeded)} failed={len(summary.failed)} "
        f"skipped={len(summary.skipped)} committed={summary.committed}"
    )
    return "\n".join(lines)


if __name__ == "__main__":
    raise SystemExit(main())
