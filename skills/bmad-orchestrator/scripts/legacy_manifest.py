#!/usr/bin/env python3
from __future__ import annotations

import os
import shutil
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable

import legacy_settings as ls

COMMENT_MARKER = "#"
FIELD_SEPARATOR = "|"

STATUS_COPIED = "copied"
STATUS_SKIPPED = "skipped"
STATUS_INFO = "info"
STATUS_ERROR = "error"


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def parse_manifest(text: str) -> list[dict[str, Any]]:
    entries: list[dict[str, Any]] = []
    for line_number, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_MARKER):
            continue
        source, separator, destination = line.partition(FIELD_SEPARATOR)
        entries.append(
            {
                "line": line_number,
                "source": source.strip(),
                "destination": destination.strip(),
                "well_formed": bool(separator and source.strip() and destination.strip()),
            }
        )
    return entries


def load_manifest(path: Path) -> list[dict[str, Any]]:
    return parse_manifest(path.read_text(encoding="utf-8"))


def _result(entry: dict[str, Any], outcome: str, status: str, details: str) -> dict[str, Any]:
    return {
        "line": entry.get("line"),
        "source": entry.get("source", ""),
        "destination": entry.get("destination", ""),
        "outcome": outcome,
        "status": status,
        "details": details,
    }


def _copy_exclusive(source_abs: Path, dest_abs: Path) -> None:
    with source_abs.open("rb") as src:
        with dest_abs.open("xb") as dst:
            try:
                shutil.copyfileobj(src, dst)
            except OSError:
                dst.close()
                dest_abs.unlink()
                raise


def execute_entry(root: Path, entry: dict[str, Any]) -> dict[str, Any]:
    source = str(entry.get("source", ""))
    destination = str(entry.get("destination", ""))

    if destination == ls.NEEDS_TRANSFORM:
        return _result(
            entry, "transform_skip", STATUS_INFO, "status file - skipping, needs manual review"
        )
    if not entry.get("well_formed", True):
        return _result(
            entry, "malformed_error", STATUS_ERROR, "expected 'source|destination'"
        )
    for path_str in (source, destination):
        if ls.is_unsafe_manifest_path(path_str):
            return _result(
                entry, "traversal_error", STATUS_ERROR, f"unsafe path: {path_str}"
            )

    source_abs = root / source
    dest_abs = root / destination
    if not source_abs.is_file():
        return _result(entry, "missing_source_error", STATUS_ERROR, "source not found")
    if os.path.lexists(dest_abs):
        return _result(entry, "already_exists_skip", STATUS_SKIPPED, "already exists")

    try:
        dest_abs.parent.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        return _result(entry, "copy_error", STATUS_ERROR, f"failed to create parent: {exc}")
    try:
        _copy_exclusive(source_abs, dest_abs)
    except FileExistsError:
        return _result(entry, "already_exists_skip", STATUS_SKIPPED, "already exists")
    except OSError as exc:
        return _result(entry, "copy_error", STATUS_ERROR, f"failed to copy: {exc}")
    return _result(entry, "copy_success", STATUS_COPIED, "copied")


def execute_manifest(
    root: Path,
    entries: list[dict[str, Any]],
    manifest_path: str | None = None,
    on_result: Callable[[dict[str, Any]], None] | None = None,
) -> dict[str, Any]:
    results: list[dict[str, Any]] = []
    for entry in entries:
        result = execute_entry(root, entry)
        results.append(result)
        if on_result is not None:
            on_result(result)
    summary = {
        "total_entries": len(results),
        "copied": sum(1 for r in results if r["status"] == STATUS_COPIED),
        "skipped": sum(1 for r in results if r["status"] == STATUS_SKIPPED),
        "errors": sum(1 for r in results if r["status"] == STATUS_ERROR),
        "needs_transform": sum(1 for r in results if r["status"] == STATUS_INFO),
    }
    return {
        "generated_at": utc_now(),
        "root": str(root),
        "manifest": manifest_path,
        "summary": summary,
        "results": results,
    }


def render_result_line(result: dict[str, Any]) -> str:
    source = result["source"]
    destination = result["destination"]
    outcome = result["outcome"]
    if outcome == "copy_success":
        return f"  [OK]    {source} -> {destination}"
    if outcome == "already_exists_skip":
        return f"  [SKIP]  {source} -> {destination} (already exists)"
    if outcome == "transform_skip":
        return f"  [INFO]  {source} ({result['details']})"
    return f"  [ERR]   {source} ({result['details']})"


def render_execution_summary(summary: dict[str, Any]) -> list[str]:
    return [
        "",
        "Legacy Migration Complete",
        "",
        f"  Copied:  {summary['copied']} files",
        f"  Skipped: {summary['skipped']} files (already existed)",
        f"  Errors:  {summary['errors']} files",
        "",
        "Note: Original files in legacy directories were NOT modified.",
        "Delete them manually when you're satisfied with the migration.",
    ]
