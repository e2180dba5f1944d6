#!/usr/bin/env python3
from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import legacy_rules as lr
import legacy_scan
import legacy_settings as ls

FOUND_SENTINEL = "LEGACY_ARTIFACTS_DETECTED"
NOT_FOUND_SENTINEL = "NO_LEGACY_ARTIFACTS_FOUND"
END_SENTINEL = "END_REPORT"

STATUS_READY = "ready"
STATUS_EXISTS = "already_exists"
STATUS_TRANSFORM = ls.NEEDS_TRANSFORM


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


def destination_exists(root: Path, destination: str) -> bool:
    if destination.startswith("~"):
        return os.path.lexists(Path(destination).expanduser())
    return os.path.lexists(root / destination)


def build_artifact(
    root: Path, source_path: str, relative_path: str, settings: dict[str, Any]
) -> dict[str, Any] | None:
    classification = lr.classify(
        relative_path,
        target_root=str(settings["target_root"]),
        package_root=str(settings["package_root"]),
    )
    if classification is None:
        return None

    category, template = classification
    destination = lr.resolve_destination(template, Path(relative_path).name)
    if destination == ls.NEEDS_TRANSFORM:
        status = STATUS_TRANSFORM
    elif destination_exists(root, destination):
        status = STATUS_EXISTS
    else:
        status = STATUS_READY

    return {
        "source_path": source_path,
        "relative_path": relative_path,
        "category": category,
        "phase": lr.phase_of(category),
        "destination_path": destination,
        "status": status,
    }


def build_detection_report(root: Path, settings: dict[str, Any]) -> dict[str, Any]:
    artifacts: list[dict[str, Any]] = []
    for source_path, relative_path in legacy_scan.scan_legacy_roots(root, settings):
        artifact = build_artifact(root, source_path, relative_path, settings)
        if artifact is not None:
            artifacts.append(artifact)

    grouped: dict[str, list[dict[str, Any]]] = {}
    for artifact in artifacts:
        grouped.setdefault(artifact["phase"], []).append(artifact)

    groups: list[dict[str, Any]] = []
    for phase in lr.PHASE_ORDER:
        items = grouped.get(phase)
        if not items:
            continue
        items = sorted(items, key=lambda item: (item["source_path"], item["destination_path"]))
        groups.append({"phase": phase, "count": len(items), "artifacts": items})

    summary = {
        "total": len(artifacts),
        "total_migratable": sum(1 for a in artifacts if a["status"] == STATUS_READY),
        "total_already_exists": sum(1 for a in artifacts if a["status"] == STATUS_EXISTS),
        "total_needs_transform": sum(
            1 for a in artifacts if a["status"] == STATUS_TRANSFORM
        ),
    }
    return {
        "generated_at": utc_now(),
        "root": str(root),
        "detected": bool(artifacts),
        "summary": summary,
        "groups": groups,
        "settings": dict(settings),
    }


def render_artifact_line(artifact: dict[str, Any]) -> str:
    source = artifact["source_path"]
    destination = artifact["destination_path"]
    status = artifact["status"]
    if status == STATUS_READY:
        return f"  [READY] {source} -> {destination}"
    if status == STATUS_EXISTS:
        return f"  [SKIP]  {source} -> {destination} (already exists)"
    return f"  [INFO]  {source} (status file - needs manual review)"


def render_detection_report(report: dict[str, Any]) -> str:
    if not report.get("detected"):
        return NOT_FOUND_SENTINEL + "\n"

    summary = report["summary"]
    lines = [
        FOUND_SENTINEL,
        f"total_migratable: {summary['total_migratable']}",
        f"total_already_exists: {summary['total_already_exists']}",
        f"total_needs_transform: {summary['total_needs_transform']}",
        "",
    ]
    for index, group in enumerate(report["groups"]):
        if index:
            lines.append("")
        lines.append(f"### {group['phase']} ({group['count']} files)")
        lines.extend(render_artifact_line(artifact) for artifact in group["artifacts"])
    lines.extend(["", END_SENTINEL])
    return "\n".join(lines) + "\n"
