#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

SCRIPT_DIR = Path(__file__).resolve().parent
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

import legacy_manifest as lm  # noqa: E402
import legacy_report as lreport  # noqa: E402
import legacy_settings as ls  # noqa: E402


def resolve_under_root(root: Path, path_str: str) -> Path:
    path = Path(path_str)
    return path if path.is_absolute() else (root / path)


def write_json(path: Path, data: dict[str, Any]) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(data, f, ensure_ascii=False, indent=2)
        f.write("\n")


def _is_within(path: Path, parent: Path) -> bool:
    try:
        path.resolve().relative_to(parent.resolve())
    except ValueError:
        return False
    return True


def run_detect(root: Path, settings: dict[str, Any], report_json: str | None) -> int:
    report_path = resolve_under_root(root, report_json) if report_json else None
    if report_path is not None:
        for legacy_root in settings["legacy_roots"]:
            if _is_within(report_path, root / legacy_root):
                raise SystemExit(
                    f"[ERROR] Report path must not be inside legacy root {legacy_root}: {report_path}"
                )

    try:
        report = lreport.build_detection_report(root, settings)
    except ls.PathSafetyError as exc:
        raise SystemExit(f"[ERROR] {exc}") from exc

    sys.stdout.write(lreport.render_detection_report(report))
    if report_path is not None:
        write_json(report_path, report)
    return 0


def run_execute(root: Path, manifest: str | None, report_json: str | None) -> int:
    if not manifest:
        raise SystemExit("[ERROR] --manifest <file> is required for --execute mode")
    try:
        ls.check_path_safety(manifest)
    except ls.PathSafetyError as exc:
        raise SystemExit(f"[ERROR] {exc}") from exc

    manifest_path = resolve_under_root(root, manifest)
    if not manifest_path.is_file():
        raise SystemExit(f"[ERROR] Manifest file not found: {manifest_path}")
    try:
        entries = lm.load_manifest(manifest_path)
    except (OSError, UnicodeDecodeError) as exc:
        raise SystemExit(f"[ERROR] Unable to read manifest {manifest_path}: {exc}") from exc

    print("Starting legacy migration...")
    print("")
    result = lm.execute_manifest(
        root,
        entries,
        manifest_path=str(manifest_path),
        on_result=lambda item: print(lm.render_result_line(item)),
    )
    for line in lm.render_execution_summary(result["summary"]):
        print(line)

    if report_json:
        write_json(resolve_under_root(root, report_json), result)

    return 1 if result["summary"]["errors"] > 0 else 0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Detect legacy BMAD artifacts (docs/, bmad/, .bmad/) and copy approved "
            "ones into the accbmad/ structure."
        )
    )
    mode = parser.add_mutually_exclusive_group(required=True)
    mode.add_argument(
        "--detect",
        dest="mode",
        action="store_const",
        const="detect",
        help="Scan legacy directories and report found artifacts",
    )
    mode.add_argument(
        "--execute",
        dest="mode",
        action="store_const",
        const="execute",
        help="Copy files listed in --manifest into the new structure",
    )
    parser.add_argument(
        "--manifest", help="Manifest file with one 'source|destination' per line"
    )
    parser.add_argument("--root", default=".", help="Project root (default: cwd)")
    parser.add_argument(
        "--policy", help="Optional JSON policy with a legacy_migration object"
    )
    parser.add_argument("--report-json", help="Also write the structured report here")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    root = Path(args.root).resolve()
    if not root.exists() or not root.is_dir():
        raise SystemExit(f"[ERROR] Invalid root path: {root}")

    try:
        settings = ls.load_migration_settings(root, args.policy)
    except ls.ConfigurationError as exc:
        raise SystemExit(f"[ERROR] {exc}") from exc

    if args.mode == "execute":
        return run_execute(root, args.manifest, args.report_json)
    return run_detect(root, settings, args.report_json)


if __name__ == "__main__":
    raise SystemExit(main())
