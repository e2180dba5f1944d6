#!/usr/bin/env python3
from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Iterator

import legacy_settings as ls


def to_posix(path: Path, root: Path) -> str:
    return str(path.relative_to(root)).replace("\\", "/")


def iter_legacy_root_files(root: Path, legacy_root: str, max_depth: int) -> Iterator[tuple[str, str]]:
    base = root / legacy_root
    # A linked root could point anywhere on disk.
    if base.is_symlink() or not base.is_dir():
        return

    for dirpath, dirnames, filenames in os.walk(base):
        current = Path(dirpath)
        depth = len(current.relative_to(base).parts)
        if depth + 1 >= max_depth:
            dirnames[:] = []
        else:
            dirnames[:] = sorted(
                name for name in dirnames if not (current / name).is_symlink()
            )

        for name in sorted(filenames):
            file_path = current / name
            if file_path.is_symlink() or not file_path.is_file():
                continue
            rel = to_posix(file_path, base)
            ls.check_path_safety(rel)
            source = ls.normalize_rel(f"{legacy_root}/{rel}")
            yield source, rel


def scan_legacy_roots(root: Path, settings: dict[str, Any]) -> list[tuple[str, str]]:
    max_depth = int(settings.get("max_depth", ls.DEFAULT_MIGRATION_SETTINGS["max_depth"]))
    found: list[tuple[str, str]] = []
    for legacy_root in settings.get("legacy_roots") or []:
        found.extend(iter_legacy_root_files(root, legacy_root, max_depth))
    return found
