#!/usr/bin/env python3
from __future__ import annotations

import json
from pathlib import Path, PurePosixPath
from typing import Any

DEFAULT_MIGRATION_SETTINGS = {
    "legacy_roots": ["docs", "bmad", ".bmad"],
    "target_root": "accbmad",
    "package_root": "~/.claude",
    "max_depth": 3,
}

NEEDS_TRANSFORM = "needs_transform"


class MigrationError(ValueError):
    pass


class ConfigurationError(MigrationError):
    pass


class PathSafetyError(MigrationError):
    def __init__(self, path: str) -> None:
        super().__init__(f"Path traversal detected in: {path}")
        self.path = path


def normalize_rel(path_str: str) -> str:
    return str(Path(path_str)).replace("\\", "/")


def has_parent_segment(path_str: str) -> bool:
    parts = str(path_str).replace("\\", "/").split("/")
    return ".." in parts


def check_path_safety(path_str: str) -> str:
    if has_parent_segment(path_str):
        raise PathSafetyError(str(path_str))
    return path_str


def is_unsafe_manifest_path(path_str: str) -> bool:
    text = str(path_str).replace("\\", "/")
    if has_parent_segment(text):
        return True
    if text.startswith("~"):
        return True
    return PurePosixPath(text).is_absolute() or Path(text).is_absolute()


def _normalize_roots(value: Any) -> list[str]:
    if not isinstance(value, list):
        return list(DEFAULT_MIGRATION_SETTINGS["legacy_roots"])
    out: list[str] = []
    for item in value:
        if not isinstance(item, str) or not item.strip():
            continue
        normalized = normalize_rel(item.strip()).rstrip("/")
        if not normalized or normalized == ".":
            continue
        if is_unsafe_manifest_path(normalized):
            continue
        if normalized not in out:
            out.append(normalized)
    if not out:
        return list(DEFAULT_MIGRATION_SETTINGS["legacy_roots"])
    return out


def _normalize_dir(value: Any, fallback: str) -> str:
    if not isinstance(value, str) or not value.strip():
        return fallback
    normalized = value.strip().replace("\\", "/").rstrip("/")
    if not normalized or has_parent_segment(normalized):
        return fallback
    return normalized


def _normalize_positive_int(value: Any, fallback: int) -> int:
    if isinstance(value, bool):
        return fallback
    try:
        numeric = int(value)
    except (TypeError, ValueError):
        return fallback
    if numeric <= 0:
        return fallback
    return numeric


def resolve_migration_settings(policy: dict[str, Any] | None) -> dict[str, Any]:
    raw = (
        policy.get("legacy_migration")
        if isinstance(policy, dict) and isinstance(policy.get("legacy_migration"), dict)
        else {}
    )
    target_root = _normalize_dir(
        raw.get("target_root"), str(DEFAULT_MIGRATION_SETTINGS["target_root"])
    )
    if is_unsafe_manifest_path(target_root):
        target_root = str(DEFAULT_MIGRATION_SETTINGS["target_root"])
    return {
        "legacy_roots": _normalize_roots(
            raw.get("legacy_roots", DEFAULT_MIGRATION_SETTINGS["legacy_roots"])
        ),
        "target_root": target_root,
        "package_root": _normalize_dir(
            raw.get("package_root"), str(DEFAULT_MIGRATION_SETTINGS["package_root"])
        ),
        "max_depth": _normalize_positive_int(
            raw.get("max_depth", DEFAULT_MIGRATION_SETTINGS["max_depth"]),
            int(DEFAULT_MIGRATION_SETTINGS["max_depth"]),
        ),
    }


def load_json_mapping(path: Path) -> dict[str, Any] | None:
    if not path.exists():
        return None
    with path.open("r", encoding="utf-8") as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigurationError(f"Invalid JSON in {path}: {exc}") from exc
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"JSON root must be object: {path}")
    return data


def load_migration_settings(root: Path, policy_path: str | None = None) -> dict[str, Any]:
    if not policy_path:
        return resolve_migration_settings(None)
    path = Path(policy_path)
    if not path.is_absolute():
        path = root / path
    return resolve_migration_settings(load_json_mapping(path))
