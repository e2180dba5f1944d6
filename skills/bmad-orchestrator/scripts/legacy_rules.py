#!/usr/bin/env python3
"""Path-based classification of legacy BMAD artifacts.

Rules are plain ordered tables evaluated top-down; the first match wins.
Nothing here touches the filesystem.
"""
from __future__ import annotations

import fnmatch
from typing import Callable

import legacy_settings as ls

EXCLUDED_PREFIXES = (
    "docs_",
    "keygen_",
    "confidential/",
    "screenshots/",
    "reports/",
)
EXCLUDED_MARKERS = ("_docs_md/",)

STATUS_PATTERNS = [
    "*-status.yaml",
    "status.yaml",
    "sprint-status.yaml",
    "sprint-docs.yaml",
]

ALLOWED_SUFFIXES = (".md", ".yaml", ".yml")
IGNORED_NAMES = {"readme.md", ".gitkeep"}

TARGET = "{target}"
PACKAGE = "{package}"


def _under(directories: set[str], *patterns: str) -> Callable[[list[str]], int | None]:
    def predicate(parts: list[str]) -> int | None:
        leaf = parts[-1]
        if not any(fnmatch.fnmatchcase(leaf, pattern) for pattern in patterns):
            return None
        for index, part in enumerate(parts[:-1]):
            if part in directories:
                return index
        return None

    return predicate


def _named(*patterns: str) -> Callable[[str], bool]:
    def predicate(filename: str) -> bool:
        return any(fnmatch.fnmatchcase(filename, pattern) for pattern in patterns)

    return predicate


# Matched subpath below the directory segment is kept under the destination subtree.
SUBDIRECTORY_RULES: list[tuple[Callable[[list[str]], int | None], str, str]] = [
    (_under({"adr", "adrs"}, "*.md"), "adr", f"{TARGET}/3-solutioning/adrs"),
    (_under({"archive"}, "adr-*.md"), "adr", f"{TARGET}/3-solutioning/adrs/archive"),
    (
        _under({"archive"}, "*architecture*.md"),
        "architecture",
        f"{TARGET}/3-solutioning/archive",
    ),
    (_under({"operations"}, "*.md"), "operations", f"{TARGET}/outputs/operations"),
    (_under({"guides"}, "*.md"), "guide", f"{TARGET}/outputs/guides"),
    (_under({"reference"}, "*.md"), "reference", f"{TARGET}/context"),
    (_under({"api"}, "*.md", "*.yaml"), "api-docs", f"{TARGET}/outputs"),
    (_under({"integrations"}, "*.md"), "reference", f"{TARGET}/context"),
    (
        _under({"architecture"}, "*.md"),
        "architecture",
        f"{TARGET}/3-solutioning/architecture",
    ),
    (_under({"stories"}, "*.md"), "story", f"{TARGET}/4-implementation/stories"),
    (_under({"testing", "tests"}, "*.md"), "test-plan", f"{TARGET}/outputs"),
]

# Order matters: prd before the generic *spec* rule, guardrails before generic docs.
FILENAME_RULES: list[tuple[Callable[[str], bool], str, str]] = [
    (_named("story-*.md", "story_*.md"), "story", f"{TARGET}/4-implementation/stories/"),
    (_named("sprint-plan*.md", "sprint_plan*.md"), "sprint-plan", f"{TARGET}/4-implementation/"),
    (
        _named("*prd*.md", "*product-requirements*.md", "*product_requirements*.md"),
        "prd",
        f"{TARGET}/2-planning/",
    ),
    (_named("*architecture*.md"), "architecture", f"{TARGET}/3-solutioning/"),
    (
        _named("*implementation-readiness*.md", "*readiness-report*.md"),
        "readiness-report",
        f"{TARGET}/3-solutioning/",
    ),
    (
        _named("solutioning-gate-check*.md", "*gate-check*.md"),
        "readiness-report",
        f"{TARGET}/3-solutioning/",
    ),
    (_named("e2e-test*.md"), "test-plan", f"{TARGET}/outputs/"),
    (_named("*guardrails*.md", "*development-rules*.md"), "package_managed", f"{PACKAGE}/"),
    (_named("*optimization-analysis*.md"), "research", f"{TARGET}/1-analysis/"),
    (_named("epics*.md", "epic-*.md", "epic_*.md"), "epics", f"{TARGET}/2-planning/"),
    (
        _named(
            "brief*.md",
            "product-brief*.md",
            "product_brief*.md",
            "product-vision*.md",
            "product_vision*.md",
        ),
        "product-brief",
        f"{TARGET}/1-analysis/",
    ),
    (_named("ux-*.md", "ux_*.md", "design-*.md", "design_*.md"), "ux-design", f"{TARGET}/2-planning/"),
    (_named("tech-spec*.md", "tech_spec*.md", "*spec*.md"), "tech-spec", f"{TARGET}/2-planning/"),
    (_named("research*.md"), "research", f"{TARGET}/1-analysis/"),
    (_named("brainstorm*.md"), "brainstorm", f"{TARGET}/1-analysis/"),
    (
        _named("project-context*.md", "project_context*.md"),
        "project-context",
        f"{TARGET}/3-solutioning/",
    ),
    (_named("review-*.md", "review_*.md"), "review", f"{TARGET}/3-solutioning/"),
    (_named("user-guide*.md", "user_guide*.md", "userguide*.md"), "user-guide", f"{TARGET}/outputs/"),
    (_named("*test-plan*.md", "*test_plan*.md"), "test-plan", f"{TARGET}/outputs/"),
    (_named("changelog*.md"), "changelog", f"{TARGET}/outputs/"),
]

PHASE_ANALYSIS = "Phase 1 - Analysis"
PHASE_PLANNING = "Phase 2 - Planning"
PHASE_SOLUTIONING = "Phase 3 - Solutioning"
PHASE_IMPLEMENTATION = "Phase 4 - Implementation"
PHASE_OUTPUTS = "Outputs"
PHASE_CONTEXT = "Context"
PHASE_STATUS = "Status Files"
PHASE_PACKAGE = "Package Managed (installed globally by BMAD)"
PHASE_OTHER = "Other"

PHASE_ORDER = [
    PHASE_ANALYSIS,
    PHASE_PLANNING,
    PHASE_SOLUTIONING,
    PHASE_IMPLEMENTATION,
    PHASE_OUTPUTS,
    PHASE_CONTEXT,
    PHASE_STATUS,
    PHASE_PACKAGE,
    PHASE_OTHER,
]

CATEGORY_PHASES = {
    "product-brief": PHASE_ANALYSIS,
    "research": PHASE_ANALYSIS,
    "brainstorm": PHASE_ANALYSIS,
    "prd": PHASE_PLANNING,
    "epics": PHASE_PLANNING,
    "ux-design": PHASE_PLANNING,
    "tech-spec": PHASE_PLANNING,
    "architecture": PHASE_SOLUTIONING,
    "adr": PHASE_SOLUTIONING,
    "project-context": PHASE_SOLUTIONING,
    "review": PHASE_SOLUTIONING,
    "readiness-report": PHASE_SOLUTIONING,
    "story": PHASE_IMPLEMENTATION,
    "sprint-plan": PHASE_IMPLEMENTATION,
    "changelog": PHASE_OUTPUTS,
    "user-guide": PHASE_OUTPUTS,
    "test-plan": PHASE_OUTPUTS,
    "operations": PHASE_OUTPUTS,
    "guide": PHASE_OUTPUTS,
    "api-docs": PHASE_OUTPUTS,
    "reference": PHASE_CONTEXT,
    "status": PHASE_STATUS,
    "package_managed": PHASE_PACKAGE,
}


def phase_of(category: str) -> str:
    return CATEGORY_PHASES.get(category, PHASE_OTHER)


def is_excluded(lower_path: str) -> bool:
    if lower_path.startswith(EXCLUDED_PREFIXES):
        return True
    return any(marker in lower_path for marker in EXCLUDED_MARKERS)


def is_status_file(filename: str) -> bool:
    lower = filename.lower()
    return any(fnmatch.fnmatchcase(lower, pattern) for pattern in STATUS_PATTERNS)


def _expand(template: str, target_root: str, package_root: str) -> str:
    return template.replace(TARGET, target_root.rstrip("/")).replace(
        PACKAGE, package_root.rstrip("/")
    )


def classify(
    relative_path: str,
    target_root: str = ls.DEFAULT_MIGRATION_SETTINGS["target_root"],
    package_root: str = ls.DEFAULT_MIGRATION_SETTINGS["package_root"],
) -> tuple[str, str] | None:
    rel = relative_path.replace("\\", "/").strip("/")
    if not rel or ls.has_parent_segment(rel):
        return None
    parts = rel.split("/")
    lower_parts = [part.lower() for part in parts]
    lower_path = "/".join(lower_parts)
    lower = lower_parts[-1]

    if is_excluded(lower_path):
        return None

    if is_status_file(lower):
        return "status", ls.NEEDS_TRANSFORM

    if not lower.endswith(ALLOWED_SUFFIXES) or lower in IGNORED_NAMES:
        return None

    for predicate, category, subtree in SUBDIRECTORY_RULES:
        index = predicate(lower_parts)
        if index is None:
            continue
        subpath = "/".join(parts[index + 1 :])
        return category, f"{_expand(subtree, target_root, package_root)}/{subpath}"

    for matches, category, template in FILENAME_RULES:
        if matches(lower):
            return category, _expand(template, target_root, package_root)

    return None


def resolve_destination(template: str, filename: str) -> str:
    if template == ls.NEEDS_TRANSFORM:
        return template
    if template.endswith("/"):
        return f"{template}{filename}"
    return template
