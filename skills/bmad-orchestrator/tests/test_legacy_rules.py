#!/usr/bin/env python3
from __future__ import annotations

import unittest
from pathlib import Path
import sys


SCRIPT_DIR = Path(__file__).resolve().parents[1] / "scripts"
if str(SCRIPT_DIR) not in sys.path:
    sys.path.insert(0, str(SCRIPT_DIR))

import legacy_rules as lr  # noqa: E402


class LegacyClassifierTests(unittest.TestCase):
    def test_prd_maps_to_planning_directory_template(self) -> None:
        self.assertEqual(lr.classify("prd-myapp.md"), ("prd", "accbmad/2-planning/"))

    def test_nested_adr_keeps_subpath_under_adr_tree(self) -> None:
        self.assertEqual(
            lr.classify("architecture/adrs/0001-foo.md"),
            ("adr", "accbmad/3-solutioning/adrs/0001-foo.md"),
        )
        self.assertEqual(
            lr.classify("adr/2024/0002-bar.md"),
            ("adr", "accbmad/3-solutioning/adrs/2024/0002-bar.md"),
        )

    def test_preserved_subpath_keeps_original_case(self) -> None:
        self.assertEqual(
            lr.classify("Architecture/Components/API-Gateway.md"),
            ("architecture", "accbmad/3-solutioning/architecture/Components/API-Gateway.md"),
        )

    def test_status_files_short_circuit_to_needs_transform(self) -> None:
        for rel in [
            "workflow-status.yaml",
            "bmm-workflow-status.yaml",
            "status.yaml",
            "sprint-status.yaml",
            "sprint-docs.yaml",
            "stories/sprint-status.yaml",
        ]:
            with self.subTest(rel=rel):
                self.assertEqual(lr.classify(rel), ("status", "needs_transform"))

    def test_excluded_trees_are_rejected_even_for_known_names(self) -> None:
        for rel in [
            "confidential/prd.md",
            "screenshots/architecture.md",
            "reports/sprint-status.yaml",
            "docs_stripe/guides/intro.md",
            "keygen_api/api/spec.md",
            "vendor/stripe_docs_md/prd.md",
        ]:
            with self.subTest(rel=rel):
                self.assertIsNone(lr.classify(rel))

    def test_extension_filter_and_generic_names(self) -> None:
        self.assertIsNone(lr.classify("prd.pdf"))
        self.assertIsNone(lr.classify("architecture.txt"))
        self.assertIsNone(lr.classify("README.md"))
        self.assertIsNone(lr.classify("stories/README.md"))
        self.assertIsNone(lr.classify(".gitkeep"))
        self.assertIsNone(lr.classify("notes.md"))
        self.assertIsNone(lr.classify("config.yaml"))

    def test_subdirectory_rules_precede_filename_rules(self) -> None:
        self.assertEqual(
            lr.classify("stories/prd-notes.md"),
            ("story", "accbmad/4-implementation/stories/prd-notes.md"),
        )
        self.assertEqual(
            lr.classify("operations/runbooks/deploy.md"),
            ("operations", "accbmad/outputs/operations/runbooks/deploy.md"),
        )

    def test_subdirectory_rule_table(self) -> None:
        cases = {
            "guides/setup.md": ("guide", "accbmad/outputs/guides/setup.md"),
            "reference/glossary.md": ("reference", "accbmad/context/glossary.md"),
            "integrations/stripe.md": ("reference", "accbmad/context/stripe.md"),
            "api/openapi.yaml": ("api-docs", "accbmad/outputs/openapi.yaml"),
            "api/endpoints.md": ("api-docs", "accbmad/outputs/endpoints.md"),
            "testing/smoke.md": ("test-plan", "accbmad/outputs/smoke.md"),
            "tests/regression.md": ("test-plan", "accbmad/outputs/regression.md"),
            "archive/adr-0003-db.md": (
                "adr",
                "accbmad/3-solutioning/adrs/archive/adr-0003-db.md",
            ),
            "archive/old-architecture.md": (
                "architecture",
                "accbmad/3-solutioning/archive/old-architecture.md",
            ),
        }
        for rel, expected in cases.items():
            with self.subTest(rel=rel):
                self.assertEqual(lr.classify(rel), expected)

    def test_archive_without_known_leaf_falls_back_to_filename_rules(self) -> None:
        self.assertEqual(lr.classify("archive/prd-v1.md"), ("prd", "accbmad/2-planning/"))
        self.assertIsNone(lr.classify("archive/scratch.md"))

    def test_filename_rule_table(self) -> None:
        cases = {
            "story-1.2-login.md": ("story", "accbmad/4-implementation/stories/"),
            "sprint-plan-q3.md": ("sprint-plan", "accbmad/4-implementation/"),
            "product-requirements.md": ("prd", "accbmad/2-planning/"),
            "system-architecture.md": ("architecture", "accbmad/3-solutioning/"),
            "implementation-readiness-2024.md": ("readiness-report", "accbmad/3-solutioning/"),
            "solutioning-gate-check.md": ("readiness-report", "accbmad/3-solutioning/"),
            "e2e-test-checkout.md": ("test-plan", "accbmad/outputs/"),
            "development-guardrails.md": ("package_managed", "~/.claude/"),
            "ui-optimization-analysis.md": ("research", "accbmad/1-analysis/"),
            "epics.md": ("epics", "accbmad/2-planning/"),
            "product-brief.md": ("product-brief", "accbmad/1-analysis/"),
            "ux-flows.md": ("ux-design", "accbmad/2-planning/"),
            "api-spec.md": ("tech-spec", "accbmad/2-planning/"),
            "research-competitors.md": ("research", "accbmad/1-analysis/"),
            "brainstorming-session.md": ("brainstorm", "accbmad/1-analysis/"),
            "project-context.md": ("project-context", "accbmad/3-solutioning/"),
            "review-sprint-1.md": ("review", "accbmad/3-solutioning/"),
            "user-guide.md": ("user-guide", "accbmad/outputs/"),
            "master-test-plan.md": ("test-plan", "accbmad/outputs/"),
            "CHANGELOG.md": ("changelog", "accbmad/outputs/"),
        }
        for rel, expected in cases.items():
            with self.subTest(rel=rel):
                self.assertEqual(lr.classify(rel), expected)

    def test_priority_resolves_overlapping_keywords(self) -> None:
        # prd also matches *spec*; story also matches *architecture*.
        self.assertEqual(lr.classify("prd-spec.md")[0], "prd")
        self.assertEqual(lr.classify("story-architecture.md")[0], "story")
        self.assertEqual(lr.classify("architecture-guardrails.md")[0], "architecture")
        self.assertEqual(lr.classify("guardrails-spec.md")[0], "package_managed")

    def test_classification_is_deterministic(self) -> None:
        for rel in ["prd.md", "architecture/adrs/x.md", "status.yaml", "nothing.md"]:
            with self.subTest(rel=rel):
                self.assertEqual(lr.classify(rel), lr.classify(rel))

    def test_injected_roots_are_used_in_templates(self) -> None:
        self.assertEqual(
            lr.classify("prd.md", target_root="newroot"), ("prd", "newroot/2-planning/")
        )
        self.assertEqual(
            lr.classify("adrs/1.md", target_root="newroot/"),
            ("adr", "newroot/3-solutioning/adrs/1.md"),
        )
        self.assertEqual(
            lr.classify("guardrails.md", package_root="/opt/pkg"),
            ("package_managed", "/opt/pkg/"),
        )

    def test_parent_segments_never_match(self) -> None:
        self.assertIsNone(lr.classify("../prd.md"))
        self.assertIsNone(lr.classify("adrs/../../etc/passwd.md"))

    def test_resolve_destination(self) -> None:
        self.assertEqual(
            lr.resolve_destination("accbmad/2-planning/", "prd.md"),
            "accbmad/2-planning/prd.md",
        )
        self.assertEqual(
            lr.resolve_destination("accbmad/3-solutioning/adrs/a.md", "a.md"),
            "accbmad/3-solutioning/adrs/a.md",
        )
        self.assertEqual(lr.resolve_destination("needs_transform", "x.yaml"), "needs_transform")


class PhaseGrouperTests(unittest.TestCase):
    def test_every_rule_category_has_a_phase(self) -> None:
        categories = {category for _, category, _ in lr.SUBDIRECTORY_RULES}
        categories |= {category for _, category, _ in lr.FILENAME_RULES}
        categories.add("status")
        for category in categories:
            with self.subTest(category=category):
                self.assertNotEqual(lr.phase_of(category), lr.PHASE_OTHER)
                self.assertIn(lr.phase_of(category), lr.PHASE_ORDER)

    def test_known_and_unknown_categories(self) -> None:
        self.assertEqual(lr.phase_of("prd"), "Phase 2 - Planning")
        self.assertEqual(lr.phase_of("adr"), "Phase 3 - Solutioning")
        self.assertEqual(lr.phase_of("reference"), "Context")
        self.assertEqual(lr.phase_of("status"), "Status Files")
        self.assertEqual(
            lr.phase_of("package_managed"), "Package Managed (installed globally by BMAD)"
        )
        self.assertEqual(lr.phase_of("mystery"), "Other")


if __name__ == "__main__":
    unittest.main()
