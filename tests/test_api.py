"""End-to-end tests for the lint API over a project on disk."""

import json

import pytest

from blocklint.api import (
    ComponentLintResult,
    DocumentLintResult,
    build_report,
    lint_components,
    lint_documents,
    write_report,
)
from blocklint.codes import IssueCode, Severity
from blocklint.config import ConfigError, LintConfig


FOOTER = """
export interface Props {
  title: string;
  year?: number;
}

export default function Footer({ title, year }: Props) {
  return <footer>{title} {year}</footer>;
}
"""

HERO = """
import type { ImageWidget } from "apps/admin/widgets.ts";

export interface Props {
  image: ImageWidget;
  items: { label: string }[];
}

export default function Hero(props: Props) {
  return null;
}
"""


def _config(project, **overrides):
    return LintConfig.for_project(project.root, **overrides)


def test_footer_with_extra_property_warns_only(project):
    project.source("sections/Footer.tsx", FOOTER)
    project.block(
        "pages-home.json",
        {"sections": [{"__resolveType": "site/sections/Footer.tsx", "title": "Acme", "extra": "z"}]},
    )

    result = lint_components(_config(project, report_unused_properties=True))

    assert isinstance(result, ComponentLintResult)
    assert result.ok is True
    assert result.error_count == 0
    (component,) = result.components
    (occurrence,) = component.occurrences
    assert occurrence.document == "pages-home.json"
    assert occurrence.path == "sections[0]"
    assert occurrence.line == 4
    assert [(w.path, w.severity) for w in occurrence.warnings] == [("extra", Severity.WARNING)]


def test_unknown_properties_ignored_by_default(project):
    project.source("sections/Footer.tsx", FOOTER)
    project.block("pages-home.json", {"__resolveType": "site/sections/Footer.tsx", "title": "Acme", "extra": "z"})

    result = lint_components(_config(project))
    assert result.warning_count == 0


def test_errors_fail_the_run(project):
    project.source("sections/Hero.tsx", HERO)
    project.block(
        "Hero.json",
        {"__resolveType": "site/sections/Hero.tsx", "image": {"src": "x"}, "items": [{"label": 3}]},
    )

    result = lint_components(_config(project))

    assert result.ok is False
    messages = [e.message for e in result.components[0].occurrences[0].errors]
    assert messages == ["expected ImageWidget (string), got object", "expected string, got number"]


def test_unused_and_excluded_components(project):
    project.source("sections/Footer.tsx", FOOTER)
    project.source("sections/Theme/Theme.tsx", FOOTER)
    project.source("loaders/user.ts", "export default function user() { return null; }\n")
    project.source("sections/Imported.tsx", FOOTER)
    project.source("islands/App.tsx", 'import Imported from "site/sections/Imported.tsx";\n')
    project.source("sections/Session.tsx", FOOTER)

    result = lint_components(_config(project))

    files = [c.file for c in result.components]
    assert "sections/Theme/Theme.tsx" not in files
    assert "loaders/user.ts" not in files
    assert result.unused == ["sections/Footer.tsx"]
    assert "sections/Session.tsx" in files
    imported = next(c for c in result.components if c.file == "sections/Imported.tsx")
    assert imported.imported is True and imported.unused is False
    footer = next(c for c in result.components if c.file == "sections/Footer.tsx")
    assert footer.issues[0].code == IssueCode.UNUSED_COMPONENT
    # Unused components are warnings, never errors
    assert result.ok is True


def test_single_target(project):
    project.source("sections/Footer.tsx", FOOTER)
    project.source("sections/Other.tsx", FOOTER)
    project.block("a.json", {"__resolveType": "site/sections/Footer.tsx"})

    result = lint_components(_config(project), target="sections/Footer.tsx")

    assert [c.file for c in result.components] == ["sections/Footer.tsx"]
    assert result.components[0].occurrences[0].errors[0].message == "required property missing"


def test_missing_target_raises(project):
    with pytest.raises(FileNotFoundError):
        lint_components(_config(project), target="sections/Nope.tsx")


def test_unparseable_document_is_a_localized_error(project):
    project.source("sections/Footer.tsx", FOOTER)
    project.block("broken.json", "{ nope")
    project.block("ok.json", {"__resolveType": "site/sections/Footer.tsx", "title": "x"})

    result = lint_components(_config(project))

    assert result.ok is False
    assert [d.document for d in result.document_errors] == ["broken.json"]
    assert len(result.components[0].occurrences) == 1


def test_anti_patterns_are_reported_without_failing(project):
    project.block(
        "pages-home.json",
        {
            "__resolveType": "website/flags/multivariate.ts",
            "variants": [
                {"rule": {"__resolveType": "website/matchers/never.ts"}, "value": {}},
                {
                    "rule": {"__resolveType": "website/matchers/always.ts"},
                    "value": {
                        "__resolveType": "website/sections/Rendering/Lazy.tsx",
                        "section": {"__resolveType": "website/flags/multivariate.ts", "variants": []},
                    },
                },
            ],
        },
    )

    result = lint_components(_config(project))

    assert result.ok is True
    assert [(p.type, p.path) for p in result.anti_patterns] == [
        ("dead-code", "variants[0]"),
        ("lazy-multivariate", "variants[1].value"),
    ]


def test_lint_documents_follows_saved_blocks(project):
    project.source("sections/Footer.tsx", FOOTER)
    project.block("Main%20Footer.json", {"__resolveType": "site/sections/Footer.tsx", "year": "2024"})
    project.block("Unused%20Banner.json", {"__resolveType": "site/sections/Footer.tsx", "title": "x"})
    project.block("pages-home.json", {"sections": [{"__resolveType": "Main Footer"}]})

    result = lint_documents(_config(project))

    assert isinstance(result, DocumentLintResult)
    assert result.ok is False
    assert result.documents == 3
    locations = sorted((r.file, r.path) for r, _ in result.errors)
    assert ("pages-home.json", "sections[0] -> root") in locations
    assert result.unused_saved_blocks == ["Unused Banner"]


def test_lint_documents_isolates_unreadable_saved_block(project):
    project.source("sections/Footer.tsx", FOOTER)
    (project.blocks / "Broken.json").write_bytes(b'{"__resolveType": "site/sections/Footer.tsx", "title": "\xff"}')
    project.block(
        "pages-home.json",
        {"sections": [{"__resolveType": "Broken"}, {"__resolveType": "site/sections/Footer.tsx", "title": 3}]},
    )

    result = lint_documents(_config(project))

    assert result.ok is False
    failures = {(r.file, r.path): i for r, i in result.errors}
    nested = failures[("pages-home.json", "sections[0]")]
    assert nested.code == IssueCode.DOCUMENT_PARSE_ERROR
    assert nested.message.startswith("Error processing JSON: ")
    assert failures[("Broken.json", "")].code == IssueCode.DOCUMENT_PARSE_ERROR
    # Later references in the same document are still validated
    assert failures[("pages-home.json", "sections[1]")].message == "expected string, got number"


def test_lint_documents_reports_unresolved(project):
    project.block("pages-home.json", {"sections": [{"__resolveType": "site/sections/Gone.tsx"}]})

    result = lint_documents(_config(project))

    assert [u.identifier for u in result.unresolved] == ["site/sections/Gone.tsx"]
    assert result.ok is False


def test_write_report(project):
    project.source("sections/Footer.tsx", FOOTER)
    project.block("a.json", {"__resolveType": "site/sections/Footer.tsx", "title": 1})

    result = lint_components(_config(project))
    path = write_report(result, "reports/validation.json")

    assert path == project.root.resolve() / "reports" / "validation.json"
    report = json.loads(path.read_text(encoding="utf-8"))
    assert report["summary"]["totalSections"] == 1
    assert report["summary"]["sectionsWithErrors"] == 1
    (entry,) = report["sectionsWithErrors"]
    assert entry["resolveType"] == "site/sections/Footer.tsx"
    assert entry["errors"][0] == {
        "jsonFile": "a.json",
        "line": 2,
        "property": "title",
        "message": "expected string, got number",
    }


def test_build_report_counts_unused_separately(project):
    project.source("sections/Footer.tsx", FOOTER)
    report = build_report(lint_components(_config(project)))
    assert report["summary"]["unusedSections"] == 1
    assert report["summary"]["totalWarnings"] == 0
    assert report["unusedSections"] == ["sections/Footer.tsx"]


def test_config_requires_existing_directories(tmp_path):
    with pytest.raises(ConfigError) as exc_info:
        LintConfig.for_project(tmp_path / "missing")
    assert "Project root not found" in str(exc_info.value)

    with pytest.raises(ConfigError):
        LintConfig.for_project(tmp_path)
