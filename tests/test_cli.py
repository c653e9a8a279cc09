"""CLI tests for the sections and blocks subcommands."""

import json
import sys

import pytest

from blocklint import cli


FOOTER = """
export interface Props {
  title: string;
}

export default function Footer({ title }: Props) {
  return <footer>{title}</footer>;
}
"""


def _run_cli(args, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["blocklint"] + args)
    return cli.main()


def test_sections_ok(project, monkeypatch, capsys):
    project.source("sections/Footer.tsx", FOOTER)
    project.block("pages-home.json", {"sections": [{"__resolveType": "site/sections/Footer.tsx", "title": "Acme"}]})

    _run_cli(["sections", "--project-root", str(project.root)], monkeypatch)

    out = capsys.readouterr().out
    assert "Status: OK" in out
    assert "Errors: 0" in out


def test_sections_failure_exits_1(project, monkeypatch, capsys):
    project.source("sections/Footer.tsx", FOOTER)
    project.block("pages-home.json", {"sections": [{"__resolveType": "site/sections/Footer.tsx", "title": 7}]})

    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["sections", "--project-root", str(project.root)], monkeypatch)

    assert excinfo.value.code == 1
    out = capsys.readouterr().out
    assert "Status: FAILED" in out
    assert '"title": expected string, got number (pages-home.json:4)' in out


def test_sections_unused_flag_reports_warnings(project, monkeypatch, capsys):
    project.source("sections/Footer.tsx", FOOTER)
    project.block("a.json", {"__resolveType": "site/sections/Footer.tsx", "title": "x", "extra": 1})

    _run_cli(["sections", "--project-root", str(project.root), "--unused"], monkeypatch)

    out = capsys.readouterr().out
    assert "Warnings: 1" in out
    assert '"extra": property not defined in type (can be removed)' in out


def test_sections_report_default_name(project, monkeypatch, capsys):
    project.source("sections/Footer.tsx", FOOTER)
    project.block("a.json", {"__resolveType": "site/sections/Footer.tsx", "title": "x"})

    _run_cli(["sections", "--project-root", str(project.root), "--report", "--quiet"], monkeypatch)

    assert capsys.readouterr().out == ""
    report = json.loads((project.root / "validation-report.json").read_text(encoding="utf-8"))
    assert report["summary"]["totalOccurrences"] == 1


def test_sections_missing_target(project, monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["sections", "sections/Nope.tsx", "--project-root", str(project.root)], monkeypatch)
    assert excinfo.value.code == 1
    assert "Error: File not found" in capsys.readouterr().err


def test_missing_project_root(tmp_path, monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["blocks", "--project-root", str(tmp_path / "nope")], monkeypatch)
    assert excinfo.value.code == 1
    assert "Project root not found" in capsys.readouterr().err


def test_blocks_reports_saved_block_problems(project, monkeypatch, capsys):
    project.source("sections/Footer.tsx", FOOTER)
    project.block("pages-home.json", {"sections": [{"__resolveType": "Footer", "title": "x"}]})

    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["blocks", "--project-root", str(project.root)], monkeypatch)

    assert excinfo.value.code == 1
    out = capsys.readouterr().out
    assert "Saved block should not have extra properties. Found: title" in out
    assert "Saved block not found: Footer" in out
    assert "Errors: 2" in out


def test_no_command_prints_help(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli([], monkeypatch)
    assert excinfo.value.code == 1
    assert "usage: blocklint" in capsys.readouterr().out
