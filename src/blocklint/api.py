"""Public API for blocklint.

High-level functions that run a whole lint pass over a project and return
complete, structured results. The CLI is a thin layer over these.
"""

import json
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from blocklint.codes import IssueCode, Severity
from blocklint.config import LintConfig
from blocklint.kernel.documents import DocumentValidator, ReferenceReport, UnresolvedReference
from blocklint.kernel.extractor import TypeExtractor
from blocklint.kernel.references import file_name_to_block_name
from blocklint.kernel.scanner import find_occurrences
from blocklint.kernel.sources import FileSystemReader, SourceReader
from blocklint.kernel.usage import UsageIndex
from blocklint.kernel.validator import ValidationIssue, validate_value
from blocklint._internal.antipatterns import AntiPattern, detect_antipatterns
from blocklint._internal.discovery import find_component_files, find_documents, relative_posix
from blocklint._internal.imports import analyze_imports
from blocklint._internal.lines import find_reference_line


logger = logging.getLogger(__name__)


class OccurrenceResult(BaseModel):
    """Validation of one occurrence of a component in a document."""
    document: str  # path relative to the blocks directory
    path: str  # location of the occurrence in the document
    line: Optional[int] = None
    errors: List[ValidationIssue] = Field(default_factory=list)
    warnings: List[ValidationIssue] = Field(default_factory=list)


class ComponentResult(BaseModel):
    """Every occurrence of one component across the project's documents."""
    file: str  # project-relative source path
    identifier: str
    occurrences: List[OccurrenceResult] = Field(default_factory=list)
    unused: bool = False
    imported: bool = False  # referenced from code only
    issues: List[ValidationIssue] = Field(default_factory=list)  # not tied to an occurrence

    @property
    def total_errors(self) -> int:
        own = sum(1 for i in self.issues if i.severity == Severity.ERROR)
        return own + sum(len(o.errors) for o in self.occurrences)

    @property
    def total_warnings(self) -> int:
        own = sum(1 for i in self.issues if i.severity == Severity.WARNING)
        return own + sum(len(o.warnings) for o in self.occurrences)


class DocumentIssue(BaseModel):
    """A document that could not be read or parsed."""
    document: str
    message: str


class ComponentLintResult(BaseModel):
    """Result of ``lint_components``."""
    ok: bool  # True if no errors (warnings don't block)
    project_root: str
    components: List[ComponentResult]
    unused: List[str] = Field(default_factory=list)  # project-relative source paths
    document_errors: List[DocumentIssue] = Field(default_factory=list)
    anti_patterns: List[AntiPattern] = Field(default_factory=list)

    @property
    def error_count(self) -> int:
        return sum(c.total_errors for c in self.components) + len(self.document_errors)

    @property
    def warning_count(self) -> int:
        return sum(c.total_warnings for c in self.components if not c.unused)

    @property
    def occurrence_count(self) -> int:
        return sum(len(c.occurrences) for c in self.components)


class DocumentLintResult(BaseModel):
    """Result of ``lint_documents``."""
    ok: bool
    project_root: str
    documents: int
    reports: List[ReferenceReport] = Field(default_factory=list)
    unresolved: List[UnresolvedReference] = Field(default_factory=list)
    unused_saved_blocks: List[str] = Field(default_factory=list)

    @property
    def errors(self) -> List[Tuple[ReferenceReport, ValidationIssue]]:
        return [(r, i) for r in self.reports for i in r.errors]

    @property
    def warnings(self) -> List[Tuple[ReferenceReport, ValidationIssue]]:
        return [(r, i) for r in self.reports for i in r.warnings]


class _Document:
    """A block document loaded once per run."""

    def __init__(self, name: str, path: Path, reader: SourceReader):
        self.name = name
        self.path = path
        self.content: Optional[str] = None
        self.data: Any = None
        self.error: Optional[str] = None
        try:
            self.content = reader.read_text(path)
            self.data = json.loads(self.content)
        except (OSError, ValueError) as e:
            self.error = f"Error processing JSON: {e}"
            logger.warning("Skipping %s: %s", path, e)


def _split(issues: List[ValidationIssue]) -> Tuple[List[ValidationIssue], List[ValidationIssue]]:
    errors = [i for i in issues if i.severity == Severity.ERROR]
    warnings = [i for i in issues if i.severity == Severity.WARNING]
    return errors, warnings


def _load_documents(config: LintConfig, reader: SourceReader) -> List[_Document]:
    return [
        _Document(relative_posix(path, config.blocks_dir), path, reader)
        for path in find_documents(config.blocks_dir)
    ]


def lint_components(
    config: LintConfig,
    target: Optional[Union[str, os.PathLike]] = None,
    reader: Optional[SourceReader] = None,
) -> ComponentLintResult:
    """Validate every occurrence of each component against its props type.

    Args:
        config: Project configuration.
        target: Lint only this component source (absolute or project-relative).
        reader: File access; defaults to the local file system.

    Returns:
        ComponentLintResult. Components never referenced from a document nor
        imported from code are flagged unused (a warning, not an error).

    Raises:
        FileNotFoundError: If ``target`` does not exist.
    """
    reader = reader or FileSystemReader()
    root = config.project_root
    resolver = config.resolver()
    extractor = TypeExtractor(root, reader)

    if target is not None:
        target_path = Path(target)
        if not target_path.is_absolute():
            target_path = root / target_path
        if not target_path.is_file():
            raise FileNotFoundError(f"File not found: {target}")
        files = [target_path]
    else:
        files = find_component_files(root, config.component_roots)

    documents = _load_documents(config, reader)
    imports = analyze_imports(root, config.local_prefix) if target is None else None
    ignore_unknown = not config.report_unused_properties

    components: List[ComponentResult] = []
    usage = UsageIndex()
    for path in files:
        relative = relative_posix(path, root)
        if config.is_excluded(relative):
            logger.debug("Skipping excluded component %s", relative)
            continue
        identifier = resolver.identifier_from_path(relative)
        result = ComponentResult(file=relative, identifier=identifier)
        components.append(result)

        schema = extractor.extract(path)
        if schema is None:
            logger.debug("No props type found in %s", relative)

        for document in documents:
            if document.error is not None:
                continue
            for index, occurrence in enumerate(find_occurrences(document.data, identifier, config.discriminator)):
                if schema is None:
                    issues = [
                        ValidationIssue(
                            path="Props",
                            message="Props interface not found in file",
                            severity=Severity.WARNING,
                            code=IssueCode.SCHEMA_NOT_FOUND,
                        )
                    ]
                else:
                    issues = validate_value(occurrence.properties, schema, "", ignore_unknown)
                errors, warnings = _split(issues)
                result.occurrences.append(
                    OccurrenceResult(
                        document=document.name,
                        path=occurrence.path,
                        line=find_reference_line(document.content, identifier, index, config.discriminator),
                        errors=errors,
                        warnings=warnings,
                    )
                )

        if result.occurrences:
            usage.mark(identifier)
        elif imports is not None and imports.is_imported(relative):
            result.imported = True
            usage.mark(identifier)

    if target is None:
        never_unused = [c.identifier for c in components if not config.may_be_unused(c.file)]
        unused_identifiers = set(usage.unused((c.identifier for c in components), excluded=never_unused))
        for component in components:
            if component.identifier in unused_identifiers:
                component.unused = True
                component.issues.append(
                    ValidationIssue(
                        path="",
                        message="not used in any JSON",
                        severity=Severity.WARNING,
                        code=IssueCode.UNUSED_COMPONENT,
                    )
                )

    anti_patterns: List[AntiPattern] = []
    for document in documents:
        if document.error is None:
            anti_patterns.extend(
                detect_antipatterns(document.data, document.name, document.content, config.discriminator)
            )

    document_errors = [DocumentIssue(document=d.name, message=d.error) for d in documents if d.error]
    result = ComponentLintResult(
        ok=True,
        project_root=str(root),
        components=components,
        unused=[c.file for c in components if c.unused],
        document_errors=document_errors,
        anti_patterns=anti_patterns,
    )
    result.ok = result.error_count == 0
    return result


def lint_documents(config: LintConfig, reader: Optional[SourceReader] = None) -> DocumentLintResult:
    """Validate every reference in every block document, following saved blocks.

    Also reports saved blocks that no document references. Entry-point blocks
    (pages, redirects, previews) are never reported unused.
    """
    reader = reader or FileSystemReader()
    resolver = config.resolver()
    validator = DocumentValidator(
        project_root=config.project_root,
        resolver=resolver,
        extractor=TypeExtractor(config.project_root, reader),
        reader=reader,
        blocks_dir=config.blocks_dir,
        ignore_unknown_properties=not config.report_unused_properties,
        discriminator=config.discriminator,
    )

    paths = find_documents(config.blocks_dir)
    reports: List[ReferenceReport] = []
    unresolved: List[UnresolvedReference] = []
    usage = UsageIndex()
    for path in paths:
        name = relative_posix(path, config.blocks_dir)
        try:
            text = reader.read_text(path)
        except (OSError, UnicodeDecodeError) as e:
            reports.append(
                ReferenceReport(
                    file=name,
                    path="",
                    identifier="",
                    issues=[
                        ValidationIssue(
                            path="",
                            message=f"Error processing JSON: {e}",
                            code=IssueCode.DOCUMENT_PARSE_ERROR,
                        )
                    ],
                )
            )
            continue
        document = validator.validate_document(name, text)
        reports.extend(document.reports)
        unresolved.extend(document.unresolved)
        usage.mark_all(document.used_saved_blocks)

    saved_blocks = {
        file_name_to_block_name(path.name)
        for path in paths
        if path.parent == config.blocks_dir
    }
    candidates = {name for name in saved_blocks if not config.is_entry_block(name)}
    unused = usage.unused(candidates)

    ok = not any(r.errors for r in reports)
    return DocumentLintResult(
        ok=ok,
        project_root=str(config.project_root),
        documents=len(paths),
        reports=reports,
        unresolved=unresolved,
        unused_saved_blocks=unused,
    )


def build_report(result: ComponentLintResult) -> Dict[str, Any]:
    """JSON-serializable summary of a component lint run."""
    with_errors: List[ComponentResult] = []
    with_warnings: List[ComponentResult] = []
    for component in result.components:
        if component.unused:
            continue
        if component.total_errors:
            with_errors.append(component)
        elif component.total_warnings:
            with_warnings.append(component)

    return {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "projectRoot": result.project_root,
        "summary": {
            "totalSections": len(result.components),
            "totalOccurrences": result.occurrence_count,
            "totalErrors": result.error_count,
            "totalWarnings": result.warning_count,
            "sectionsWithErrors": len(with_errors),
            "sectionsWithWarnings": len(with_warnings),
            "unusedSections": len(result.unused),
            "validSections": len(result.components) - len(with_errors) - len(with_warnings) - len(result.unused),
            "antiPatterns": len(result.anti_patterns),
        },
        "sectionsWithErrors": [
            {
                "file": c.file,
                "resolveType": c.identifier,
                "errors": [
                    {"jsonFile": o.document, "line": o.line, "property": e.path, "message": e.message}
                    for o in c.occurrences
                    for e in o.errors
                ],
            }
            for c in with_errors
        ],
        "sectionsWithWarnings": [
            {
                "file": c.file,
                "resolveType": c.identifier,
                "warnings": [
                    {"jsonFile": o.document, "property": w.path, "message": w.message}
                    for o in c.occurrences
                    for w in o.warnings
                ],
            }
            for c in with_warnings
        ],
        "unusedSections": list(result.unused),
        "documentErrors": [d.model_dump() for d in result.document_errors],
        "antiPatterns": [
            {
                "type": p.type,
                "jsonFile": p.document,
                "jsonPath": p.path,
                "message": p.message,
                "line": p.line,
            }
            for p in result.anti_patterns
        ],
    }


def write_report(result: ComponentLintResult, path: Union[str, os.PathLike]) -> Path:
    """Write ``build_report(result)`` as pretty JSON; relative paths resolve against the project root."""
    report_path = Path(path)
    if not report_path.is_absolute():
        report_path = Path(result.project_root) / report_path
    report_path.parent.mkdir(parents=True, exist_ok=True)
    report_path.write_text(
        json.dumps(build_report(result), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    return report_path
