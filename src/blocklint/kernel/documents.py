"""Validate every reference inside one JSON document.

Saved blocks are followed into their own documents; the chain of blocks
being expanded is tracked so a block that (indirectly) references itself is
reported instead of recursing forever.
"""

import json
import logging
import os
from typing import FrozenSet, List, Set

from pydantic import BaseModel, Field

from blocklint.codes import IssueCode, Severity
from blocklint.kernel.extractor import TypeExtractor
from blocklint.kernel.references import BlockStore, ReferenceKind, ReferenceResolver
from blocklint.kernel.scanner import FoundReference, find_references
from blocklint.kernel.sources import PathLike, SourceReader
from blocklint.kernel.validator import DISCRIMINATOR, ValidationIssue, validate_value


logger = logging.getLogger(__name__)


class ReferenceReport(BaseModel):
    """Issues found at one reference of a document."""
    file: str
    path: str  # location in the document; nested blocks read "outer -> inner"
    identifier: str
    issues: List[ValidationIssue]

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == Severity.WARNING]


class UnresolvedReference(BaseModel):
    """A local identifier with no source file in the project."""
    file: str
    path: str
    identifier: str


class DocumentResult(BaseModel):
    """Outcome of validating one document (and the saved blocks it pulls in)."""
    reports: List[ReferenceReport] = Field(default_factory=list)
    unresolved: List[UnresolvedReference] = Field(default_factory=list)
    used_saved_blocks: Set[str] = Field(default_factory=set)

    @property
    def error_count(self) -> int:
        return sum(len(r.errors) for r in self.reports)

    @property
    def warning_count(self) -> int:
        return sum(len(r.warnings) for r in self.reports)


def _issue(message: str, code: IssueCode, severity: Severity = Severity.ERROR) -> ValidationIssue:
    return ValidationIssue(path="", message=message, severity=severity, code=code)


class DocumentValidator:
    """Validates documents of one project.

    Args:
        project_root: Directory local identifiers resolve against.
        resolver: Identifier conventions.
        extractor: Props-schema source, normally shared across documents so
            its cache is reused.
        reader: File access for component sources and saved blocks.
        blocks_dir: Directory of saved-block documents.
        ignore_unknown_properties: Skip warnings for keys a schema does not declare.
        discriminator: Key naming the component of a JSON object.
    """

    def __init__(
        self,
        project_root: PathLike,
        resolver: ReferenceResolver,
        extractor: TypeExtractor,
        reader: SourceReader,
        blocks_dir: PathLike,
        ignore_unknown_properties: bool = True,
        discriminator: str = DISCRIMINATOR,
    ):
        self.project_root = os.fspath(project_root)
        self.resolver = resolver
        self.extractor = extractor
        self.reader = reader
        self.blocks = BlockStore(blocks_dir, reader)
        self.ignore_unknown_properties = ignore_unknown_properties
        self.discriminator = discriminator

    def validate_document(
        self,
        file: str,
        text: str,
        in_progress: FrozenSet[str] = frozenset(),
    ) -> DocumentResult:
        """Validate every reference in the JSON ``text`` of ``file``.

        Args:
            file: Name reported on every issue.
            text: Raw document text.
            in_progress: Saved blocks currently being expanded above this
                document.
        """
        result = DocumentResult()
        try:
            document = json.loads(text)
        except ValueError as e:
            logger.debug("Could not parse %s: %s", file, e)
            result.reports.append(
                ReferenceReport(
                    file=file,
                    path="",
                    identifier="",
                    issues=[_issue(f"Error processing JSON: {e}", IssueCode.DOCUMENT_PARSE_ERROR)],
                )
            )
            return result

        for reference in find_references(document, self.resolver, self.discriminator):
            if reference.kind is ReferenceKind.SAVED_BLOCK:
                self._check_saved_block(file, reference, in_progress, result)
            else:
                self._check_local(file, reference, result)
        return result

    def _check_saved_block(
        self,
        file: str,
        reference: FoundReference,
        in_progress: FrozenSet[str],
        result: DocumentResult,
    ) -> None:
        name = reference.identifier
        result.used_saved_blocks.add(name)

        if name in in_progress:
            self._report(result, file, reference, _issue(f"Circular reference detected: {name}", IssueCode.CIRCULAR_REFERENCE))
            return

        if reference.properties:
            extra = ", ".join(reference.properties)
            self._report(
                result,
                file,
                reference,
                _issue(
                    f"Saved block should not have extra properties. Found: {extra}",
                    IssueCode.SAVED_BLOCK_EXTRA_PROPERTIES,
                ),
            )

        try:
            content = self.blocks.read(name)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read saved block %s: %s", name, e)
            self._report(result, file, reference, _issue(f"Error processing JSON: {e}", IssueCode.DOCUMENT_PARSE_ERROR))
            return
        if content is None:
            self._report(result, file, reference, _issue(f"Saved block not found: {name}", IssueCode.SAVED_BLOCK_NOT_FOUND))
            return

        nested = self.validate_document(file, content, in_progress | {name})
        for report in nested.reports:
            result.reports.append(
                report.model_copy(update={"path": _chain(reference.path, report.path)})
            )
        for unresolved in nested.unresolved:
            result.unresolved.append(
                unresolved.model_copy(update={"path": _chain(reference.path, unresolved.path)})
            )
        result.used_saved_blocks |= nested.used_saved_blocks

    def _check_local(self, file: str, reference: FoundReference, result: DocumentResult) -> None:
        source = self.resolver.locate(reference.identifier, self.project_root, self.reader)
        if source is None:
            result.unresolved.append(
                UnresolvedReference(file=file, path=reference.path, identifier=reference.identifier)
            )
            self._report(
                result,
                file,
                reference,
                _issue(f"Section not found: {reference.identifier}", IssueCode.SECTION_NOT_FOUND),
            )
            return

        schema = self.extractor.extract(source)
        if schema is None:
            self._report(
                result,
                file,
                reference,
                _issue("Props interface not found in file", IssueCode.SCHEMA_NOT_FOUND, Severity.WARNING),
            )
            return

        issues = validate_value(reference.properties, schema, "", self.ignore_unknown_properties)
        if issues:
            result.reports.append(
                ReferenceReport(file=file, path=reference.path, identifier=reference.identifier, issues=issues)
            )

    @staticmethod
    def _report(result: DocumentResult, file: str, reference: FoundReference, issue: ValidationIssue) -> None:
        result.reports.append(
            ReferenceReport(file=file, path=reference.path, identifier=reference.identifier, issues=[issue])
        )


def _chain(outer: str, inner: str) -> str:
    return f"{outer} -> {inner}" if inner else outer
