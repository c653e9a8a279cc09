"""blocklint: static validation of CMS block documents against component props types."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("blocklint")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from blocklint.api import (
    lint_components,
    lint_documents,
    write_report,
    ComponentLintResult,
    DocumentLintResult,
)
from blocklint.codes import IssueCode, Severity
from blocklint.config import BlocklintError, ConfigError, LintConfig
from blocklint.kernel.extractor import TypeExtractor
from blocklint.kernel.validator import ValidationIssue, validate_value

__all__ = [
    "__version__",
    "lint_components",
    "lint_documents",
    "write_report",
    "ComponentLintResult",
    "DocumentLintResult",
    "IssueCode",
    "Severity",
    "BlocklintError",
    "ConfigError",
    "LintConfig",
    "TypeExtractor",
    "ValidationIssue",
    "validate_value",
]
