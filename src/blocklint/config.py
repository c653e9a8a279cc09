"""Project configuration for a lint run."""

from pathlib import Path
from typing import Any, Optional, Tuple

from pydantic import BaseModel, ConfigDict

from blocklint.kernel.references import ReferenceResolver


class BlocklintError(Exception):
    """Base exception for blocklint errors."""
    pass


class ConfigError(BlocklintError):
    """Raised when a configured directory does not exist."""
    def __init__(self, what: str, path: Path):
        self.path = path
        super().__init__(f"{what} not found: {path}")


# Components invoked by the runtime itself, never referenced from documents
DEFAULT_EXCLUDED = (
    "/Theme/Theme.tsx",
    "loaders/user.ts",
    "loaders/icons.ts",
    "loaders/wishlist.ts",
    "loaders/minicart.ts",
    "loaders/availableIcons.ts",
)


class LintConfig(BaseModel):
    """Settings shared by both lint modes."""
    project_root: Path
    blocks_dir: Path
    discriminator: str = "__resolveType"
    local_prefix: str = "site/"
    foreign_prefixes: Tuple[str, ...] = ("website/",)
    sentinel: str = "resolved"
    components_dir: str = "sections"
    source_extensions: Tuple[str, ...] = (".tsx", ".ts")
    # directory -> extensions searched when discovering components
    component_roots: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
        ("sections", (".tsx", ".ts")),
        ("loaders", (".ts",)),
        ("actions", (".ts",)),
    )
    excluded: Tuple[str, ...] = DEFAULT_EXCLUDED  # matched as path suffixes
    # Saved blocks that are entry points rather than reusable content
    entry_block_prefixes: Tuple[str, ...] = ("pages-", "redirect-")
    entry_block_markers: Tuple[str, ...] = ("Preview",)
    # Components the runtime renders on its own; never reported as unused
    never_unused: Tuple[str, ...] = ("sections/Theme/", "sections/Component.tsx", "sections/Session.tsx")
    report_unused_properties: bool = False

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def for_project(cls, project_root: Any, blocks_dir: Optional[Any] = None, **overrides: Any) -> "LintConfig":
        """Config for ``project_root`` with the conventional blocks directory.

        Raises:
            ConfigError: If the project root or blocks directory is missing.
        """
        root = Path(project_root).resolve()
        if not root.is_dir():
            raise ConfigError("Project root", root)
        blocks = Path(blocks_dir) if blocks_dir is not None else root / ".deco" / "blocks"
        if not blocks.is_absolute():
            blocks = root / blocks
        if not blocks.is_dir():
            raise ConfigError("Blocks directory", blocks)
        return cls(project_root=root, blocks_dir=blocks, **overrides)

    def resolver(self) -> ReferenceResolver:
        return ReferenceResolver(
            local_prefix=self.local_prefix,
            foreign_prefixes=self.foreign_prefixes,
            sentinel=self.sentinel,
            components_dir=self.components_dir,
            source_extensions=self.source_extensions,
            blocks_dir=str(self.blocks_dir),
        )

    def is_excluded(self, relative_path: str) -> bool:
        posix = "/" + relative_path.replace("\\", "/")
        return any(posix.endswith("/" + pattern.lstrip("/")) for pattern in self.excluded)

    def is_entry_block(self, name: str) -> bool:
        return name.startswith(self.entry_block_prefixes) or any(m in name for m in self.entry_block_markers)

    def may_be_unused(self, relative_path: str) -> bool:
        posix = relative_path.replace("\\", "/")
        return not any(posix.startswith(p) or posix.endswith(p) for p in self.never_unused)
