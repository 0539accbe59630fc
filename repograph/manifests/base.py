"""Protocol for manifest readers."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from repograph.core.exceptions import ManifestError

if TYPE_CHECKING:
    from repograph.core.models import RepoManifest


class ManifestReader(Protocol):
    """Protocol for dependency manifest readers."""

    language: str

    def read(self, repo_path: Path) -> RepoManifest:
        """Read the manifest of the repository at `repo_path`."""
        ...

    def supports(self, repo_path: Path) -> bool:
        """Check if the repository has a manifest this reader understands."""
        ...


def read_text(path: Path) -> str:
    """Read a manifest file as UTF-8."""
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Cannot read {path}: {e}") from e
