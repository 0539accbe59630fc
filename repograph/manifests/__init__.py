"""
Dependency manifest readers.

Each reader turns one kind of manifest (mix.exs, requirements.txt /
pyproject.toml, package.json) into a RepoManifest for portfolio analysis.
"""

from __future__ import annotations

import logging
from pathlib import Path

from repograph.core.exceptions import ManifestError
from repograph.core.models import RepoManifest
from repograph.manifests.base import ManifestReader
from repograph.manifests.elixir import MixReader
from repograph.manifests.javascript import PackageJsonReader
from repograph.manifests.python import PythonReader

logger = logging.getLogger(__name__)

# Checked in order; the first reader that supports a directory wins.
READERS: dict[str, ManifestReader] = {
    "elixir": MixReader(),
    "python": PythonReader(),
    "javascript": PackageJsonReader(),
}


def detect_language(repo_path: Path) -> str | None:
    """Language of the first manifest found in `repo_path`, if any."""
    for language, reader in READERS.items():
        if reader.supports(repo_path):
            return language
    return None


def read_manifest(repo_path: Path, language: str | None = None) -> RepoManifest:
    """Read the manifest of one repository.

    Raises:
        ManifestError: no supported manifest, unknown language, or a
            manifest that cannot be read.
    """
    repo_path = Path(repo_path)
    if language is None:
        language = detect_language(repo_path)
        if language is None:
            raise ManifestError(f"No supported manifest in {repo_path}")

    reader = READERS.get(language)
    if reader is None:
        raise ManifestError(f"Unsupported language: {language}")
    return reader.read(repo_path)


def scan_portfolio(root: Path) -> list[RepoManifest]:
    """Read every repository directly under `root`.

    Hidden directories and directories without a manifest are skipped;
    unreadable manifests are logged and skipped.

    Raises:
        ManifestError: `root` is not a directory.
    """
    root = Path(root)
    if not root.is_dir():
        raise ManifestError(f"Not a directory: {root}")

    manifests = []
    for path in sorted(root.iterdir()):
        if not path.is_dir() or path.name.startswith("."):
            continue
        if detect_language(path) is None:
            continue
        try:
            manifests.append(read_manifest(path))
        except ManifestError as e:
            logger.warning("Skipping %s: %s", path.name, e)
    logger.debug("Scanned %d repos under %s", len(manifests), root)
    return manifests


__all__ = [
    "READERS",
    "ManifestReader",
    "MixReader",
    "PackageJsonReader",
    "PythonReader",
    "detect_language",
    "read_manifest",
    "scan_portfolio",
]
