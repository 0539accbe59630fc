"""Load a portfolio description from JSON."""

from __future__ import annotations

import json
from pathlib import Path

from repograph.core.exceptions import ManifestError
from repograph.core.models import RepoManifest


def load_portfolio(path: Path) -> list[RepoManifest]:
    """Read repo manifests from a JSON file.

    The file holds either a list of repos or {"repos": [...]}, each repo
    shaped like RepoManifest.to_dict().
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ManifestError(f"Cannot read {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise ManifestError(f"Invalid JSON in {path}: {e}") from e

    if isinstance(data, dict):
        data = data.get("repos")
    if not isinstance(data, list):
        raise ManifestError(f"Expected a list of repos in {path}")

    try:
        return [RepoManifest.from_dict(repo) for repo in data]
    except (KeyError, TypeError, AttributeError) as e:
        raise ManifestError(f"Malformed repo in {path}: {e!r}") from e
