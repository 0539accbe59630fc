"""package.json reader."""

from __future__ import annotations

import json
from pathlib import Path

from repograph.core.exceptions import ManifestError
from repograph.core.models import DependencySpec, RepoManifest
from repograph.manifests.base import read_text


class PackageJsonReader:
    """Reads `dependencies` (runtime) and `devDependencies` (dev) from package.json."""

    language = "javascript"
    filename = "package.json"

    def supports(self, repo_path: Path) -> bool:
        return (repo_path / self.filename).is_file()

    def read(self, repo_path: Path) -> RepoManifest:
        path = repo_path / self.filename
        try:
            data = json.loads(read_text(path))
        except json.JSONDecodeError as e:
            raise ManifestError(f"Invalid JSON in {path}: {e}") from e
        if not isinstance(data, dict):
            raise ManifestError(f"Expected an object in {path}")

        def specs(key: str) -> list[DependencySpec]:
            table = data.get(key) or {}
            return [
                DependencySpec(name=name, version=str(version) if version else None)
                for name, version in table.items()
            ]

        return RepoManifest(
            name=str(data.get("name") or repo_path.name),
            dependencies=specs("dependencies"),
            dev_dependencies=specs("devDependencies"),
            language=self.language,
        )
