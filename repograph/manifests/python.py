"""Python manifest reader (requirements.txt and pyproject.toml)."""

from __future__ import annotations

import re
import tomllib
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from repograph.core.exceptions import ManifestError
from repograph.core.models import DependencySpec, RepoManifest
from repograph.manifests.base import read_text

# name[extras] followed by an optional version constraint.
_REQUIREMENT = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)\s*(?:\[[^\]]*\])?\s*(.*)$")
# `name @ url` direct references and `#egg=name` fragments on VCS/URL lines.
_DIRECT_REFERENCE = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)\s*(?:\[[^\]]*\])?\s*@")
_EGG = re.compile(r"[#&]egg=([A-Za-z0-9][A-Za-z0-9._-]*)")

REQUIREMENTS_FILE = "requirements.txt"
DEV_REQUIREMENTS_FILES = ("requirements-dev.txt", "requirements_dev.txt", "dev-requirements.txt")
PYPROJECT_FILE = "pyproject.toml"


def parse_requirement(line: str) -> DependencySpec | None:
    """Parse one PEP 508 style requirement.

    Environment markers and inline comments are dropped. Returns None for
    blank lines, comments, pip options and anything that is not a name.
    URL and VCS requirements are named by `name @` or `#egg=` and carry no
    version; without either they are skipped.
    """
    line = line.split(" #", 1)[0].split(";", 1)[0].strip()
    if not line or line.startswith(("#", "-")):
        return None
    if "://" in line:
        match = _DIRECT_REFERENCE.match(line) or _EGG.search(line)
        return DependencySpec(name=match.group(1)) if match else None
    match = _REQUIREMENT.match(line)
    if match is None:
        return None
    name, version = match.groups()
    version = version.strip().strip("()").strip()
    return DependencySpec(name=name, version=version or None)


def parse_requirements(lines: Iterable[str]) -> list[DependencySpec]:
    specs = (parse_requirement(line) for line in lines)
    return [s for s in specs if s is not None]


def _poetry_specs(table: Mapping[str, Any]) -> list[DependencySpec]:
    specs = []
    for name, value in table.items():
        if name == "python":
            continue
        if isinstance(value, Mapping):
            value = value.get("version")
        specs.append(DependencySpec(name=name, version=str(value) if value else None))
    return specs


class PythonReader:
    """Reads requirements files, falling back to pyproject.toml.

    From pyproject.toml, `[project]` dependencies are runtime and
    optional-dependencies are dev; Poetry's dependency tables are read too.
    """

    language = "python"

    def supports(self, repo_path: Path) -> bool:
        return (repo_path / REQUIREMENTS_FILE).is_file() or (repo_path / PYPROJECT_FILE).is_file()

    def read(self, repo_path: Path) -> RepoManifest:
        if (repo_path / REQUIREMENTS_FILE).is_file():
            return self._read_requirements(repo_path)
        return self._read_pyproject(repo_path)

    def _read_requirements(self, repo_path: Path) -> RepoManifest:
        manifest = RepoManifest(name=repo_path.name, language=self.language)
        content = read_text(repo_path / REQUIREMENTS_FILE)
        manifest.dependencies = parse_requirements(content.splitlines())

        for filename in DEV_REQUIREMENTS_FILES:
            path = repo_path / filename
            if path.is_file():
                manifest.dev_dependencies.extend(parse_requirements(read_text(path).splitlines()))

        pyproject = repo_path / PYPROJECT_FILE
        if pyproject.is_file():
            name = self._load_toml(pyproject).get("project", {}).get("name")
            if name:
                manifest.name = str(name)
        return manifest

    def _read_pyproject(self, repo_path: Path) -> RepoManifest:
        data = self._load_toml(repo_path / PYPROJECT_FILE)
        project = data.get("project", {})
        poetry = data.get("tool", {}).get("poetry", {})

        manifest = RepoManifest(
            name=str(project.get("name") or poetry.get("name") or repo_path.name),
            language=self.language,
        )
        manifest.dependencies = parse_requirements(project.get("dependencies", []))
        for extra in project.get("optional-dependencies", {}).values():
            manifest.dev_dependencies.extend(parse_requirements(extra))

        manifest.dependencies.extend(_poetry_specs(poetry.get("dependencies", {})))
        manifest.dev_dependencies.extend(_poetry_specs(poetry.get("dev-dependencies", {})))
        for group in poetry.get("group", {}).values():
            manifest.dev_dependencies.extend(_poetry_specs(group.get("dependencies", {})))
        return manifest

    @staticmethod
    def _load_toml(path: Path) -> dict[str, Any]:
        try:
            return tomllib.loads(read_text(path))
        except tomllib.TOMLDecodeError as e:
            raise ManifestError(f"Invalid TOML in {path}: {e}") from e
