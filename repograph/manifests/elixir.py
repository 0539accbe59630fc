"""Elixir mix.exs reader."""

from __future__ import annotations

import re
from pathlib import Path

from repograph.core.exceptions import ManifestError
from repograph.core.models import DependencySpec, RepoManifest
from repograph.manifests.base import read_text

_APP = re.compile(r"app:\s*:(\w+)")
_DEPS_BLOCK = re.compile(
    r"defp?\s+deps\s*(?:\(\s*\))?\s*do\b(.*?)^\s*end\b", re.DOTALL | re.MULTILINE
)
# Options may hold one level of nested braces, e.g. `system_env: %{"A" => "b"}`.
_DEP_TUPLE = re.compile(r"\{\s*:(\w+)\s*,((?:[^{}]|\{[^{}]*\})*)\}")
# Strings are matched first so a `#` inside one is not read as a comment.
_STRING_OR_COMMENT = re.compile(r'"(?:[^"\\]|\\.)*"|#[^\n]*')
_VERSION = re.compile(r'^\s*"([^"]*)"')
_DEV_ONLY = re.compile(r"only:\s*(?::(?:dev|test)\b|\[[^\]]*:(?:dev|test)\b)")


def _strip_comments(source: str) -> str:
    return _STRING_OR_COMMENT.sub(lambda m: "" if m.group().startswith("#") else m.group(), source)


class MixReader:
    """Reads `deps` from a mix.exs project file.

    `{:name, "~> 1.0"}` entries keep their version; entries restricted with
    `only: :dev` / `only: :test` (or a list containing them) are dev
    dependencies. Path and git dependencies have no version.
    """

    language = "elixir"
    filename = "mix.exs"

    def supports(self, repo_path: Path) -> bool:
        return (repo_path / self.filename).is_file()

    def read(self, repo_path: Path) -> RepoManifest:
        path = repo_path / self.filename
        content = read_text(path)

        if "defmodule" not in content:
            raise ManifestError(f"Not a mix project file: {path}")

        app = _APP.search(content)
        manifest = RepoManifest(
            name=app.group(1) if app else repo_path.name,
            language=self.language,
        )

        block = _DEPS_BLOCK.search(content)
        if block is None:
            return manifest

        for name, options in _DEP_TUPLE.findall(_strip_comments(block.group(1))):
            version = _VERSION.match(options)
            spec = DependencySpec(name=name, version=version.group(1) if version else None)
            if _DEV_ONLY.search(options):
                manifest.dev_dependencies.append(spec)
            else:
                manifest.dependencies.append(spec)

        return manifest
