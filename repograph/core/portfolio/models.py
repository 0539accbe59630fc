"""Result types for cross-repository analysis."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class RiskLevel(Enum):
    """How far a change to one repo ripples through the portfolio."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


@dataclass
class ImpactResult:
    """Repos affected by a change to `repo`."""

    repo: str
    directly_affected: list[str]
    transitively_affected: list[str]
    risk_level: RiskLevel

    @property
    def affected_count(self) -> int:
        return len(self.directly_affected) + len(self.transitively_affected)

    def to_dict(self) -> dict[str, Any]:
        return {
            "repo": self.repo,
            "directly_affected": list(self.directly_affected),
            "transitively_affected": list(self.transitively_affected),
            "risk_level": self.risk_level.value,
        }


@dataclass
class SharedDependency:
    """A dependency and the repos that declare it."""

    dependency: str
    used_by: list[str]

    @property
    def count(self) -> int:
        return len(self.used_by)

    def to_dict(self) -> dict[str, Any]:
        return {"dependency": self.dependency, "used_by": list(self.used_by), "count": self.count}


@dataclass(frozen=True)
class VersionDeclaration:
    """One repo's version constraint for a dependency."""

    repo: str
    version: str
    dev: bool = False


@dataclass
class DependencyVersions:
    """Every version constraint declared for one dependency."""

    dependency: str
    declarations: list[VersionDeclaration] = field(default_factory=list)

    @property
    def versions(self) -> list[str]:
        """Distinct constraint strings, in declaration order."""
        return list(dict.fromkeys(d.version for d in self.declarations))

    def to_dict(self) -> dict[str, Any]:
        return {
            "dependency": self.dependency,
            "versions": self.versions,
            "declarations": [
                {"repo": d.repo, "version": d.version, "dev": d.dev} for d in self.declarations
            ],
        }


@dataclass
class VersionConflict:
    """Declarations of one dependency that disagree on the major version."""

    dependency: str
    declarations: list[VersionDeclaration]
    majors: list[int]
    severity: str = "major"

    def to_dict(self) -> dict[str, Any]:
        return {
            "dependency": self.dependency,
            "majors": list(self.majors),
            "severity": self.severity,
            "repos": [{"repo": d.repo, "version": d.version} for d in self.declarations],
        }
