"""Package identity and descriptor models."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class PackageId:
    """Identify one package in the dependency graph."""

    name: str
    version: str
    source: str | None = None

    def __str__(self) -> str:
        if self.source:
            return f"{self.name} {self.version} ({self.source})"
        return f"{self.name} {self.version}"

    def __lt__(self, other: PackageId) -> bool:
        if not isinstance(other, PackageId):
            return NotImplemented
        return (self.name, self.version, self.source or "") < (
            other.name,
            other.version,
            other.source or "",
        )


@dataclass
class PackageInfo:
    """Package descriptor carried by a report entry."""

    id: PackageId
    dependencies: set[PackageId] = field(default_factory=set)
    dev_dependencies: set[PackageId] = field(default_factory=set)
    build_dependencies: set[PackageId] = field(default_factory=set)

    def all_dependencies(self) -> set[PackageId]:
        return self.dependencies | self.dev_dependencies | self.build_dependencies
