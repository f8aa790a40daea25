"""Abstract interfaces for the collaborators the report core drives."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Iterator, Mapping

from geiger_report.models.metrics import FileMetrics, MetricsLookup
from geiger_report.models.package import PackageId, PackageInfo
from geiger_report.models.scan import ScanConfig, ScanMode, Workspace


class FileResolver(ABC):
    """Decides which source files a build under a ScanConfig compiles."""

    @abstractmethod
    def resolve(self, config: ScanConfig, workspace: Workspace) -> set[Path]:
        """
        Return the compiled source files.

        Raises:
            ResolutionError: the file set cannot be determined.
        """
        ...


class UnsafeFinder(ABC):
    """Reports unsafe usage per source file across a workspace."""

    @abstractmethod
    def find(self, workspace: Workspace, mode: ScanMode) -> dict[Path, FileMetrics]:
        """
        Scan the workspace.

        Raises:
            FinderError: the scan failed.
        """
        ...


class PackageGraph(ABC):
    """Dependency graph with a per-package metric lookup."""

    @abstractmethod
    def walk(self, root: PackageId) -> Iterator[PackageInfo]:
        """Yield every package reachable from ``root`` (root included) exactly once."""
        ...

    @abstractmethod
    def package_metrics(
        self,
        package_id: PackageId,
        findings: Mapping[Path, FileMetrics],
    ) -> MetricsLookup:
        """Return PackageMetrics, or MetricsUnavailable when none can be computed."""
        ...


class TableRenderer(ABC):
    """Human-facing table output. Re-derives whatever it needs on its own."""

    @abstractmethod
    def render(self, graph: PackageGraph, root_package_id: PackageId, workspace: Workspace) -> None:
        ...
