"""Test doubles for geiger_report — use in unit / integration tests.

Usage::

    from geiger_report.testing import StaticFinder, StaticGraph, StaticResolver

    graph = StaticGraph()
    root = graph.add("app", deps=[...], files=[...])
    coordinator = ScanCoordinator(StaticResolver({...}), StaticFinder({...}))
"""

from __future__ import annotations

from collections import deque
from pathlib import Path
from typing import Iterable, Iterator, Mapping

from geiger_report.backends.base import FileResolver, PackageGraph, TableRenderer, UnsafeFinder
from geiger_report.models.metrics import (
    FileMetrics,
    MetricsLookup,
    MetricsUnavailable,
    PackageMetrics,
)
from geiger_report.models.package import PackageId, PackageInfo
from geiger_report.models.scan import ScanConfig, ScanMode, Workspace


class StaticResolver(FileResolver):
    """Returns a fixed compiled-file set, or raises ``error`` if given."""

    def __init__(self, files: Iterable[str | Path] = (), error: Exception | None = None) -> None:
        self.files = {Path(f) for f in files}
        self.error = error
        self.calls: list[tuple[ScanConfig, Workspace]] = []

    def resolve(self, config: ScanConfig, workspace: Workspace) -> set[Path]:
        self.calls.append((config, workspace))
        if self.error is not None:
            raise self.error
        return set(self.files)


class StaticFinder(UnsafeFinder):
    """Returns fixed findings, or raises ``error`` if given."""

    def __init__(
        self,
        findings: Mapping[str | Path, FileMetrics] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.findings = {Path(p): m for p, m in (findings or {}).items()}
        self.error = error
        self.modes: list[ScanMode] = []

    def find(self, workspace: Workspace, mode: ScanMode) -> dict[Path, FileMetrics]:
        self.modes.append(mode)
        if self.error is not None:
            raise self.error
        return dict(self.findings)


class StaticGraph(PackageGraph):
    """In-memory graph. Packages added without ``files`` have no metrics."""

    def __init__(self) -> None:
        self.packages: dict[PackageId, PackageInfo] = {}
        self.files: dict[PackageId, set[Path]] = {}

    def add(
        self,
        name: str,
        version: str = "0.1.0",
        deps: Iterable[PackageId] = (),
        files: Iterable[str | Path] | None = None,
    ) -> PackageId:
        pid = PackageId(name, version)
        self.packages[pid] = PackageInfo(id=pid, dependencies=set(deps))
        if files is not None:
            self.files[pid] = {Path(f) for f in files}
        return pid

    def walk(self, root: PackageId) -> Iterator[PackageInfo]:
        seen = {root}
        queue = deque([root])
        while queue:
            info = self.packages[queue.popleft()]
            yield info
            for dep in sorted(info.all_dependencies()):
                if dep not in seen:
                    seen.add(dep)
                    queue.append(dep)

    def package_metrics(
        self,
        package_id: PackageId,
        findings: Mapping[Path, FileMetrics],
    ) -> MetricsLookup:
        if package_id not in self.files:
            return MetricsUnavailable(package_id, "no files registered")
        return PackageMetrics(
            files={p: findings.get(p, FileMetrics()) for p in self.files[package_id]}
        )


class RecordingRenderer(TableRenderer):
    """Records render calls instead of printing."""

    def __init__(self) -> None:
        self.calls: list[tuple[PackageGraph, PackageId, Workspace]] = []

    def render(self, graph: PackageGraph, root_package_id: PackageId, workspace: Workspace) -> None:
        self.calls.append((graph, root_package_id, workspace))
