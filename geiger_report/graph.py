"""Dependency graph built from ``cargo metadata --format-version 1`` output."""

from __future__ import annotations

import json
import logging
import re
import subprocess
from collections import deque
from pathlib import Path
from typing import Any, Iterator, Mapping

from geiger_report.backends.base import PackageGraph
from geiger_report.exceptions import ResolutionError
from geiger_report.models.metrics import (
    FileMetrics,
    MetricsLookup,
    MetricsUnavailable,
    PackageMetrics,
)
from geiger_report.models.package import PackageId, PackageInfo
from geiger_report.models.scan import ScanConfig, Workspace

logger = logging.getLogger(__name__)

# "serde 1.0.130 (registry+https://...)", cargo < 1.77
_LEGACY_ID = re.compile(r"^(?P<name>\S+) (?P<version>\S+)(?: \((?P<source>.+)\))?$")
# "registry+https://...#serde@1.0.130" / "path+file:///ws/foo#0.1.0"
_SPEC_ID = re.compile(r"^(?P<source>[^#]+)#(?:(?P<name>[^@]+)@)?(?P<version>.+)$")


def parse_package_id(raw: str) -> PackageId:
    """Best-effort parse of a cargo package id string (both id formats)."""
    m = _LEGACY_ID.match(raw)
    if m:
        return PackageId(m["name"], m["version"], m["source"])
    m = _SPEC_ID.match(raw)
    if m:
        name = m["name"] or m["source"].rstrip("/").rsplit("/", 1)[-1]
        return PackageId(name, m["version"], m["source"])
    raise ResolutionError(f"Unrecognized package id: {raw!r}")


def _dep_kinds(dep: dict[str, Any]) -> set[str]:
    kinds = dep.get("dep_kinds") or [{"kind": None}]
    return {k.get("kind") or "normal" for k in kinds}


class CargoMetadataGraph(PackageGraph):
    """
    Package graph + file attribution from cargo metadata.

    A package's files are the finder-visited files below its manifest
    directory, minus those that belong to a package nested inside it.
    """

    def __init__(
        self,
        packages: dict[PackageId, PackageInfo],
        manifest_dirs: dict[PackageId, Path],
        root: PackageId | None = None,
    ) -> None:
        self._packages = packages
        self._manifest_dirs = manifest_dirs
        self.root = root

    # ── construction ──

    @classmethod
    def from_metadata(cls, metadata: dict[str, Any]) -> CargoMetadataGraph:
        try:
            return cls._from_metadata(metadata)
        except (KeyError, TypeError, AttributeError) as e:
            raise ResolutionError(f"Malformed cargo metadata: {e!r}") from e

    @classmethod
    def _from_metadata(cls, metadata: dict[str, Any]) -> CargoMetadataGraph:
        raw_packages = metadata["packages"]
        resolve = metadata.get("resolve") or {}
        nodes = resolve.get("nodes", [])

        ids: dict[str, PackageId] = {}
        manifest_dirs: dict[PackageId, Path] = {}
        for pkg in raw_packages:
            pid = PackageId(pkg["name"], pkg["version"], pkg.get("source"))
            ids[pkg["id"]] = pid
            if pkg.get("manifest_path"):
                manifest_dirs[pid] = Path(pkg["manifest_path"]).resolve().parent

        def lookup(raw_id: str) -> PackageId:
            if raw_id not in ids:
                ids[raw_id] = parse_package_id(raw_id)
            return ids[raw_id]

        packages: dict[PackageId, PackageInfo] = {}
        for node in nodes:
            info = PackageInfo(id=lookup(node["id"]))
            deps = node.get("deps")
            if deps is None:
                info.dependencies = {lookup(d) for d in node.get("dependencies", [])}
            for dep in deps or []:
                dep_id = lookup(dep["pkg"])
                kinds = _dep_kinds(dep)
                if "normal" in kinds:
                    info.dependencies.add(dep_id)
                if "dev" in kinds:
                    info.dev_dependencies.add(dep_id)
                if "build" in kinds:
                    info.build_dependencies.add(dep_id)
            packages[info.id] = info

        root_raw = resolve.get("root")
        root = lookup(root_raw) if root_raw else None
        logger.debug("Loaded cargo metadata: %d packages, root=%s", len(packages), root)
        return cls(packages, manifest_dirs, root)

    @classmethod
    def from_file(cls, path: str | Path) -> CargoMetadataGraph:
        try:
            return cls.from_metadata(json.loads(Path(path).read_text(encoding="utf-8")))
        except (OSError, json.JSONDecodeError) as e:
            raise ResolutionError(f"Cannot load cargo metadata from {path}: {e}") from e

    @classmethod
    def load(cls, workspace: Workspace, config: ScanConfig, cargo: str = "cargo") -> CargoMetadataGraph:
        """Run ``cargo metadata`` for the workspace under the given feature config."""
        cmd = [
            cargo,
            "metadata",
            "--format-version",
            "1",
            "--manifest-path",
            str(workspace.manifest_path),
            *config.cargo_args(),
        ]
        logger.info("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, cwd=str(workspace.root), capture_output=True, text=True)
        except FileNotFoundError as e:
            raise ResolutionError(f"cargo executable not found: {cargo}") from e
        if result.returncode != 0:
            raise ResolutionError(f"cargo metadata failed: {result.stderr.strip()}")
        try:
            return cls.from_metadata(json.loads(result.stdout))
        except json.JSONDecodeError as e:
            raise ResolutionError(f"cargo metadata returned invalid JSON: {e}") from e

    # ── PackageGraph ──

    def walk(self, root: PackageId) -> Iterator[PackageInfo]:
        if root not in self._packages:
            raise ResolutionError(f"Root package {root} is not in the dependency graph")
        seen = {root}
        queue = deque([root])
        while queue:
            info = self._packages[queue.popleft()]
            yield info
            for dep in sorted(info.all_dependencies()):
                if dep not in seen and dep in self._packages:
                    seen.add(dep)
                    queue.append(dep)

    def package_metrics(
        self,
        package_id: PackageId,
        findings: Mapping[Path, FileMetrics],
    ) -> MetricsLookup:
        pkg_dir = self._manifest_dirs.get(package_id)
        if pkg_dir is None:
            return MetricsUnavailable(package_id, "manifest directory unknown")
        nested = [
            d for pid, d in self._manifest_dirs.items()
            if pid != package_id and d != pkg_dir and d.is_relative_to(pkg_dir)
        ]
        files = {
            path: metrics
            for path, metrics in findings.items()
            if path.is_relative_to(pkg_dir) and not any(path.is_relative_to(d) for d in nested)
        }
        if not files:
            return MetricsUnavailable(package_id, "no scanned source files")
        return PackageMetrics(files=files)

    def get(self, package_id: PackageId) -> PackageInfo | None:
        return self._packages.get(package_id)

    def __len__(self) -> int:
        return len(self._packages)
