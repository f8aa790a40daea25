"""ReportAggregator — merge graph metrics with compiled-file filtered findings."""

from __future__ import annotations

from pathlib import Path
from typing import AbstractSet, Mapping

import structlog

from geiger_report.backends.base import PackageGraph
from geiger_report.models.metrics import (
    CounterBlock,
    FileMetrics,
    MetricsUnavailable,
    PackageMetrics,
)
from geiger_report.models.package import PackageId
from geiger_report.models.report import ReportEntry, SafetyReport, UnsafeFunction, UnsafeInfo
from geiger_report.models.scan import ScanSnapshot

log = structlog.get_logger("geiger_report.aggregate")


def unsafe_stats(
    package_name: str,
    metrics: PackageMetrics,
    compiled_files: AbstractSet[Path],
) -> UnsafeInfo:
    """Summarize one package's metrics.

    Files outside ``compiled_files`` (platform-gated modules, disabled
    features) only feed the ``unused`` block; they never reach ``used`` or
    the function lists.

    A package forbids unsafe code only when every crate entry point declares
    ``forbid(unsafe_code)``. A package with no entry point among its scanned
    files does not forbid unsafe code.
    """
    entry_points = [m for m in metrics.files.values() if m.is_crate_entry_point]
    info = UnsafeInfo(
        forbids_unsafe=bool(entry_points) and all(m.forbids_unsafe for m in entry_points),
    )
    for path in sorted(metrics.files):
        file_metrics = metrics.files[path]
        if path not in compiled_files:
            info.unused = info.unused + file_metrics.counters
            continue
        info.used = info.used + file_metrics.counters
        info.declared_unsafe_functions.extend(
            UnsafeFunction(package_name, name) for name in file_metrics.declared_unsafe_functions
        )
        info.contains_unsafe_functions.extend(
            UnsafeFunction(package_name, name) for name in file_metrics.contains_unsafe_functions
        )
    return info


def list_files_used_but_not_scanned(
    findings: Mapping[Path, FileMetrics],
    compiled_files: AbstractSet[Path],
) -> set[Path]:
    """Compiled files the finder never visited."""
    return {path for path in compiled_files if path not in findings}


class ReportAggregator:
    """
    Build a SafetyReport from a dependency graph and a ScanSnapshot.

    Every package reachable from the root ends up in exactly one of
    ``packages`` / ``packages_without_metrics``. Missing metrics are an
    expected outcome (build-only or metadata-incomplete packages), not an
    error. Duplicate ids from a malformed graph overwrite each other.
    """

    def aggregate(
        self,
        root_package_id: PackageId,
        graph: PackageGraph,
        snapshot: ScanSnapshot,
    ) -> SafetyReport:
        report = SafetyReport()
        for package in graph.walk(root_package_id):
            lookup = graph.package_metrics(package.id, snapshot.findings)
            if isinstance(lookup, MetricsUnavailable):
                log.debug(
                    "aggregate.metrics_missing",
                    package=str(package.id),
                    reason=lookup.reason,
                )
                report.packages_without_metrics.add(package.id)
                continue
            unsafety = unsafe_stats(package.id.name, lookup, snapshot.compiled_files)
            report.packages[package.id] = ReportEntry(package=package, unsafety=unsafety)

        report.used_but_not_scanned_files = list_files_used_but_not_scanned(
            snapshot.findings, snapshot.compiled_files
        )
        log.info(
            "aggregate.done",
            root=str(root_package_id),
            reported=len(report.packages),
            without_metrics=len(report.packages_without_metrics),
            used_but_not_scanned=len(report.used_but_not_scanned_files),
        )
        return report


def total_used(report: SafetyReport) -> CounterBlock:
    """Sum of the ``used`` counters across all reported packages."""
    total = CounterBlock()
    for entry in report.packages.values():
        total = total + entry.unsafety.used
    return total
