"""Data models shared across the scan, aggregate and dispatch phases."""

from geiger_report.models.metrics import (
    Count,
    CounterBlock,
    FileMetrics,
    MetricsLookup,
    MetricsUnavailable,
    PackageMetrics,
)
from geiger_report.models.package import PackageId, PackageInfo
from geiger_report.models.report import ReportEntry, SafetyReport, UnsafeFunction, UnsafeInfo
from geiger_report.models.scan import ScanConfig, ScanMode, ScanSnapshot, Workspace

__all__ = [
    "Count",
    "CounterBlock",
    "FileMetrics",
    "MetricsLookup",
    "MetricsUnavailable",
    "PackageId",
    "PackageInfo",
    "PackageMetrics",
    "ReportEntry",
    "SafetyReport",
    "ScanConfig",
    "ScanMode",
    "ScanSnapshot",
    "UnsafeFunction",
    "UnsafeInfo",
    "Workspace",
]
