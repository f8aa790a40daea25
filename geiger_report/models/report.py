"""SafetyReport model — assembled by ReportAggregator, serialized once."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from geiger_report.models.metrics import CounterBlock
from geiger_report.models.package import PackageId, PackageInfo


@dataclass(frozen=True, order=True)
class UnsafeFunction:
    """A function name together with the package that owns it."""

    package: str
    name: str

    def log_line(self) -> str:
        return f"{self.package} {self.name}\n"


@dataclass
class UnsafeInfo:
    """Unsafety summary of one package.

    ``used`` only counts files that were compiled; ``unused`` counts the
    package's remaining scanned files. The function lists are restricted to
    compiled files.
    """

    used: CounterBlock = field(default_factory=CounterBlock)
    unused: CounterBlock = field(default_factory=CounterBlock)
    forbids_unsafe: bool = False
    declared_unsafe_functions: list[UnsafeFunction] = field(default_factory=list)
    contains_unsafe_functions: list[UnsafeFunction] = field(default_factory=list)


@dataclass
class ReportEntry:
    package: PackageInfo
    unsafety: UnsafeInfo


@dataclass
class SafetyReport:
    packages: dict[PackageId, ReportEntry] = field(default_factory=dict)
    packages_without_metrics: set[PackageId] = field(default_factory=set)
    used_but_not_scanned_files: set[Path] = field(default_factory=set)

    def iter_entries(self) -> list[ReportEntry]:
        """Entries in package-id order."""
        return [self.packages[pid] for pid in sorted(self.packages)]
