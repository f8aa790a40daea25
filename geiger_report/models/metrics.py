"""Unsafe-usage counters and per-package metric lookup results."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Union

from geiger_report.models.package import PackageId


@dataclass
class Count:
    """Number of safe and unsafe occurrences of one kind of item."""

    safe: int = 0
    unsafe: int = 0

    def __add__(self, other: Count) -> Count:
        return Count(safe=self.safe + other.safe, unsafe=self.unsafe + other.unsafe)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Count:
        data = data or {}
        return cls(safe=int(data.get("safe", 0)), unsafe=int(data.get("unsafe", 0)))


@dataclass
class CounterBlock:
    functions: Count = field(default_factory=Count)
    exprs: Count = field(default_factory=Count)
    item_impls: Count = field(default_factory=Count)
    item_traits: Count = field(default_factory=Count)
    methods: Count = field(default_factory=Count)

    def __add__(self, other: CounterBlock) -> CounterBlock:
        return CounterBlock(
            **{f.name: getattr(self, f.name) + getattr(other, f.name) for f in fields(self)}
        )

    @property
    def unsafe_total(self) -> int:
        return sum(getattr(self, f.name).unsafe for f in fields(self))

    @property
    def safe_total(self) -> int:
        return sum(getattr(self, f.name).safe for f in fields(self))

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> CounterBlock:
        data = data or {}
        return cls(**{f.name: Count.from_dict(data.get(f.name)) for f in fields(cls)})


@dataclass
class FileMetrics:
    """Unsafe-usage detail the finder reports for one source file."""

    counters: CounterBlock = field(default_factory=CounterBlock)
    forbids_unsafe: bool = False
    is_crate_entry_point: bool = False
    declared_unsafe_functions: list[str] = field(default_factory=list)
    contains_unsafe_functions: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FileMetrics:
        return cls(
            counters=CounterBlock.from_dict(data.get("counters")),
            forbids_unsafe=bool(data.get("forbids_unsafe", False)),
            is_crate_entry_point=bool(data.get("is_crate_entry_point", False)),
            declared_unsafe_functions=[str(n) for n in data.get("declared_unsafe_functions", [])],
            contains_unsafe_functions=[str(n) for n in data.get("contains_unsafe_functions", [])],
        )


@dataclass
class PackageMetrics:
    """Metrics are available: every finder-visited file of the package."""

    files: dict[Path, FileMetrics] = field(default_factory=dict)


@dataclass
class MetricsUnavailable:
    """Metrics are absent for a graph node. Recorded, never raised."""

    package_id: PackageId
    reason: str = ""


MetricsLookup = Union[PackageMetrics, MetricsUnavailable]
