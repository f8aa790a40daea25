"""Data models for the collection phase."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from geiger_report.models.metrics import FileMetrics


class ScanMode(Enum):
    """How much of the workspace the finder visits."""

    FULL = "full"
    ENTRY_POINTS_ONLY = "entry_points_only"


@dataclass(frozen=True)
class ScanConfig:
    """Feature selection for one scan. Built once, never mutated."""

    features: tuple[str, ...] = ()
    all_features: bool = False
    no_default_features: bool = False

    def cargo_args(self) -> list[str]:
        """Render as cargo command-line flags."""
        args: list[str] = []
        if self.features:
            args += ["--features", ",".join(self.features)]
        if self.all_features:
            args.append("--all-features")
        if self.no_default_features:
            args.append("--no-default-features")
        return args


@dataclass(frozen=True)
class Workspace:
    """Location of the Cargo workspace being scanned."""

    root: Path
    manifest_path: Path
    target_dir: Path | None = None

    @classmethod
    def from_manifest(cls, manifest_path: str | Path, target_dir: str | Path | None = None) -> Workspace:
        manifest = Path(manifest_path).resolve()
        return cls(
            root=manifest.parent,
            manifest_path=manifest,
            target_dir=Path(target_dir).resolve() if target_dir else None,
        )


@dataclass(frozen=True)
class ScanSnapshot:
    """Compiled files + finder output for a single invocation.

    ``findings`` is exposed read-only; both members are fixed at construction.
    """

    compiled_files: frozenset[Path]
    findings: Mapping[Path, FileMetrics] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "compiled_files", frozenset(self.compiled_files))
        object.__setattr__(self, "findings", MappingProxyType(dict(self.findings)))

    @property
    def scanned_files(self) -> frozenset[Path]:
        return frozenset(self.findings)
