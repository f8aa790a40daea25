"""Collection phase: compiled-file set + workspace-wide unsafe findings."""

from __future__ import annotations

from pathlib import Path

import structlog

from geiger_report.backends.base import FileResolver, UnsafeFinder
from geiger_report.exceptions import FinderError, ResolutionError
from geiger_report.models.scan import ScanConfig, ScanMode, ScanSnapshot, Workspace

log = structlog.get_logger("geiger_report.scan")


def _normalize(path: Path, workspace: Workspace) -> Path:
    path = Path(path)
    if not path.is_absolute():
        path = workspace.root / path
    return path.resolve()


class ScanCoordinator:
    """
    Run the resolver, then the finder, and freeze both results.

    Either both sub-results are obtained or the whole collection fails; the
    finder always runs in FULL mode, filtering to compiled files happens
    later in the aggregator.
    """

    def __init__(self, resolver: FileResolver, finder: UnsafeFinder) -> None:
        self.resolver = resolver
        self.finder = finder

    def collect(self, config: ScanConfig, workspace: Workspace) -> ScanSnapshot:
        try:
            compiled = self.resolver.resolve(config, workspace)
        except ResolutionError:
            raise
        except Exception as e:
            raise ResolutionError(f"Could not resolve compiled files: {e}") from e

        try:
            findings = self.finder.find(workspace, ScanMode.FULL)
        except FinderError:
            raise
        except Exception as e:
            raise FinderError(f"Unsafe-usage scan failed: {e}") from e

        snapshot = ScanSnapshot(
            compiled_files=frozenset(_normalize(p, workspace) for p in compiled),
            findings={_normalize(p, workspace): m for p, m in findings.items()},
        )
        log.info(
            "scan.collected",
            workspace=str(workspace.root),
            features=list(config.features),
            compiled_files=len(snapshot.compiled_files),
            scanned_files=len(snapshot.findings),
        )
        return snapshot
