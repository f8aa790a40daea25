"""Load unsafe-usage findings produced by an external detector."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from geiger_report.backends.base import UnsafeFinder
from geiger_report.exceptions import FinderError
from geiger_report.models.metrics import FileMetrics
from geiger_report.models.scan import ScanMode, Workspace

logger = logging.getLogger(__name__)


class JsonFindingsFinder(UnsafeFinder):
    """
    Read a findings document of the form::

        {"files": {"src/lib.rs": {"counters": {...}, "forbids_unsafe": false,
                                  "is_crate_entry_point": true,
                                  "declared_unsafe_functions": [...],
                                  "contains_unsafe_functions": [...]}}}

    Relative file paths are taken relative to the workspace root.
    """

    def __init__(self, findings_path: str | Path) -> None:
        self.findings_path = Path(findings_path)

    def find(self, workspace: Workspace, mode: ScanMode) -> dict[Path, FileMetrics]:
        try:
            data = json.loads(self.findings_path.read_text(encoding="utf-8"))
        except OSError as e:
            raise FinderError(f"Cannot read findings file {self.findings_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise FinderError(f"Invalid JSON in {self.findings_path}: {e}") from e

        files = data.get("files") if isinstance(data, dict) else None
        if not isinstance(files, dict):
            raise FinderError(f"{self.findings_path}: expected an object with a 'files' mapping")

        findings: dict[Path, FileMetrics] = {}
        for raw_path, raw_metrics in files.items():
            if not isinstance(raw_metrics, dict):
                raise FinderError(f"{self.findings_path}: metrics for {raw_path!r} must be an object")
            try:
                metrics = FileMetrics.from_dict(raw_metrics)
            except (TypeError, ValueError) as e:
                raise FinderError(f"{self.findings_path}: bad metrics for {raw_path!r}: {e}") from e
            if mode is ScanMode.ENTRY_POINTS_ONLY and not metrics.is_crate_entry_point:
                continue
            path = Path(raw_path)
            if not path.is_absolute():
                path = workspace.root / path
            findings[path.resolve()] = metrics

        logger.debug("Loaded %d file findings from %s", len(findings), self.findings_path)
        return findings
