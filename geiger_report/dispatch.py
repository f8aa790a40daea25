"""OutputDispatcher — structured report on stdout, or hand off to the table renderer."""

from __future__ import annotations

import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO, Union

import structlog

from geiger_report.aggregate import ReportAggregator, total_used
from geiger_report.backends.base import PackageGraph, TableRenderer
from geiger_report.models.package import PackageId
from geiger_report.models.report import SafetyReport
from geiger_report.models.scan import ScanConfig, Workspace
from geiger_report.scan import ScanCoordinator
from geiger_report.serde import OutputFormat, serialize

log = structlog.get_logger("geiger_report.dispatch")

DECLARED_SUFFIX = ".declared"
CONTAINS_SUFFIX = ".contains"


@dataclass(frozen=True)
class StructuredReport:
    """Build a SafetyReport and print it as a machine-readable document."""

    output_format: OutputFormat = OutputFormat.JSON


@dataclass(frozen=True)
class InteractiveTable:
    """Skip the report entirely and let the table renderer do its own work."""


OutputMode = Union[StructuredReport, InteractiveTable]


@dataclass
class ReportRequest:
    mode: OutputMode
    config: ScanConfig
    workspace: Workspace
    graph: PackageGraph
    root_package_id: PackageId
    unsafe_fn_log: Path | None = None


def suffixed_file_name(path: str | Path, suffix: str) -> Path:
    """Insert ``suffix`` right before the extension of ``path``'s file name.

    ``logs/report.log`` + ``.declared`` -> ``logs/report.declared.log``;
    ``logs/report`` + ``.declared`` -> ``logs/report.declared``.
    """
    path = Path(path)
    if not path.name:
        raise ValueError(f"Log path has no file name: {str(path)!r}")
    return path.with_name(f"{path.stem}{suffix}{path.suffix}")


def log_unsafe_functions(log_path: str | Path, report: SafetyReport) -> tuple[Path, Path]:
    """Write the declared/contains unsafe function lists next to ``log_path``.

    Both files are created before anything is written. Returns their paths.
    """
    declared_path = suffixed_file_name(log_path, DECLARED_SUFFIX)
    contains_path = suffixed_file_name(log_path, CONTAINS_SUFFIX)
    with open(declared_path, "w", encoding="utf-8", newline="\n") as declared, open(
        contains_path, "w", encoding="utf-8", newline="\n"
    ) as contains:
        for entry in report.iter_entries():
            for func in entry.unsafety.declared_unsafe_functions:
                declared.write(func.log_line())
            for func in entry.unsafety.contains_unsafe_functions:
                contains.write(func.log_line())
    return declared_path, contains_path


class OutputDispatcher:
    """
    Run one of two mutually exclusive pipelines.

    StructuredReport: collect -> aggregate -> serialize/print -> (optional) log.
    InteractiveTable: renderer.render(graph, root, workspace), nothing else.

    Every failure propagates; the primary output is never rolled back when a
    later log write fails.
    """

    def __init__(
        self,
        coordinator: ScanCoordinator,
        renderer: TableRenderer,
        aggregator: ReportAggregator | None = None,
        stream: TextIO | None = None,
    ) -> None:
        self.coordinator = coordinator
        self.renderer = renderer
        self.aggregator = aggregator or ReportAggregator()
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # Resolved per call so a swapped sys.stdout (click's CliRunner) is honoured.
        return self._stream if self._stream is not None else sys.stdout

    def dispatch(self, request: ReportRequest) -> SafetyReport | None:
        """Execute the request. Returns the report in structured mode, else None."""
        if isinstance(request.mode, InteractiveTable):
            if request.unsafe_fn_log is not None:
                log.warning(
                    "dispatch.log_ignored",
                    reason="unsafe function logs need a structured output format",
                    path=str(request.unsafe_fn_log),
                )
            self.renderer.render(request.graph, request.root_package_id, request.workspace)
            return None
        if isinstance(request.mode, StructuredReport):
            return self._dispatch_report(request, request.mode.output_format)
        raise TypeError(f"Unknown output mode: {request.mode!r}")

    def _dispatch_report(self, request: ReportRequest, output_format: OutputFormat) -> SafetyReport:
        snapshot = self.coordinator.collect(request.config, request.workspace)
        report = self.aggregator.aggregate(request.root_package_id, request.graph, snapshot)
        document = serialize(report, output_format)

        self.stream.write(document + "\n")
        self.stream.flush()
        log.info(
            "dispatch.report_written",
            format=output_format.value,
            packages=len(report.packages),
            unsafe_used=total_used(report).unsafe_total,
        )

        if request.unsafe_fn_log is not None:
            declared, contains = log_unsafe_functions(request.unsafe_fn_log, report)
            log.info("dispatch.unsafe_fn_logs_written", declared=str(declared), contains=str(contains))
        return report
