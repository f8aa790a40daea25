"""Wire schemas and canonical JSON encoding for SafetyReport.

The document layout::

    {
      "packages": {"<package id>": {"package": {...}, "unsafety": {...}}, ...},
      "packages_without_metrics": [{"name": ..., "version": ..., "source": ...}, ...],
      "used_but_not_scanned_files": ["/abs/path.rs", ...]
    }

Sets are emitted as sorted lists and mapping keys are sorted, so the same
report always encodes to the same bytes.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ValidationError

from geiger_report.exceptions import SerializationError
from geiger_report.models.metrics import Count, CounterBlock
from geiger_report.models.package import PackageId, PackageInfo
from geiger_report.models.report import ReportEntry, SafetyReport, UnsafeFunction, UnsafeInfo


class OutputFormat(Enum):
    JSON = "json"


class CountSchema(BaseModel):
    safe: int
    unsafe: int


class CounterBlockSchema(BaseModel):
    functions: CountSchema
    exprs: CountSchema
    item_impls: CountSchema
    item_traits: CountSchema
    methods: CountSchema


class PackageIdSchema(BaseModel):
    name: str
    version: str
    source: str | None = None


class PackageInfoSchema(BaseModel):
    id: PackageIdSchema
    dependencies: list[PackageIdSchema]
    dev_dependencies: list[PackageIdSchema]
    build_dependencies: list[PackageIdSchema]


class UnsafeFunctionSchema(BaseModel):
    package: str
    name: str


class UnsafeInfoSchema(BaseModel):
    used: CounterBlockSchema
    unused: CounterBlockSchema
    forbids_unsafe: bool
    declared_unsafe_functions: list[UnsafeFunctionSchema]
    contains_unsafe_functions: list[UnsafeFunctionSchema]


class ReportEntrySchema(BaseModel):
    package: PackageInfoSchema
    unsafety: UnsafeInfoSchema


class SafetyReportSchema(BaseModel):
    packages: dict[str, ReportEntrySchema]
    packages_without_metrics: list[PackageIdSchema]
    used_but_not_scanned_files: list[str]


# ── model -> schema ──


def _count(c: Count) -> dict:
    return {"safe": c.safe, "unsafe": c.unsafe}


def _counters(block: CounterBlock) -> dict:
    return {
        "functions": _count(block.functions),
        "exprs": _count(block.exprs),
        "item_impls": _count(block.item_impls),
        "item_traits": _count(block.item_traits),
        "methods": _count(block.methods),
    }


def _package_id(pid: PackageId) -> dict:
    return {"name": pid.name, "version": pid.version, "source": pid.source}


def _package_ids(ids: set[PackageId]) -> list[dict]:
    return [_package_id(pid) for pid in sorted(ids)]


def _package_info(info: PackageInfo) -> dict:
    return {
        "id": _package_id(info.id),
        "dependencies": _package_ids(info.dependencies),
        "dev_dependencies": _package_ids(info.dev_dependencies),
        "build_dependencies": _package_ids(info.build_dependencies),
    }


def _functions(funcs: list[UnsafeFunction]) -> list[dict]:
    return [{"package": f.package, "name": f.name} for f in funcs]


def _unsafety(info: UnsafeInfo) -> dict:
    return {
        "used": _counters(info.used),
        "unused": _counters(info.unused),
        "forbids_unsafe": info.forbids_unsafe,
        "declared_unsafe_functions": _functions(info.declared_unsafe_functions),
        "contains_unsafe_functions": _functions(info.contains_unsafe_functions),
    }


def _entry(entry: ReportEntry) -> dict:
    return {"package": _package_info(entry.package), "unsafety": _unsafety(entry.unsafety)}


def to_schema(report: SafetyReport) -> SafetyReportSchema:
    """Convert a SafetyReport into its canonical wire schema."""
    try:
        return SafetyReportSchema.model_validate(
            {
                "packages": {str(pid): _entry(report.packages[pid]) for pid in sorted(report.packages)},
                "packages_without_metrics": _package_ids(report.packages_without_metrics),
                "used_but_not_scanned_files": sorted(str(p) for p in report.used_but_not_scanned_files),
            }
        )
    except (ValidationError, AttributeError, TypeError) as e:
        raise SerializationError(f"Malformed report state: {e}") from e


def serialize(report: SafetyReport, output_format: OutputFormat) -> str:
    """Encode a report in the requested format."""
    if output_format is OutputFormat.JSON:
        return to_schema(report).model_dump_json()
    raise SerializationError(f"Unsupported output format: {output_format!r}", str(output_format))


def to_json(report: SafetyReport) -> str:
    return serialize(report, OutputFormat.JSON)


def report_from_json(text: str) -> SafetyReportSchema:
    """Parse a document produced by ``to_json``."""
    try:
        return SafetyReportSchema.model_validate_json(text)
    except ValidationError as e:
        raise SerializationError(f"Invalid report document: {e}", OutputFormat.JSON.value) from e
