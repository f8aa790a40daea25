"""geiger-report: unsafe-usage safety reports for Cargo dependency graphs."""

__version__ = "0.1.0"

from geiger_report.aggregate import ReportAggregator
from geiger_report.core.logging import configure_default_logging
from geiger_report.dispatch import (
    InteractiveTable,
    OutputDispatcher,
    ReportRequest,
    StructuredReport,
    suffixed_file_name,
)
from geiger_report.exceptions import (
    FinderError,
    GeigerReportError,
    ResolutionError,
    SerializationError,
)
from geiger_report.features import FeatureConfigBuilder
from geiger_report.graph import CargoMetadataGraph
from geiger_report.models import PackageId, SafetyReport, ScanConfig, ScanSnapshot, Workspace
from geiger_report.scan import ScanCoordinator
from geiger_report.serde import OutputFormat, to_json

configure_default_logging()

__all__ = [
    "CargoMetadataGraph",
    "FeatureConfigBuilder",
    "FinderError",
    "GeigerReportError",
    "InteractiveTable",
    "OutputDispatcher",
    "OutputFormat",
    "PackageId",
    "ReportAggregator",
    "ReportRequest",
    "ResolutionError",
    "SafetyReport",
    "ScanConfig",
    "ScanCoordinator",
    "ScanSnapshot",
    "SerializationError",
    "StructuredReport",
    "Workspace",
    "suffixed_file_name",
    "to_json",
]
