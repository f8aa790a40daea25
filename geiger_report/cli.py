"""CLI entry point: geiger-report.

Usage:
    geiger-report scan --findings findings.json --output-format json
    geiger-report scan --findings findings.json --features foo,bar --unsafe-fn-log unsafe.log
    geiger-report scan --findings findings.json                    # table output
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import click

from geiger_report.backends.dep_info import DepInfoResolver
from geiger_report.backends.findings import JsonFindingsFinder
from geiger_report.backends.table import TreeTableRenderer
from geiger_report.core.logging import setup_logging
from geiger_report.dispatch import (
    InteractiveTable,
    OutputDispatcher,
    OutputMode,
    ReportRequest,
    StructuredReport,
)
from geiger_report.exceptions import GeigerReportError
from geiger_report.features import FeatureConfigBuilder, split_features
from geiger_report.graph import CargoMetadataGraph
from geiger_report.models.scan import Workspace
from geiger_report.scan import ScanCoordinator
from geiger_report.serde import OutputFormat

# Default cargo binary (overridable via env var)
_DEFAULT_CARGO = os.environ.get("CARGO", "cargo")


def _output_mode(output_format: str | None) -> OutputMode:
    """Fix the output mode before any work begins."""
    if output_format is None:
        return InteractiveTable()
    return StructuredReport(OutputFormat(output_format))


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Verbose logging")
@click.option(
    "--log-format",
    type=click.Choice(["console", "json"]),
    default=None,
    help="Log renderer (stderr)",
)
def main(verbose: bool, log_format: str | None) -> None:
    """geiger-report: unsafe-code usage report for a Cargo dependency graph."""
    setup_logging(level="DEBUG" if verbose else None, fmt=log_format)


@main.command("scan")
@click.option(
    "--manifest-path",
    default="Cargo.toml",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to the workspace Cargo.toml",
)
@click.option("--target-dir", default=None, type=click.Path(file_okay=False), help="Cargo target directory")
@click.option("--features", "features", multiple=True, help="Features to activate (comma or space separated)")
@click.option("--all-features", is_flag=True, help="Activate all available features")
@click.option("--no-default-features", is_flag=True, help="Do not activate the default feature")
@click.option(
    "--findings",
    required=True,
    type=click.Path(exists=True, dir_okay=False),
    help="Unsafe-usage findings JSON produced by the detector",
)
@click.option(
    "--metadata-file",
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help="Pre-computed `cargo metadata --format-version 1` output",
)
@click.option("--no-build", is_flag=True, help="Read existing dep-info files instead of running cargo check")
@click.option(
    "--output-format",
    type=click.Choice([f.value for f in OutputFormat]),
    default=None,
    help="Print a structured report instead of the table",
)
@click.option(
    "--unsafe-fn-log",
    default=None,
    type=click.Path(dir_okay=False),
    help="Write <name>.declared<.ext> and <name>.contains<.ext> function lists",
)
@click.option("--cargo", default=_DEFAULT_CARGO, help="cargo executable")
def scan(
    manifest_path: str,
    target_dir: str | None,
    features: tuple[str, ...],
    all_features: bool,
    no_default_features: bool,
    findings: str,
    metadata_file: str | None,
    no_build: bool,
    output_format: str | None,
    unsafe_fn_log: str | None,
    cargo: str,
) -> None:
    """Scan the workspace and report unsafe usage per dependency."""
    mode = _output_mode(output_format)
    config = FeatureConfigBuilder.build(split_features(features), all_features, no_default_features)
    workspace = Workspace.from_manifest(manifest_path, target_dir)

    if no_build and workspace.target_dir is None:
        click.echo("Error: --no-build needs --target-dir", err=True)
        sys.exit(1)

    try:
        if metadata_file:
            graph = CargoMetadataGraph.from_file(metadata_file)
        else:
            graph = CargoMetadataGraph.load(workspace, config, cargo=cargo)
        if graph.root is None:
            click.echo(
                "Error: virtual workspace has no root package; "
                "point --manifest-path at a member crate",
                err=True,
            )
            sys.exit(1)

        finder = JsonFindingsFinder(findings)
        dispatcher = OutputDispatcher(
            coordinator=ScanCoordinator(DepInfoResolver(cargo=cargo, run_cargo=not no_build), finder),
            renderer=TreeTableRenderer(finder),
        )
        dispatcher.dispatch(
            ReportRequest(
                mode=mode,
                config=config,
                workspace=workspace,
                graph=graph,
                root_package_id=graph.root,
                unsafe_fn_log=Path(unsafe_fn_log) if unsafe_fn_log else None,
            )
        )
    except (GeigerReportError, OSError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
