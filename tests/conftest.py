"""Shared pytest fixtures for geiger-report tests."""

from pathlib import Path

import pytest

from geiger_report.models.metrics import Count, CounterBlock, FileMetrics
from geiger_report.models.scan import Workspace


def file_metrics(
    unsafe_fns: int = 0,
    unsafe_exprs: int = 0,
    declared: list[str] | None = None,
    contains: list[str] | None = None,
    entry_point: bool = False,
    forbids: bool = False,
) -> FileMetrics:
    return FileMetrics(
        counters=CounterBlock(
            functions=Count(safe=1, unsafe=unsafe_fns),
            exprs=Count(safe=2, unsafe=unsafe_exprs),
        ),
        forbids_unsafe=forbids,
        is_crate_entry_point=entry_point,
        declared_unsafe_functions=declared or [],
        contains_unsafe_functions=contains or [],
    )


@pytest.fixture
def workspace():
    return Workspace(root=Path("/ws"), manifest_path=Path("/ws/Cargo.toml"))


@pytest.fixture
def fm():
    return file_metrics
