"""Tests for ScanCoordinator — the collection phase."""

from __future__ import annotations

from pathlib import Path
from types import MappingProxyType

import pytest

from geiger_report.exceptions import FinderError, ResolutionError
from geiger_report.models.scan import ScanConfig, ScanMode
from geiger_report.scan import ScanCoordinator
from geiger_report.testing import StaticFinder, StaticResolver


class TestScanCoordinator:
    def test_collects_both_results(self, workspace, fm):
        resolver = StaticResolver(["/ws/src/lib.rs", "/ws/src/a.rs"])
        finder = StaticFinder({"/ws/src/lib.rs": fm(unsafe_fns=1)})
        config = ScanConfig(features=("x",))

        snapshot = ScanCoordinator(resolver, finder).collect(config, workspace)

        assert snapshot.compiled_files == {Path("/ws/src/lib.rs"), Path("/ws/src/a.rs")}
        assert set(snapshot.findings) == {Path("/ws/src/lib.rs")}
        assert resolver.calls == [(config, workspace)]

    def test_finder_always_full_mode(self, workspace):
        finder = StaticFinder()
        ScanCoordinator(StaticResolver(), finder).collect(ScanConfig(), workspace)
        assert finder.modes == [ScanMode.FULL]

    def test_relative_paths_resolved_against_workspace(self, workspace, fm):
        resolver = StaticResolver(["src/lib.rs"])
        finder = StaticFinder({"src/lib.rs": fm()})
        snapshot = ScanCoordinator(resolver, finder).collect(ScanConfig(), workspace)
        assert snapshot.compiled_files == {Path("/ws/src/lib.rs")}
        assert Path("/ws/src/lib.rs") in snapshot.findings

    def test_snapshot_is_read_only(self, workspace, fm):
        finder = StaticFinder({"/ws/src/lib.rs": fm()})
        snapshot = ScanCoordinator(StaticResolver(), finder).collect(ScanConfig(), workspace)
        assert isinstance(snapshot.findings, MappingProxyType)
        assert isinstance(snapshot.compiled_files, frozenset)
        with pytest.raises(TypeError):
            snapshot.findings[Path("/ws/x.rs")] = fm()  # type: ignore[index]

    def test_resolution_error_propagates_and_finder_not_called(self, workspace):
        finder = StaticFinder()
        resolver = StaticResolver(error=ResolutionError("unreadable metadata"))
        with pytest.raises(ResolutionError, match="unreadable metadata"):
            ScanCoordinator(resolver, finder).collect(ScanConfig(), workspace)
        assert finder.modes == []

    def test_unexpected_resolver_error_wrapped(self, workspace):
        resolver = StaticResolver(error=OSError("disk gone"))
        with pytest.raises(ResolutionError) as exc_info:
            ScanCoordinator(resolver, StaticFinder()).collect(ScanConfig(), workspace)
        assert isinstance(exc_info.value.__cause__, OSError)

    def test_finder_error_propagates(self, workspace):
        finder = StaticFinder(error=FinderError("parse failure"))
        with pytest.raises(FinderError, match="parse failure"):
            ScanCoordinator(StaticResolver(), finder).collect(ScanConfig(), workspace)

    def test_unexpected_finder_error_wrapped(self, workspace):
        finder = StaticFinder(error=ValueError("boom"))
        with pytest.raises(FinderError) as exc_info:
            ScanCoordinator(StaticResolver(), finder).collect(ScanConfig(), workspace)
        assert isinstance(exc_info.value.__cause__, ValueError)
