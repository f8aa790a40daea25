"""Tests for the geiger-report CLI — no cargo needed (pre-computed inputs)."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from geiger_report.cli import _output_mode, main
from geiger_report.dispatch import InteractiveTable, StructuredReport
from geiger_report.serde import OutputFormat

REGISTRY = "registry+https://github.com/rust-lang/crates.io-index"


@pytest.fixture
def project(tmp_path: Path) -> dict[str, Path]:
    """A crate `app` with one registry dependency and one metadata-less build dependency."""
    root = tmp_path / "app"
    (root / "src").mkdir(parents=True)
    (root / "Cargo.toml").write_text("[package]\nname = 'app'\nversion = '0.1.0'\n")
    libc_dir = tmp_path / "registry" / "libc"
    (libc_dir / "src").mkdir(parents=True)

    app_id = f"path+file://{root}#app@0.1.0"
    libc_id = f"{REGISTRY}#libc@0.2.150"
    cc_id = f"{REGISTRY}#cc@1.0.83"
    metadata = {
        "packages": [
            {"name": "app", "version": "0.1.0", "id": app_id, "source": None,
             "manifest_path": str(root / "Cargo.toml")},
            {"name": "libc", "version": "0.2.150", "id": libc_id, "source": REGISTRY,
             "manifest_path": str(libc_dir / "Cargo.toml")},
            {"name": "cc", "version": "1.0.83", "id": cc_id, "source": REGISTRY},
        ],
        "resolve": {
            "root": app_id,
            "nodes": [
                {"id": app_id, "deps": [
                    {"pkg": libc_id, "dep_kinds": [{"kind": None}]},
                    {"pkg": cc_id, "dep_kinds": [{"kind": "build"}]},
                ]},
                {"id": libc_id, "deps": []},
                {"id": cc_id, "deps": []},
            ],
        },
    }
    metadata_file = tmp_path / "metadata.json"
    metadata_file.write_text(json.dumps(metadata))

    findings_file = tmp_path / "findings.json"
    findings_file.write_text(
        json.dumps(
            {
                "files": {
                    "src/main.rs": {"is_crate_entry_point": True},
                    str(libc_dir / "src" / "lib.rs"): {
                        "counters": {"functions": {"safe": 1, "unsafe": 2}},
                        "is_crate_entry_point": True,
                        "declared_unsafe_functions": ["strlen", "malloc"],
                        "contains_unsafe_functions": ["wrapper"],
                    },
                    str(libc_dir / "src" / "windows.rs"): {
                        "counters": {"functions": {"unsafe": 40}},
                        "declared_unsafe_functions": ["CreateFileW"],
                    },
                }
            }
        )
    )

    target = tmp_path / "target"
    (target / "debug" / "deps").mkdir(parents=True)
    (target / "debug" / "deps" / "app-1.d").write_text(
        f"out: src/main.rs src/generated.rs {libc_dir / 'src' / 'lib.rs'}\n"
    )
    return {
        "root": root,
        "manifest": root / "Cargo.toml",
        "metadata": metadata_file,
        "findings": findings_file,
        "target": target,
        "libc_dir": libc_dir,
    }


def _args(project: dict[str, Path], *extra: str) -> list[str]:
    return [
        "scan",
        "--manifest-path", str(project["manifest"]),
        "--findings", str(project["findings"]),
        "--metadata-file", str(project["metadata"]),
        "--target-dir", str(project["target"]),
        "--no-build",
        *extra,
    ]


class TestOutputMode:
    def test_no_format_is_table(self):
        assert _output_mode(None) == InteractiveTable()

    def test_json_format(self):
        assert _output_mode("json") == StructuredReport(OutputFormat.JSON)


class TestScanJson:
    def test_report_document(self, project):
        result = CliRunner().invoke(main, _args(project, "--output-format", "json"))

        assert result.exit_code == 0, result.output
        doc = json.loads(result.stdout)
        assert sorted(doc["packages"]) == ["app 0.1.0", f"libc 0.2.150 ({REGISTRY})"]
        assert doc["packages_without_metrics"] == [{"name": "cc", "version": "1.0.83", "source": REGISTRY}]
        generated = str((project["root"] / "src" / "generated.rs").resolve())
        assert doc["used_but_not_scanned_files"] == [generated]

        libc = doc["packages"][f"libc 0.2.150 ({REGISTRY})"]["unsafety"]
        assert libc["used"]["functions"]["unsafe"] == 2
        assert libc["unused"]["functions"]["unsafe"] == 40
        assert [f["name"] for f in libc["declared_unsafe_functions"]] == ["strlen", "malloc"]

    def test_unsafe_fn_log(self, project, tmp_path: Path):
        log_path = tmp_path / "unsafe.log"
        result = CliRunner().invoke(
            main, _args(project, "--output-format", "json", "--unsafe-fn-log", str(log_path))
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "unsafe.declared.log").read_text() == "libc strlen\nlibc malloc\n"
        assert (tmp_path / "unsafe.contains.log").read_text() == "libc wrapper\n"

    def test_unsafe_fn_log_failure_after_output(self, project, tmp_path: Path):
        log_path = tmp_path / "missing-dir" / "unsafe.log"
        result = CliRunner().invoke(
            main, _args(project, "--output-format", "json", "--unsafe-fn-log", str(log_path))
        )

        assert result.exit_code == 1
        assert '"packages"' in result.output
        assert "Error:" in result.output

    def test_features_forwarded_to_metadata(self, project):
        with patch("geiger_report.cli.CargoMetadataGraph.load") as load:
            load.return_value.root = None
            result = CliRunner().invoke(
                main,
                [
                    "scan",
                    "--manifest-path", str(project["manifest"]),
                    "--findings", str(project["findings"]),
                    "--features", "a,b",
                    "--features", "c",
                    "--all-features",
                ],
            )
        assert result.exit_code == 1
        assert "no root package" in result.output
        config = load.call_args.args[1]
        assert config.features == ("a", "b", "c")
        assert config.all_features is True


class TestScanTable:
    def test_table_output(self, project):
        result = CliRunner().invoke(main, _args(project))

        assert result.exit_code == 0, result.output
        assert "Functions" in result.output
        assert "libc 0.2.150" in result.output
        assert not result.output.lstrip().startswith("{")


class TestScanErrors:
    def test_invalid_findings(self, project):
        project["findings"].write_text("{broken")
        result = CliRunner().invoke(main, _args(project, "--output-format", "json"))
        assert result.exit_code == 1
        assert "Invalid JSON" in result.output

    def test_no_build_requires_target_dir(self, project):
        args = [a for a in _args(project, "--output-format", "json")]
        i = args.index("--target-dir")
        del args[i:i + 2]
        result = CliRunner().invoke(main, args)
        assert result.exit_code == 1
        assert "--no-build needs --target-dir" in result.output

    def test_unknown_format_rejected(self, project):
        result = CliRunner().invoke(main, _args(project, "--output-format", "yaml"))
        assert result.exit_code != 0
