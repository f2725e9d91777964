"""Unit tests for the command-line interface."""

from __future__ import annotations

from pathlib import Path

import pytest

from hvmemcalc.cli import main


def _run(capsys: pytest.CaptureFixture[str], *argv: str) -> tuple[str, str]:
    main(list(argv))
    captured = capsys.readouterr()
    return captured.out, captured.err


def _run_failing(capsys: pytest.CaptureFixture[str], *argv: str) -> tuple[int, str, str]:
    with pytest.raises(SystemExit) as exc_info:
        main(list(argv))
    captured = capsys.readouterr()
    return exc_info.value.code, captured.out, captured.err


class TestForward:
    def test_default_auto(self, capsys: pytest.CaptureFixture[str]) -> None:
        out, _ = _run(capsys, "4Gi")
        assert out.startswith("FORWARD CALCULATION: VM Size -> Reserved Memory\n")
        assert "Method:          ratio-based" in out
        assert 'harvesterhci.io/reservedMemory: "128849018"' in out

    def test_legacy_method(self, capsys: pytest.CaptureFixture[str]) -> None:
        out, _ = _run(capsys, "8GB", "--method", "legacy")
        assert "Reserved:        100.00 Mi" in out
        assert "Method:          legacy (100MiB fixed)" in out

    def test_annotation_only(self, capsys: pytest.CaptureFixture[str]) -> None:
        out, _ = _run(capsys, "16G", "--annotation")
        assert out == 'harvesterhci.io/reservedMemory: "858993459"\n'

    def test_verbose(self, capsys: pytest.CaptureFixture[str]) -> None:
        out, _ = _run(capsys, "512Mi", "--verbose")
        assert "VM Memory Bytes: 536,870,912" in out
        assert "Alternative Methods:" in out


class TestReverse:
    def test_guest(self, capsys: pytest.CaptureFixture[str]) -> None:
        out, _ = _run(capsys, "--guest", "24Gi")
        assert out.startswith("REVERSE CALCULATION: Desired Guest Memory -> VM Size\n")
        assert "Required VM:     25.49 Gi" in out

    def test_guest_annotation(self, capsys: pytest.CaptureFixture[str]) -> None:
        out, _ = _run(capsys, "--guest", "8GB", "--method", "legacy", "--annotation")
        assert out == 'harvesterhci.io/reservedMemory: "104857600"\n'


class TestListCommon:
    def test_lists_default_sizes(self, capsys: pytest.CaptureFixture[str]) -> None:
        out, _ = _run(capsys, "--list-common")
        lines = out.splitlines()
        assert lines[0] == "Common VM Sizes Calculation:"
        labels = [line.split()[0] for line in lines[2:]]
        assert labels == ["1Gi", "2Gi", "4Gi", "8Gi", "16Gi", "32Gi"]

    def test_sizes_from_config(
        self, capsys: pytest.CaptureFixture[str], write_toml
    ) -> None:
        path = write_toml(
            """\
            [output]
            common_sizes = ["3Gi", "64Gi"]
            """
        )
        out, _ = _run(capsys, "--list-common", "--config", str(path))
        assert len(out.splitlines()) == 4
        assert "  64Gi  -> Reserved:" in out


class TestErrors:
    @pytest.mark.parametrize("size", ["4 Gi", "4XY"])
    def test_parse_error_no_output(self, capsys: pytest.CaptureFixture[str], size: str) -> None:
        code, out, err = _run_failing(capsys, size)
        assert code == 1
        assert out == ""
        assert err.startswith("Error: ")

    @pytest.mark.parametrize("size", ["1" + "0" * 62, "1" + "0" * 50 + "Ti"])
    def test_oversized_size(self, capsys: pytest.CaptureFixture[str], size: str) -> None:
        code, out, err = _run_failing(capsys, size)
        assert code == 1
        assert out == ""
        assert "Size too large" in err

    def test_oversized_guest(self, capsys: pytest.CaptureFixture[str]) -> None:
        code, out, err = _run_failing(capsys, "--guest", "1" + "0" * 50 + "Ti")
        assert code == 1
        assert out == ""
        assert "Size too large" in err

    def test_invalid_method(self, capsys: pytest.CaptureFixture[str]) -> None:
        code, out, err = _run_failing(capsys, "4Gi", "--method", "fixed")
        assert code == 1
        assert out == ""
        assert "Invalid method" in err

    def test_guest_below_minimum(self, capsys: pytest.CaptureFixture[str]) -> None:
        code, out, err = _run_failing(capsys, "64Mi", "--method", "legacy")
        assert code == 1
        assert out == ""
        assert "below the minimum" in err

    def test_unknown_flag(self, capsys: pytest.CaptureFixture[str]) -> None:
        code, out, _ = _run_failing(capsys, "4Gi", "--bogus")
        assert code == 2
        assert out == ""

    def test_multiple_positional_sizes(self, capsys: pytest.CaptureFixture[str]) -> None:
        code, _, _ = _run_failing(capsys, "4Gi", "8Gi")
        assert code != 0

    def test_positional_and_guest(self, capsys: pytest.CaptureFixture[str]) -> None:
        code, _, err = _run_failing(capsys, "4Gi", "--guest", "8Gi")
        assert code != 0
        assert "Multiple memory sizes" in err

    def test_no_size(self, capsys: pytest.CaptureFixture[str]) -> None:
        code, _, err = _run_failing(capsys)
        assert code != 0
        assert "No memory size" in err

    def test_bad_config(self, capsys: pytest.CaptureFixture[str], tmp_path: Path) -> None:
        code, out, err = _run_failing(capsys, "4Gi", "--config", str(tmp_path / "missing.toml"))
        assert code == 1
        assert out == ""
        assert "Cannot read config file" in err


class TestHelpAndVersion:
    def test_help(self, capsys: pytest.CaptureFixture[str]) -> None:
        code, out, _ = _run_failing(capsys, "--help")
        assert code == 0
        for flag in ("--guest", "--method", "--annotation", "--verbose", "--list-common"):
            assert flag in out

    def test_version(self, capsys: pytest.CaptureFixture[str]) -> None:
        from hvmemcalc import __version__

        code, out, _ = _run_failing(capsys, "--version")
        assert code == 0
        assert __version__ in out


class TestConfigDefaults:
    def test_default_method_from_config(
        self, capsys: pytest.CaptureFixture[str], write_toml
    ) -> None:
        path = write_toml(
            """\
            [defaults]
            method = "legacy"
            """
        )
        out, _ = _run(capsys, "16Gi", "--annotation", "--config", str(path))
        assert out == 'harvesterhci.io/reservedMemory: "104857600"\n'

    def test_flag_overrides_config(
        self, capsys: pytest.CaptureFixture[str], write_toml
    ) -> None:
        path = write_toml(
            """\
            [defaults]
            method = "legacy"
            """
        )
        out, _ = _run(capsys, "16Gi", "--annotation", "--method", "ratio", "--config", str(path))
        assert out == 'harvesterhci.io/reservedMemory: "858993459"\n'

    def test_verbose_from_config(
        self, capsys: pytest.CaptureFixture[str], write_toml
    ) -> None:
        path = write_toml(
            """\
            [defaults]
            verbose = true

            [output]
            annotation_key = "example.io/reserved"
            """
        )
        out, _ = _run(capsys, "4Gi", "--config", str(path))
        assert "Detailed Information:" in out
        assert 'example.io/reserved: "128849018"' in out
