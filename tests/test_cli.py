"""Tests for CLI."""

import subprocess
from pathlib import Path


def run_cli(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        ["python", "-m", "direction_pipeline.cli", *args],
        capture_output=True,
        text=True,
    )


def test_cli_split_basic(gtfs_loop: Path, registry_loop: Path, tmp_path: Path) -> None:
    """Test CLI split command."""
    output = tmp_path / "output"

    result = run_cli(
        "split",
        "--input",
        str(gtfs_loop),
        "--output",
        str(output),
        "--registry",
        str(registry_loop),
    )

    assert result.returncode == 0
    assert "Direction split successful" in result.stdout
    assert (output / "trips.json").exists()
    assert (output / "manifest.json").exists()


def test_cli_split_strict_failure(
    gtfs_failing: Path, registry_loop: Path, tmp_path: Path
) -> None:
    """Test CLI exits non-zero and lists failures in strict mode."""
    output = tmp_path / "output"

    result = run_cli(
        "split",
        "--input",
        str(gtfs_failing),
        "--output",
        str(output),
        "--registry",
        str(registry_loop),
    )

    assert result.returncode == 1
    assert "failed with 2 failures" in result.stderr
    assert "trip T9" in result.stderr
    assert "'Unknown Loop'" in result.stderr
    assert not (output / "trips.json").exists()


def test_cli_split_permissive(gtfs_failing: Path, registry_loop: Path, tmp_path: Path) -> None:
    """Test CLI permissive mode succeeds despite failures."""
    output = tmp_path / "output"

    result = run_cli(
        "split",
        "--input",
        str(gtfs_failing),
        "--output",
        str(output),
        "--registry",
        str(registry_loop),
        "--mode",
        "permissive",
    )

    assert result.returncode == 0
    assert (output / "trips.json").exists()


def test_cli_split_invalid_registry(
    gtfs_loop: Path, registry_invalid: Path, tmp_path: Path
) -> None:
    """Test CLI reports configuration errors."""
    result = run_cli(
        "split",
        "--input",
        str(gtfs_loop),
        "--output",
        str(tmp_path / "output"),
        "--registry",
        str(registry_invalid),
    )

    assert result.returncode == 1
    assert "Configuration error" in result.stderr


def test_cli_check_registry(registry_loop: Path) -> None:
    """Test CLI check-registry command."""
    result = run_cli("check-registry", "--registry", str(registry_loop))

    assert result.returncode == 0
    assert "Registry is valid" in result.stdout
    assert "Route R2 has no shared stop" in result.stdout


def test_cli_check_registry_invalid(registry_invalid: Path) -> None:
    """Test CLI check-registry fails on an invalid registry."""
    result = run_cli("check-registry", "--registry", str(registry_invalid))

    assert result.returncode == 1
    assert "Registry check failed" in result.stdout


def test_cli_version() -> None:
    """Test CLI version flag."""
    result = run_cli("--version")

    assert result.returncode == 0
    assert "0.1.0" in result.stdout


def test_cli_help() -> None:
    """Test CLI help."""
    result = run_cli("--help")

    assert result.returncode == 0
    assert "split" in result.stdout
    assert "check-registry" in result.stdout


def test_cli_no_command() -> None:
    """Test CLI without a command prints help and fails."""
    result = run_cli()

    assert result.returncode == 1
    assert "usage" in result.stdout
