"""Tests for the ngt CLI application.

Covers the main callback (--version, --verbose), workspace and path
resolution, and the generate command: per-file status lines, the summary
block, exit codes and error reporting. anyio.run is mocked for most tests so
no files are generated; one test runs the real pipeline on a temporary
workspace.
"""

import logging
from pathlib import Path
from unittest.mock import ANY, patch

import pytest
import typer

from ngtestgen import __version__
from ngtestgen.cli.cli import app, main, resolve_path, version_callback
from ngtestgen.exceptions import SourcePathNotFoundError, WorkspaceNotFoundError
from ngtestgen.models import GenerationOutcome, GenerationResult, GenerationStatus
from ngtestgen.pipeline import run


def _result(root: Path, *outcomes: GenerationOutcome) -> GenerationResult:
    return GenerationResult(root=root, files_found=len(outcomes), outcomes=list(outcomes))


# --- Callback tests ---


def test_version_callback_prints_version_and_exits():
    """Test version callback prints version and raises Exit."""
    with patch("ngtestgen.cli.cli.console") as mock_console:
        with pytest.raises(typer.Exit):
            version_callback(True)

        mock_console.print.assert_called_once_with(f"ngtestgen {__version__}")


def test_version_callback_does_nothing_when_false():
    """Test version callback does nothing when value is False."""
    with patch("ngtestgen.cli.cli.console") as mock_console:
        version_callback(False)
        mock_console.print.assert_not_called()


def test_version_option(cli_runner):
    """Test --version on the command line."""
    result = cli_runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"ngtestgen {__version__}" in result.output


def test_main_callback_verbose_flag():
    """Test --verbose switches logging to DEBUG."""
    with patch("ngtestgen.cli.cli.logging.basicConfig") as mock_config:
        main(verbose=True, version=None)

        assert mock_config.call_args.kwargs["level"] == logging.DEBUG


def test_main_callback_non_verbose():
    """Test logging defaults to INFO."""
    with patch("ngtestgen.cli.cli.logging.basicConfig") as mock_config:
        main(verbose=False, version=None)

        assert mock_config.call_args.kwargs["level"] == logging.INFO


# --- resolve_path tests ---


def test_resolve_path_inside_workspace(tmp_path):
    """Test an explicit path keeps its own scan root and finds the workspace."""
    (tmp_path / "angular.json").write_text("{}")
    app_dir = tmp_path / "src" / "app"
    app_dir.mkdir(parents=True)

    assert resolve_path(app_dir) == (app_dir.resolve(), tmp_path.resolve())


def test_resolve_path_without_workspace_marker(tmp_path):
    """Test an explicit path outside any workspace is its own root."""
    with patch("ngtestgen.cli.cli.find_workspace_root", side_effect=WorkspaceNotFoundError()):
        assert resolve_path(tmp_path) == (tmp_path.resolve(), tmp_path.resolve())


def test_resolve_path_detects_workspace(tmp_path):
    """Test the workspace is searched from the current directory."""
    with patch("ngtestgen.cli.cli.find_workspace_root", return_value=tmp_path) as mock_find:
        with patch("ngtestgen.cli.cli.console") as mock_console:
            assert resolve_path(None) == (tmp_path, tmp_path)

    mock_find.assert_called_once_with(Path.cwd())
    assert "Detected Angular workspace at:" in mock_console.print.call_args.args[0]


# --- generate tests ---


def test_generate_success(cli_runner, tmp_path):
    """Test status lines and summary of a successful run."""
    result = _result(
        tmp_path,
        GenerationOutcome(
            source=tmp_path / "a.service.ts",
            status=GenerationStatus.GENERATED,
            output=tmp_path / "a.service.spec.ts",
        ),
        GenerationOutcome(
            source=tmp_path / "user.model.ts",
            status=GenerationStatus.SKIPPED,
            message="interface/type only",
        ),
    )

    with patch("ngtestgen.cli.cli.anyio.run", return_value=result):
        cli_result = cli_runner.invoke(app, ["generate", "--path", str(tmp_path)])

    assert cli_result.exit_code == 0
    assert "Found 2 TypeScript file(s) to process." in cli_result.output
    assert "✓ Generated: a.service.spec.ts" in cli_result.output
    assert "- Skipped: user.model.ts (interface/type only)" in cli_result.output
    assert "Test generation complete:" in cli_result.output
    assert "Success: 1" in cli_result.output
    assert "Skipped: 1" in cli_result.output
    assert "Failed: 0" in cli_result.output
    assert "Total: 2" in cli_result.output


def test_generate_passes_roots_to_pipeline(cli_runner, tmp_path):
    """Test the scan root and the workspace root reach the pipeline."""
    with patch("ngtestgen.cli.cli.find_workspace_root", return_value=tmp_path):
        with patch("ngtestgen.cli.cli.anyio.run", return_value=_result(tmp_path)) as mock_run:
            cli_runner.invoke(app, ["generate"])

    mock_run.assert_called_once_with(run, tmp_path, ANY, tmp_path)


def test_generate_with_failures_exits_nonzero(cli_runner, tmp_path):
    """Test any failed file makes the command exit with 1."""
    result = _result(
        tmp_path,
        GenerationOutcome(
            source=tmp_path / "x.pipe.ts", status=GenerationStatus.FAILED, message="boom"
        ),
    )

    with patch("ngtestgen.cli.cli.anyio.run", return_value=result):
        cli_result = cli_runner.invoke(app, ["generate", "-p", str(tmp_path)])

    assert cli_result.exit_code == 1
    assert "✗ Failed: x.pipe.ts - boom" in cli_result.output
    assert "Failed: 1" in cli_result.output


def test_generate_no_files(cli_runner, tmp_path):
    """Test an empty scan prints a notice and exits cleanly."""
    with patch("ngtestgen.cli.cli.anyio.run", return_value=_result(tmp_path)):
        cli_result = cli_runner.invoke(app, ["generate", "--path", str(tmp_path)])

    assert cli_result.exit_code == 0
    assert "No TypeScript files found in:" in cli_result.output
    assert "Test generation complete" not in cli_result.output


def test_generate_without_workspace(cli_runner):
    """Test guidance is printed when no workspace can be found."""
    with patch(
        "ngtestgen.cli.cli.find_workspace_root",
        side_effect=WorkspaceNotFoundError("No angular.json found"),
    ):
        cli_result = cli_runner.invoke(app, ["generate"])

    assert cli_result.exit_code == 1
    assert "Not in an Angular workspace" in cli_result.output
    assert "Usage: ngt generate --path <path-to-angular-app>" in cli_result.output


def test_generate_missing_path(cli_runner, tmp_path):
    """Test a missing directory is reported."""
    with patch(
        "ngtestgen.cli.cli.anyio.run", side_effect=SourcePathNotFoundError("Source path not found")
    ):
        cli_result = cli_runner.invoke(app, ["generate", "--path", str(tmp_path / "missing")])

    assert cli_result.exit_code == 1
    assert "Path does not exist" in cli_result.output


def test_generate_unexpected_error(cli_runner, tmp_path):
    """Test unexpected errors are reported with exit code 1."""
    with patch("ngtestgen.cli.cli.anyio.run", side_effect=ValueError("Unexpected")):
        cli_result = cli_runner.invoke(app, ["generate", "--path", str(tmp_path)])

    assert cli_result.exit_code == 1
    assert "Unexpected error: Unexpected" in cli_result.output


def test_generate_end_to_end(cli_runner, tmp_path):
    """Test the real pipeline writes a spec beside the source file."""
    (tmp_path / "angular.json").write_text("{}")
    app_dir = tmp_path / "src" / "app"
    app_dir.mkdir(parents=True)
    (app_dir / "title.pipe.ts").write_text(
        "@Pipe({ name: 'title', standalone: true })\n"
        "export class TitlePipe {\n"
        "  transform(value: string): string {\n"
        "    return value;\n"
        "  }\n"
        "}\n"
    )

    cli_result = cli_runner.invoke(app, ["generate", "--path", str(app_dir)])

    assert cli_result.exit_code == 0
    assert "✓ Generated: title.pipe.spec.ts" in cli_result.output
    assert "pipe.transform('test')" in (app_dir / "title.pipe.spec.ts").read_text()
