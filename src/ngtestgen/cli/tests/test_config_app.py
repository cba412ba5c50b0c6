"""Tests for the ngt config commands (show, path, init)."""

from pathlib import Path
from unittest.mock import MagicMock, Mock, patch

from ngtestgen.cli.config import config_app
from ngtestgen.config import Settings

CONFIG_PATH = "/home/user/.config/ngtestgen/ngtestgen.toml"


def _mock_config_file(exists: bool, content: str = "") -> MagicMock:
    mock_config_file = MagicMock(spec=Path)
    mock_config_file.exists.return_value = exists
    mock_config_file.read_text.return_value = content
    mock_config_file.__str__ = Mock(return_value=CONFIG_PATH)
    return mock_config_file


def test_config_show_with_existing_config_file(cli_runner):
    """Test config show prints the file content."""
    with patch("ngtestgen.cli.config.settings") as mock_settings:
        mock_settings.config_file = _mock_config_file(True, "target_coverage = 80\n")

        result = cli_runner.invoke(config_app, ["show"])

    assert result.exit_code == 0
    assert "ngtestgen Settings" in result.stdout
    assert CONFIG_PATH in result.stdout
    assert "target_coverage" in result.stdout


def test_config_show_when_config_file_not_found(cli_runner):
    """Test config show without a config file."""
    with patch("ngtestgen.cli.config.settings") as mock_settings:
        mock_settings.config_file = _mock_config_file(False)

        result = cli_runner.invoke(config_app, ["show"])

    assert result.exit_code == 0
    assert "Config file not found" in result.stdout


def test_config_show_displays_syntax_highlighting(cli_runner):
    """Test the TOML content is highlighted."""
    content = 'workspace_marker = "angular.json"\n'
    with patch("ngtestgen.cli.config.settings") as mock_settings:
        mock_settings.config_file = _mock_config_file(True, content)

        with patch("ngtestgen.cli.config.Syntax") as mock_syntax:
            mock_syntax.return_value = MagicMock()

            result = cli_runner.invoke(config_app, ["show"])

    assert result.exit_code == 0
    mock_syntax.assert_called_once_with(content, "toml", theme="monokai", line_numbers=True)


def test_config_path_outputs_plain_text(cli_runner):
    """Test config path prints only the path."""
    with patch("ngtestgen.cli.config.settings") as mock_settings:
        mock_settings.config_file = _mock_config_file(False)

        result = cli_runner.invoke(config_app, ["path"])

    assert result.exit_code == 0
    assert result.stdout.strip() == CONFIG_PATH


def test_config_init_writes_file(cli_runner, tmp_path):
    """Test config init creates the global config file."""
    fake = Settings(config_dir=tmp_path / "ngtestgen")

    with patch("ngtestgen.cli.config.settings", fake):
        result = cli_runner.invoke(config_app, ["init"])

    assert result.exit_code == 0
    assert "Wrote" in result.stdout
    assert "target_coverage = 80" in fake.config_file.read_text()


def test_config_init_refuses_to_overwrite(cli_runner, tmp_path):
    """Test an existing config file is kept without --force."""
    fake = Settings(config_dir=tmp_path)
    fake.config_file.write_text("# mine\n")

    with patch("ngtestgen.cli.config.settings", fake):
        result = cli_runner.invoke(config_app, ["init"])

    assert result.exit_code == 1
    assert "already exists" in result.stdout
    assert fake.config_file.read_text() == "# mine\n"


def test_config_init_force_overwrites(cli_runner, tmp_path):
    """Test --force replaces an existing config file."""
    fake = Settings(config_dir=tmp_path)
    fake.config_file.write_text("# mine\n")

    with patch("ngtestgen.cli.config.settings", fake):
        result = cli_runner.invoke(config_app, ["init", "--force"])

    assert result.exit_code == 0
    assert "workspace_marker" in fake.config_file.read_text()


def test_config_init_write_error(cli_runner):
    """Test write failures exit with 1."""
    with patch("ngtestgen.cli.config.settings") as mock_settings:
        mock_settings.config_file = _mock_config_file(False)
        mock_settings.save.side_effect = PermissionError("read-only")

        result = cli_runner.invoke(config_app, ["init"])

    assert result.exit_code == 1
    assert "Could not write config file" in result.stdout
