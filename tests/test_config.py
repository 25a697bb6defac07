from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from depprune.config import (
    DepPruneConfig,
    discover_config_file,
    load_config,
    _parse_section,
    _pyproject_has_depprune_section,
    _read_toml,
)
from depprune.exceptions import ConfigError


@pytest.mark.unit
class TestDepPruneConfig:
    """Tests for DepPruneConfig dataclass."""

    def test_default_initialization(self) -> None:
        """Test DepPruneConfig initializes with correct defaults."""
        config = DepPruneConfig()

        assert config.registry_paths == []
        assert config.used_packages is None
        assert config.create_backup is True
        assert config.source_path is None

    def test_to_log_dict(self) -> None:
        """Test to_log_dict returns plain values without metadata."""
        config = DepPruneConfig(
            registry_paths=[Path("plugins")],
            used_packages=Path("used.txt"),
            create_backup=False,
            source_path=Path("/test/path.toml"),
        )

        result = config.to_log_dict()

        assert result == {
            "registry_paths": ["plugins"],
            "used_packages": "used.txt",
            "create_backup": False,
        }
        assert "source_path" not in result

    def test_to_log_dict_without_used_packages(self) -> None:
        """Test to_log_dict reports a missing used-package file as None."""
        assert DepPruneConfig().to_log_dict()["used_packages"] is None


@pytest.mark.unit
class TestDiscoverConfigFile:
    """Tests for discover_config_file function."""

    def test_explicit_path_priority(self, tmp_path: Path) -> None:
        """Test explicit path is used even when depprune.toml exists."""
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[depprune]\n", encoding="utf-8")
        (tmp_path / "depprune.toml").write_text("[depprune]\n", encoding="utf-8")

        with patch("depprune.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file(config_file)

        assert result == config_file.resolve()

    def test_explicit_path_not_found_raises_error(self, tmp_path: Path) -> None:
        """Test ConfigError raised when explicit path doesn't exist."""
        with pytest.raises(ConfigError) as exc_info:
            discover_config_file(tmp_path / "nonexistent.toml")

        assert "not found" in str(exc_info.value).lower()

    def test_discovers_depprune_toml(self, tmp_path: Path) -> None:
        """Test discovers depprune.toml in current directory."""
        config_file = tmp_path / "depprune.toml"
        config_file.write_text("[depprune]\n", encoding="utf-8")

        with patch("depprune.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == config_file

    def test_discovers_pyproject_toml_with_section(self, tmp_path: Path) -> None:
        """Test discovers pyproject.toml with [tool.depprune] section."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text(
            "[tool.depprune]\ncreate_backup = false\n",
            encoding="utf-8",
        )

        with patch("depprune.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == config_file

    def test_ignores_pyproject_toml_without_section(self, tmp_path: Path) -> None:
        """Test ignores pyproject.toml without [tool.depprune] section."""
        (tmp_path / "pyproject.toml").write_text(
            "[tool.other]\nkey = 'value'\n", encoding="utf-8"
        )

        with patch("depprune.config.Path.cwd", return_value=tmp_path):
            assert discover_config_file() is None

    def test_precedence_order(self, tmp_path: Path) -> None:
        """Test depprune.toml wins over pyproject.toml."""
        depprune_toml = tmp_path / "depprune.toml"
        depprune_toml.write_text("[depprune]\n", encoding="utf-8")
        (tmp_path / "pyproject.toml").write_text("[tool.depprune]\n", encoding="utf-8")

        with patch("depprune.config.Path.cwd", return_value=tmp_path):
            result = discover_config_file()

        assert result == depprune_toml


@pytest.mark.unit
class TestPyprojectHasDepPruneSection:
    """Tests for _pyproject_has_depprune_section helper."""

    def test_returns_true_when_section_exists(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("[tool.depprune]\n", encoding="utf-8")

        assert _pyproject_has_depprune_section(config_file) is True

    def test_returns_false_on_errors(self, tmp_path: Path) -> None:
        """Test parse errors and missing files count as no section."""
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text("invalid ][[", encoding="utf-8")

        assert _pyproject_has_depprune_section(config_file) is False
        assert _pyproject_has_depprune_section(tmp_path / "missing.toml") is False


@pytest.mark.unit
class TestReadToml:
    """Tests for _read_toml helper."""

    def test_reads_valid_toml(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "test.toml"
        toml_file.write_text("[depprune]\ncreate_backup = true\n", encoding="utf-8")

        assert _read_toml(toml_file) == {"depprune": {"create_backup": True}}

    def test_raises_error_on_invalid_toml(self, tmp_path: Path) -> None:
        toml_file = tmp_path / "invalid.toml"
        toml_file.write_text("invalid ][[ toml", encoding="utf-8")

        with pytest.raises(ConfigError) as exc_info:
            _read_toml(toml_file)

        assert "Invalid TOML" in str(exc_info.value)

    def test_raises_error_when_file_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _read_toml(tmp_path / "nonexistent.toml")

        assert "Cannot read" in str(exc_info.value)


@pytest.mark.unit
class TestParseSection:
    """Tests for _parse_section configuration validator."""

    def test_parses_empty_section(self, tmp_path: Path) -> None:
        """Test parsing empty section returns defaults."""
        result = _parse_section({}, config_path="test.toml", base_dir=tmp_path)

        assert result.registry_paths == []
        assert result.used_packages is None
        assert result.create_backup is True

    def test_resolves_paths_against_config_directory(self, tmp_path: Path) -> None:
        """Test relative paths are anchored at the config file's directory."""
        section = {
            "registry_paths": ["plugins", "target/platform"],
            "used_packages": "build/used.json",
            "create_backup": False,
        }

        result = _parse_section(section, config_path="test.toml", base_dir=tmp_path)

        assert result.registry_paths == [
            tmp_path / "plugins",
            tmp_path / "target" / "platform",
        ]
        assert result.used_packages == tmp_path / "build" / "used.json"
        assert result.create_backup is False

    def test_raises_error_on_unknown_keys(self, tmp_path: Path) -> None:
        section = {"check_conflicts": True, "another_unknown": 1}

        with pytest.raises(ConfigError) as exc_info:
            _parse_section(section, config_path="test.toml", base_dir=tmp_path)

        assert "Unknown configuration keys" in str(exc_info.value)
        assert "another_unknown, check_conflicts" in str(exc_info.value)

    @pytest.mark.parametrize(
        "key, value, message",
        [
            ("registry_paths", "plugins", "registry_paths must be a list of strings"),
            ("registry_paths", ["plugins", 3], "registry_paths must be a list of strings"),
            ("used_packages", ["a.txt"], "used_packages must be a string"),
            ("create_backup", "true", "create_backup must be a boolean"),
        ],
        ids=["paths-not-list", "paths-mixed", "used-not-str", "backup-not-bool"],
    )
    def test_raises_error_on_wrong_type(
        self, tmp_path: Path, key: str, value: object, message: str
    ) -> None:
        with pytest.raises(ConfigError) as exc_info:
            _parse_section({key: value}, config_path="test.toml", base_dir=tmp_path)

        assert message in str(exc_info.value)
        assert exc_info.value.option == key


@pytest.mark.unit
class TestLoadConfig:
    """Tests for load_config main function."""

    def test_returns_defaults_when_no_config_found(self, tmp_path: Path) -> None:
        with patch("depprune.config.Path.cwd", return_value=tmp_path):
            result = load_config()

        assert result == DepPruneConfig()
        assert result.source_path is None

    def test_loads_depprune_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "depprune.toml"
        config_file.write_text(
            '[depprune]\nregistry_paths = ["plugins"]\ncreate_backup = false\n',
            encoding="utf-8",
        )

        with patch("depprune.config.Path.cwd", return_value=tmp_path):
            result = load_config()

        assert result.registry_paths == [tmp_path / "plugins"]
        assert result.create_backup is False
        assert result.source_path == config_file

    def test_loads_pyproject_toml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "pyproject.toml"
        config_file.write_text(
            '[tool.depprune]\nused_packages = "used.txt"\n',
            encoding="utf-8",
        )

        with patch("depprune.config.Path.cwd", return_value=tmp_path):
            result = load_config()

        assert result.used_packages == tmp_path / "used.txt"
        assert result.source_path == config_file

    def test_loads_explicit_config_path(self, tmp_path: Path) -> None:
        config_file = tmp_path / "custom.toml"
        config_file.write_text("[depprune]\ncreate_backup = false\n", encoding="utf-8")

        result = load_config(config_file)

        assert result.create_backup is False
        assert result.source_path == config_file.resolve()

    def test_raises_error_on_unknown_keys(self, tmp_path: Path) -> None:
        (tmp_path / "depprune.toml").write_text(
            "[depprune]\nunknown_option = true\n", encoding="utf-8"
        )

        with patch("depprune.config.Path.cwd", return_value=tmp_path):
            with pytest.raises(ConfigError) as exc_info:
                load_config()

        assert "Unknown configuration keys" in str(exc_info.value)

    def test_handles_empty_depprune_section(self, tmp_path: Path) -> None:
        config_file = tmp_path / "depprune.toml"
        config_file.write_text("[depprune]\n", encoding="utf-8")

        with patch("depprune.config.Path.cwd", return_value=tmp_path):
            result = load_config()

        assert result.create_backup is True
        assert result.source_path == config_file
