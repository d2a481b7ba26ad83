"""Tests for configuration loading."""

import stat
from pathlib import Path

import pytest

from budgetplan.api import DEFAULT_API_URL
from budgetplan.config import (
    create_default_config,
    get_config_path,
    get_settings,
    load_config,
    save_config,
)


class TestConfigPath:
    """Tests for get_config_path."""

    def test_xdg_config_home(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Should live under XDG_CONFIG_HOME when set."""
        monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
        assert get_config_path() == tmp_path / "budgetplan" / "config.toml"


class TestDefaultConfig:
    """Tests for create_default_config."""

    def test_defaults_written(self, tmp_path: Path) -> None:
        """Should write the API URL and owner-only permissions."""
        path = tmp_path / "nested" / "config.toml"
        create_default_config(path)

        config = load_config(path)
        assert config["api_url"] == DEFAULT_API_URL
        assert config["strict_amounts"] is False
        assert stat.S_IMODE(path.stat().st_mode) == 0o600


class TestGetSettings:
    """Tests for get_settings."""

    def test_missing_file_uses_defaults(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Should fall back to defaults without a config file."""
        monkeypatch.delenv("BUDGETPLAN_TOKEN", raising=False)
        settings = get_settings(tmp_path / "missing.toml")

        assert settings.api_url == DEFAULT_API_URL
        assert settings.token is None
        assert settings.strict_amounts is False
        assert settings.export_dir is None

    def test_file_values(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Should read every key from the file."""
        monkeypatch.delenv("BUDGETPLAN_TOKEN", raising=False)
        path = tmp_path / "config.toml"
        save_config(
            {
                "api_url": "https://parques.example/api",
                "token": "from-file",
                "strict_amounts": True,
                "log_level": "INFO",
                "export_dir": str(tmp_path / "exports"),
            },
            path,
        )

        settings = get_settings(path)

        assert settings.api_url == "https://parques.example/api"
        assert settings.token == "from-file"
        assert settings.strict_amounts is True
        assert settings.log_level == "INFO"
        assert settings.export_dir == tmp_path / "exports"

    def test_env_token_wins(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Should prefer the environment token over the file."""
        path = tmp_path / "config.toml"
        save_config({"token": "from-file"}, path)
        monkeypatch.setenv("BUDGETPLAN_TOKEN", "from-env")

        assert get_settings(path).token == "from-env"

    @pytest.mark.parametrize("value", ["false", 1])
    def test_strict_amounts_must_be_boolean(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path, value: object
    ) -> None:
        """Should reject a strict_amounts value that is not a TOML boolean."""
        monkeypatch.delenv("BUDGETPLAN_TOKEN", raising=False)
        path = tmp_path / "config.toml"
        save_config({"strict_amounts": value}, path)

        with pytest.raises(ValueError, match="strict_amounts"):
            get_settings(path)
