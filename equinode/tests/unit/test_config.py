"""
Unit tests for provisioner settings loading.
"""

import pytest

from equinode.commands.config import (
    PortWindow,
    ProvisionerSettings,
    find_config_file,
    load_settings,
)
from equinode.commands.errors import ConfigurationError


def write_config(path, body):
    path.write_text(body, encoding="utf-8")
    return path


class TestLoadSettings:
    """Tests for load_settings."""

    def test_defaults_without_file(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("EQUINODE_CONFIG", raising=False)
        settings = load_settings()
        assert settings == ProvisionerSettings()
        assert settings.port_window() == PortWindow(min=18081, max=18200)
        assert settings.log_level == 3
        assert settings.data_layout == "per-node"

    def test_reads_equinode_table(self, tmp_path):
        config = write_config(
            tmp_path / "custom.toml",
            "[equinode]\n"
            "min_port = 20000\n"
            "max_port = 20100\n"
            "log_level = 1\n"
            'data_layout = "shared"\n',
        )
        settings = load_settings(config)
        assert settings.port_window() == PortWindow(min=20000, max=20100)
        assert settings.log_level == 1
        assert settings.data_layout == "shared"
        assert settings.image == ProvisionerSettings().image

    def test_default_file_in_cwd_is_used(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        monkeypatch.delenv("EQUINODE_CONFIG", raising=False)
        write_config(tmp_path / "equinode.toml", '[equinode]\nname_prefix = "Eq"\n')
        assert load_settings().name_prefix == "Eq"

    def test_env_var_points_to_file(self, tmp_path, monkeypatch):
        config = write_config(tmp_path / "env.toml", "[equinode]\nmax_port = 18300\n")
        monkeypatch.setenv("EQUINODE_CONFIG", str(config))
        assert find_config_file() == config
        assert load_settings().max_port == 18300

    def test_overrides_win_and_none_is_ignored(self, tmp_path):
        config = write_config(tmp_path / "c.toml", "[equinode]\nlog_level = 1\n")
        settings = load_settings(config, overrides={"log_level": 4, "image": None})
        assert settings.log_level == 4
        assert settings.image == ProvisionerSettings().image

    def test_missing_explicit_file_raises(self, tmp_path):
        missing = tmp_path / "nope.toml"
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(missing)
        assert exc_info.value.config_file == str(missing)

    def test_malformed_file_raises(self, tmp_path):
        config = write_config(tmp_path / "bad.toml", "[equinode\nmin_port = \n")
        with pytest.raises(ConfigurationError, match="Malformed"):
            load_settings(config)

    def test_unknown_key_raises(self, tmp_path):
        config = write_config(tmp_path / "c.toml", "[equinode]\nmin_prot = 1\n")
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(config)
        assert exc_info.value.details["unknown"] == ["min_prot"]

    def test_wrong_type_raises(self, tmp_path):
        config = write_config(tmp_path / "c.toml", '[equinode]\nmin_port = "18081"\n')
        with pytest.raises(ConfigurationError, match="must be an integer"):
            load_settings(config)

    def test_bool_is_not_an_integer(self, tmp_path):
        config = write_config(tmp_path / "c.toml", "[equinode]\nlog_level = true\n")
        with pytest.raises(ConfigurationError):
            load_settings(config)

    def test_inverted_window_raises(self, tmp_path):
        config = write_config(
            tmp_path / "c.toml", "[equinode]\nmin_port = 18300\nmax_port = 18200\n"
        )
        with pytest.raises(ConfigurationError) as exc_info:
            load_settings(config)
        assert exc_info.value.details["min_port"] == 18300
        assert exc_info.value.details["max_port"] == 18200

    def test_port_out_of_range_raises(self, tmp_path):
        config = write_config(tmp_path / "c.toml", "[equinode]\nmax_port = 70000\n")
        with pytest.raises(ConfigurationError, match="between 1 and 65535"):
            load_settings(config)

    def test_unknown_data_layout_raises(self, tmp_path):
        config = write_config(tmp_path / "c.toml", '[equinode]\ndata_layout = "flat"\n')
        with pytest.raises(ConfigurationError, match="data_layout"):
            load_settings(config)
