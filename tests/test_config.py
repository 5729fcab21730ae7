"""
Tests for configuration loading.
"""

import pytest

from etf_insight.config import (
    ConfigurationError,
    load_server_config,
    write_config,
)
from etf_insight.models import ServerConfig


class TestLoadServerConfig:
    """Tests for the load_server_config function."""

    def test_defaults(self):
        config = load_server_config(environ={})

        assert config == ServerConfig()
        assert config.port == 3001
        assert config.max_upload_bytes == 10 * 1024 * 1024

    def test_yaml_file(self, tmp_path):
        config_path = tmp_path / "server.yaml"
        config_path.write_text("port: 8080\nupload_dir: /data/uploads\nlog_level: debug\n")

        config = load_server_config(config_path, environ={})

        assert config.port == 8080
        assert config.upload_dir == "/data/uploads"
        assert config.log_level == "DEBUG"
        assert config.host == "0.0.0.0"

    def test_environment_overrides_yaml(self, tmp_path):
        config_path = tmp_path / "server.yaml"
        config_path.write_text("port: 8080\n")

        config = load_server_config(
            config_path,
            environ={"PORT": "9000", "ETF_INSIGHT_UPLOAD_DIR": "/tmp/x"},
        )

        assert config.port == 9000
        assert config.upload_dir == "/tmp/x"

    def test_prefixed_port_wins_over_plain_port(self):
        config = load_server_config(
            environ={"PORT": "9000", "ETF_INSIGHT_PORT": "9100"},
        )

        assert config.port == 9100

    def test_empty_yaml_uses_defaults(self, tmp_path):
        config_path = tmp_path / "server.yaml"
        config_path.write_text("")

        assert load_server_config(config_path, environ={}) == ServerConfig()

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigurationError, match="not found"):
            load_server_config(tmp_path / "missing.yaml", environ={})

    def test_invalid_yaml_raises(self, tmp_path):
        config_path = tmp_path / "server.yaml"
        config_path.write_text("port: [8080\n")

        with pytest.raises(ConfigurationError, match="Invalid YAML"):
            load_server_config(config_path, environ={})

    def test_non_mapping_yaml_raises(self, tmp_path):
        config_path = tmp_path / "server.yaml"
        config_path.write_text("- 1\n- 2\n")

        with pytest.raises(ConfigurationError, match="mapping"):
            load_server_config(config_path, environ={})

    @pytest.mark.parametrize("environ", [
        {"PORT": "abc"},
        {"PORT": "0"},
        {"PORT": "70000"},
        {"ETF_INSIGHT_MAX_UPLOAD_BYTES": "-1"},
        {"ETF_INSIGHT_LOG_LEVEL": "chatty"},
    ])
    def test_invalid_values_raise(self, environ):
        with pytest.raises(ConfigurationError):
            load_server_config(environ=environ)


class TestWriteConfig:
    """Tests for the write_config function."""

    def test_written_config_loads_back(self, tmp_path):
        config = ServerConfig(port=5000, upload_dir="data", log_level="WARNING")
        output_path = tmp_path / "nested" / "server.yaml"

        write_config(config, output_path)

        assert load_server_config(output_path, environ={}) == config
