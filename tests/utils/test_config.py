"""Tests for configuration loading."""

import pytest

from pagedlog.utils.config import Config, get_config, reset_config


class TestConfig:
    """Test Config."""

    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        for name in ["PAGEDLOG_DIAG_DIR", "PAGEDLOG_PAGE_SIZE", "PAGEDLOG_UPLOAD_DIR", "LOG_LEVEL"]:
            monkeypatch.delenv(name, raising=False)
        reset_config()
        yield
        reset_config()

    def test_defaults(self):
        """Test built-in defaults."""
        config = Config()

        assert config.get("pages.page_size") == 8 * 1024 * 1024
        assert config.get("upload.workers") == 1
        assert config.get("missing.key", "fallback") == "fallback"

    def test_config_file_merges(self, tmp_path):
        """Test a YAML file overrides only the keys it names."""
        config_file = tmp_path / "pagedlog.yaml"
        config_file.write_text(
            "pages:\n  page_size: 4096\nlogging:\n  level: DEBUG\n",
            encoding="utf-8",
        )

        config = Config(str(config_file))

        assert config.get("pages.page_size") == 4096
        assert config.get("pages.diag_dir") == "./_diag"
        assert config.get("logging.level") == "DEBUG"

    def test_empty_config_file(self, tmp_path):
        """Test an empty YAML file changes nothing."""
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("", encoding="utf-8")

        assert Config(str(config_file)).get("pages.page_size") == 8 * 1024 * 1024

    def test_env_overrides(self, monkeypatch, tmp_path):
        """Test environment variables win over files."""
        monkeypatch.setenv("PAGEDLOG_DIAG_DIR", str(tmp_path))
        monkeypatch.setenv("PAGEDLOG_PAGE_SIZE", "1024")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")

        config = Config()

        assert config.get("pages.diag_dir") == str(tmp_path)
        assert config.get("pages.page_size") == 1024
        assert config.get("logging.level") == "WARNING"

    def test_set_creates_nested_keys(self):
        """Test dot-notation set."""
        config = Config()
        config.set("upload.extra.option", True)

        assert config.get("upload.extra.option") is True
        assert config.to_dict()["upload"]["extra"] == {"option": True}

    def test_set_does_not_leak_into_defaults(self):
        """Test instances do not share nested dictionaries."""
        first = Config()
        first.set("pages.page_size", 1)

        assert Config().get("pages.page_size") == 8 * 1024 * 1024

    def test_global_config(self):
        """Test get_config returns one shared instance."""
        assert get_config() is get_config()
