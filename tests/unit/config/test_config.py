"""Tests for Config loading and logging setup."""

import logging

import pytest

from idlink.config import Config, configure_logging


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    monkeypatch.setenv("IDLINK_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.delenv("IDLINK_CONFIG_FILE", raising=False)
    monkeypatch.delenv("IDLINK_DATABASE__URL", raising=False)
    monkeypatch.chdir(tmp_path)


class TestConfig:
    def test_defaults(self):
        config = Config()

        assert config.authentication.scheme == "aad"
        assert config.active_directory.block_guest_user_types is False
        assert config.mail.transport == "none"
        assert config.graph.is_configured is False

    def test_database_url_derived_from_data_dir(self, tmp_path):
        config = Config()

        assert config.database.url == f"sqlite+aiosqlite:///{tmp_path / 'data' / 'idlink.db'}"

    def test_nested_env_override(self, monkeypatch):
        monkeypatch.setenv("IDLINK_ACTIVE_DIRECTORY__BLOCK_GUEST_USER_TYPES", "true")
        monkeypatch.setenv("IDLINK_AUTHENTICATION__SCHEME", "github")

        config = Config()

        assert config.active_directory.block_guest_user_types is True
        assert config.authentication.scheme == "github"

    def test_yaml_file(self, monkeypatch, tmp_path):
        config_file = tmp_path / "idlink.yaml"
        config_file.write_text(
            "active_directory:\n"
            "  block_guest_user_types: true\n"
            "  authorized_guest_ids: [aad-1, aad-2]\n"
            "brand:\n"
            "  company_name: Fabrikam\n"
        )
        monkeypatch.setenv("IDLINK_CONFIG_FILE", str(config_file))

        config = Config()

        assert config.active_directory.authorized_guest_ids == {"aad-1", "aad-2"}
        assert config.brand.company_name == "Fabrikam"

    def test_env_beats_yaml(self, monkeypatch, tmp_path):
        config_file = tmp_path / "idlink.yaml"
        config_file.write_text("brand:\n  company_name: Fabrikam\n")
        monkeypatch.setenv("IDLINK_CONFIG_FILE", str(config_file))
        monkeypatch.setenv("IDLINK_BRAND__COMPANY_NAME", "Contoso")

        assert Config().brand.company_name == "Contoso"

    def test_graph_configured_with_all_credentials(self, monkeypatch):
        monkeypatch.setenv("IDLINK_GRAPH__TENANT_ID", "t")
        monkeypatch.setenv("IDLINK_GRAPH__CLIENT_ID", "c")
        monkeypatch.setenv("IDLINK_GRAPH__CLIENT_SECRET", "s")

        assert Config().graph.is_configured is True


class TestConfigureLogging:
    def test_writes_to_log_file(self, monkeypatch, tmp_path):
        log_file = tmp_path / "logs" / "idlink.log"
        monkeypatch.setenv("IDLINK_LOG_FILE", str(log_file))
        root = logging.getLogger()
        saved_handlers, saved_level = root.handlers[:], root.level

        try:
            configure_logging(Config().logging)
            logging.getLogger("idlink.test").info("hello from test")
            for handler in root.handlers:
                handler.flush()

            assert "hello from test" in log_file.read_text()
        finally:
            for handler in root.handlers[:]:
                root.removeHandler(handler)
                handler.close()
            for handler in saved_handlers:
                root.addHandler(handler)
            root.setLevel(saved_level)
