"""Tests for configuration system."""

import os
from dataclasses import dataclass
from pathlib import Path

import pytest
from pydantic import BaseModel, Field

from pyintercept.core.config import Config, config_properties


class TestConfig:
    def test_load_from_dict(self):
        config = Config({"app": {"name": "test-service", "port": 8080}})
        assert config.get("app.name") == "test-service"
        assert config.get("app.port") == 8080

    def test_get_with_default(self):
        config = Config({})
        assert config.get("missing.key", "default") == "default"

    def test_get_nested_value(self):
        config = Config({"pyintercept": {"interception": {"log-level": "INFO"}}})
        assert config.get("pyintercept.interception.log-level") == "INFO"

    def test_dash_and_underscore_spellings_match(self):
        config = Config({"pyintercept": {"interception": {"validate-return-types": False}}})
        assert config.get("pyintercept.interception.validate_return_types") is False

    def test_load_from_yaml_file(self, tmp_path: Path):
        config_file = tmp_path / "pyintercept.yaml"
        config_file.write_text("app:\n  name: my-service\n  port: 9090\n")
        config = Config.from_file(config_file)
        assert config.get("app.name") == "my-service"
        assert config.loaded_sources == [str(config_file)]

    def test_load_from_toml_file(self, tmp_path: Path):
        config_file = tmp_path / "pyintercept.toml"
        config_file.write_text('[pyintercept.interception]\nenabled = false\n')
        config = Config.from_file(config_file)
        assert config.get("pyintercept.interception.enabled") is False

    def test_missing_file_yields_empty_config(self, tmp_path: Path):
        config = Config.from_file(tmp_path / "absent.yaml")
        assert config.to_dict() == {}
        assert config.loaded_sources == []

    def test_env_var_override(self):
        os.environ["PYINTERCEPT_APP_NAME"] = "env-service"
        try:
            config = Config({"app": {"name": "file-service"}})
            assert config.get("app.name") == "env-service"
        finally:
            del os.environ["PYINTERCEPT_APP_NAME"]

    def test_env_var_drops_package_prefix(self, monkeypatch):
        monkeypatch.setenv("PYINTERCEPT_INTERCEPTION_LOG_LEVEL", "WARNING")
        config = Config({"pyintercept": {"interception": {"log-level": "INFO"}}})
        assert config.get("pyintercept.interception.log-level") == "WARNING"

    def test_get_section(self):
        config = Config({"pyintercept": {"interception": {"log-arguments": True}}})
        assert config.get_section("pyintercept.interception") == {"log_arguments": True}
        assert config.get_section("pyintercept.missing") == {}


class TestPlaceholderResolution:
    def test_resolve_env_var(self, monkeypatch):
        monkeypatch.setenv("MY_LEVEL", "ERROR")
        config = Config({"pyintercept": {"interception": {"log-level": "${MY_LEVEL}"}}})
        assert config.get("pyintercept.interception.log-level") == "ERROR"

    def test_resolve_config_reference(self):
        config = Config({"app": {"name": "orders"}, "logger": "${app.name}.calls"})
        assert config.get("logger") == "orders.calls"

    def test_resolve_with_default(self):
        config = Config({"key": "${MISSING_VAR:fallback_value}"})
        assert config.get("key") == "fallback_value"

    def test_unresolvable_placeholder_raises(self):
        config = Config({"key": "${NOT_DEFINED_ANYWHERE_42}"})
        with pytest.raises(ValueError, match="Cannot resolve placeholder"):
            config.get("key")

    def test_circular_reference_raises(self):
        config = Config({"a": "${b}", "b": "${a}"})
        with pytest.raises(ValueError, match="Max recursion depth"):
            config.get("a")


class TestConfigProperties:
    def test_bind_to_dataclass(self):
        @config_properties(prefix="database")
        @dataclass
        class DatabaseConfig:
            url: str = "sqlite:///test.db"
            pool_size: int = 5

        config = Config({"database": {"url": "postgresql://localhost/mydb", "pool-size": 20}})
        db_config = config.bind(DatabaseConfig)
        assert db_config.url == "postgresql://localhost/mydb"
        assert db_config.pool_size == 20

    def test_bind_uses_defaults(self):
        @config_properties(prefix="database")
        @dataclass
        class DatabaseConfig:
            url: str = "sqlite:///default.db"
            pool_size: int = 5

        db_config = Config({}).bind(DatabaseConfig)
        assert db_config.url == "sqlite:///default.db"
        assert db_config.pool_size == 5

    def test_bind_coerces_env_strings(self, monkeypatch):
        @config_properties(prefix="pyintercept.retry")
        @dataclass
        class RetryConfig:
            attempts: int = 1
            backoff: float = 0.5
            jitter: bool = False

        monkeypatch.setenv("PYINTERCEPT_RETRY_ATTEMPTS", "3")
        monkeypatch.setenv("PYINTERCEPT_RETRY_BACKOFF", "1.5")
        monkeypatch.setenv("PYINTERCEPT_RETRY_JITTER", "yes")
        retry = Config({}).bind(RetryConfig)
        assert retry.attempts == 3
        assert retry.backoff == 1.5
        assert retry.jitter is True

    def test_bind_to_pydantic_model(self):
        @config_properties(prefix="pyintercept.audit")
        class AuditConfig(BaseModel):
            enabled: bool = True
            sample_rate: float = Field(default=1.0, ge=0.0, le=1.0)

        config = Config({"pyintercept": {"audit": {"sample-rate": 0.25}}})
        audit = config.bind(AuditConfig)
        assert audit.enabled is True
        assert audit.sample_rate == 0.25

    def test_pydantic_validation_failure_raises_value_error(self):
        @config_properties(prefix="pyintercept.audit")
        class AuditConfig(BaseModel):
            sample_rate: float = Field(default=1.0, ge=0.0, le=1.0)

        config = Config({"pyintercept": {"audit": {"sample_rate": 3}}})
        with pytest.raises(ValueError, match="Configuration validation failed"):
            config.bind(AuditConfig)

    def test_undecorated_class_rejected(self):
        @dataclass
        class Plain:
            value: int = 0

        with pytest.raises(ValueError, match="not decorated"):
            Config({}).bind(Plain)


class TestProfileConfigMerging:
    def test_merge_profile_config(self, tmp_path):
        base = tmp_path / "pyintercept.yaml"
        base.write_text("pyintercept:\n  interception:\n    enabled: true\n    log-level: INFO\n")

        profile = tmp_path / "pyintercept-dev.yaml"
        profile.write_text("pyintercept:\n  interception:\n    log-level: DEBUG\n    log-arguments: true\n")

        config = Config.from_file(base, active_profiles=["dev"])
        assert config.get("pyintercept.interception.enabled") is True
        assert config.get("pyintercept.interception.log-level") == "DEBUG"
        assert config.get("pyintercept.interception.log-arguments") is True
        assert config.loaded_sources[1].endswith("(profile: dev)")

    def test_later_profile_wins(self, tmp_path):
        base = tmp_path / "pyintercept.yaml"
        base.write_text("db:\n  url: base\n")
        (tmp_path / "pyintercept-dev.yaml").write_text("db:\n  url: dev-url\n")
        (tmp_path / "pyintercept-local.yaml").write_text("db:\n  url: local-url\n")

        config = Config.from_file(base, active_profiles=["dev", "local"])
        assert config.get("db.url") == "local-url"

    def test_missing_profile_file_is_skipped(self, tmp_path):
        base = tmp_path / "pyintercept.yaml"
        base.write_text("app:\n  name: test\n")

        config = Config.from_file(base, active_profiles=["nonexistent"])
        assert config.get("app.name") == "test"

    def test_env_vars_still_win(self, tmp_path, monkeypatch):
        base = tmp_path / "pyintercept.yaml"
        base.write_text("app:\n  name: base\n")
        (tmp_path / "pyintercept-dev.yaml").write_text("app:\n  name: dev\n")

        monkeypatch.setenv("PYINTERCEPT_APP_NAME", "env-wins")
        config = Config.from_file(base, active_profiles=["dev"])
        assert config.get("app.name") == "env-wins"
