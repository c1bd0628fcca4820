"""Unit tests for the config module."""

import pytest
import yaml

from firestore_migrator.core.config import (
    FirestoreConfig,
    MigrationConfig,
    SupabaseConfig,
    create_default_config,
    load_config,
    should_process_phase,
)
from firestore_migrator.exceptions import ConfigError


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "SUPABASE_URL",
        "SUPABASE_SERVICE_ROLE_KEY",
        "SUPABASE_KEY",
        "GOOGLE_APPLICATION_CREDENTIALS",
    ):
        monkeypatch.delenv(name, raising=False)


class TestLoadConfig:
    """Tests for load_config()."""

    def test_missing_file_uses_defaults(self, tmp_path):
        config = load_config(tmp_path / "nope.yaml")
        assert config.include_phases == []
        assert config.exclude_phases == []
        assert config.max_retries == 3
        assert config.retry_delay == 2
        assert config.log_dir == "logs"
        assert config.report_dir == "migration_output"
        assert config.supabase.url is None

    def test_empty_file_uses_defaults(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")
        assert load_config(path).max_retries == 3

    def test_reads_values(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text(
            yaml.safe_dump(
                {
                    "firestore": {"credentials_path": "key.json", "project_id": "p1"},
                    "supabase": {"url": "https://x.supabase.co", "key": "k"},
                    "exclude_phases": ["notifications"],
                    "max_retries": 5,
                    "retry_delay": 1,
                    "log_dir": "out/logs",
                }
            )
        )
        config = load_config(path)
        assert config.firestore == FirestoreConfig("key.json", "p1")
        assert config.supabase == SupabaseConfig("https://x.supabase.co", "k")
        assert config.exclude_phases == ["notifications"]
        assert config.max_retries == 5
        assert config.retry_delay == 1
        assert config.log_dir == "out/logs"

    def test_invalid_yaml_is_config_error(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("firestore: [unclosed")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_non_mapping_is_config_error(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ConfigError, match="mapping"):
            load_config(path)

    def test_negative_retries_rejected(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("max_retries: -1\n")
        with pytest.raises(ConfigError, match="max_retries"):
            load_config(path)


class TestEnvironmentFallback:
    """Credentials left empty in the file come from the environment."""

    def test_supabase_from_env(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_URL", "https://env.supabase.co")
        monkeypatch.setenv("SUPABASE_KEY", "anon")
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service")
        config = SupabaseConfig.from_dict({"url": "", "key": ""})
        assert config.url == "https://env.supabase.co"
        assert config.key == "service"

    def test_anon_key_fallback(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_KEY", "anon")
        assert SupabaseConfig.from_dict(None).key == "anon"

    def test_file_value_wins(self, monkeypatch):
        monkeypatch.setenv("SUPABASE_SERVICE_ROLE_KEY", "service")
        assert SupabaseConfig.from_dict({"key": "from-file"}).key == "from-file"

    def test_firestore_credentials_from_env(self, monkeypatch):
        monkeypatch.setenv("GOOGLE_APPLICATION_CREDENTIALS", "/secrets/key.json")
        assert FirestoreConfig.from_dict({}).credentials_path == "/secrets/key.json"


class TestCreateDefaultConfig:
    """Tests for create_default_config()."""

    def test_writes_loadable_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        assert create_default_config(path) is True
        config = load_config(path)
        assert config.firestore.credentials_path == "service-account-key.json"
        assert config.max_retries == 3

    def test_does_not_overwrite(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("max_retries: 7\n")
        assert create_default_config(path) is False
        assert path.read_text() == "max_retries: 7\n"


class TestShouldProcessPhase:
    """Tests for should_process_phase()."""

    def test_everything_runs_by_default(self):
        assert should_process_phase("channels", MigrationConfig())

    def test_include_list(self):
        config = MigrationConfig(include_phases=["users"])
        assert should_process_phase("users", config)
        assert not should_process_phase("channels", config)

    def test_exclude_list(self):
        config = MigrationConfig(exclude_phases=["notifications"])
        assert not should_process_phase("notifications", config)
        assert should_process_phase("users", config)

    def test_group_matches(self):
        config = MigrationConfig(include_phases=["options"])
        assert should_process_phase("platforms", config, group="options")
        assert not should_process_phase("users", config)

    def test_group_exclusion(self):
        config = MigrationConfig(exclude_phases=["options"])
        assert not should_process_phase("cities", config, group="options")

    def test_include_takes_precedence(self):
        config = MigrationConfig(include_phases=["users"], exclude_phases=["users"])
        assert should_process_phase("users", config)

