"""
Configuration module for the Firestore to Supabase migration tool.

This module provides functions for loading configuration settings from YAML
files, creating default configurations, and determining which top-level
migration phases should run based on the configuration.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from firestore_migrator.exceptions import ConfigError
from firestore_migrator.utils.logging import log_with_context

SUPABASE_URL_ENV = "SUPABASE_URL"
SUPABASE_KEY_ENVS = ("SUPABASE_SERVICE_ROLE_KEY", "SUPABASE_KEY")
FIRESTORE_CREDENTIALS_ENV = "GOOGLE_APPLICATION_CREDENTIALS"


@dataclass
class FirestoreConfig:
    """Connection settings for the Firestore source."""

    credentials_path: str | None = None
    project_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> FirestoreConfig:
        data = data or {}
        return cls(
            credentials_path=data.get("credentials_path")
            or os.environ.get(FIRESTORE_CREDENTIALS_ENV),
            project_id=data.get("project_id"),
        )


@dataclass
class SupabaseConfig:
    """Connection settings for the Supabase destination.

    Values missing from the file fall back to the environment, where the
    service role key is preferred over the anon key.
    """

    url: str | None = None
    key: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> SupabaseConfig:
        data = data or {}
        key = data.get("key")
        if not key:
            key = next(
                (os.environ[name] for name in SUPABASE_KEY_ENVS if os.environ.get(name)),
                None,
            )
        return cls(url=data.get("url") or os.environ.get(SUPABASE_URL_ENV), key=key)


@dataclass
class MigrationConfig:
    """Typed configuration for the migration tool."""

    firestore: FirestoreConfig = field(default_factory=FirestoreConfig)
    supabase: SupabaseConfig = field(default_factory=SupabaseConfig)

    # Phase filtering
    include_phases: list[str] = field(default_factory=list)
    exclude_phases: list[str] = field(default_factory=list)

    # Retry
    max_retries: int = 3
    retry_delay: int = 2

    # Output
    log_dir: str = "logs"
    report_dir: str = "migration_output"

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ConfigError(f"max_retries must be non-negative, got {self.max_retries}")
        if self.retry_delay < 0:
            raise ConfigError(f"retry_delay must be non-negative, got {self.retry_delay}")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MigrationConfig:
        """Create a MigrationConfig from a raw config dictionary."""
        return cls(
            firestore=FirestoreConfig.from_dict(data.get("firestore")),
            supabase=SupabaseConfig.from_dict(data.get("supabase")),
            include_phases=list(data.get("include_phases") or []),
            exclude_phases=list(data.get("exclude_phases") or []),
            max_retries=data.get("max_retries", 3),
            retry_delay=data.get("retry_delay", 2),
            log_dir=data.get("log_dir", "logs"),
            report_dir=data.get("report_dir", "migration_output"),
        )


def load_config(config_path: Path) -> MigrationConfig:
    """
    Load configuration from YAML file and apply default values.

    If the file doesn't exist, a warning is logged and default settings
    (plus environment-supplied credentials) are used. A file that exists but
    cannot be parsed is a fatal configuration error.

    Args:
        config_path: Path to the config YAML file

    Returns:
        MigrationConfig with all necessary defaults applied

    Raises:
        ConfigError: If the file is unreadable, invalid YAML, or not a mapping
    """
    raw: dict[str, Any] = {}

    if config_path.exists():
        try:
            with open(config_path) as f:
                loaded_config = yaml.safe_load(f)
        except (yaml.YAMLError, OSError) as e:
            raise ConfigError(f"Failed to load config file {config_path}: {e}") from e
        # Handle None result from empty file
        if loaded_config is not None:
            if not isinstance(loaded_config, dict):
                raise ConfigError(
                    f"Config file {config_path} must contain a mapping at the top level"
                )
            raw = loaded_config
        log_with_context(logging.INFO, f"Loaded configuration from {config_path}")
    else:
        log_with_context(
            logging.WARNING,
            f"Config file {config_path} not found, using default settings",
        )

    return MigrationConfig.from_dict(raw)


def create_default_config(output_path: Path) -> bool:
    """
    Create a default configuration file with recommended settings.

    The function will not overwrite an existing configuration file.

    Args:
        output_path: Path where the default config should be saved

    Returns:
        True if the config file was created successfully, False otherwise
    """
    if output_path.exists():
        log_with_context(
            logging.WARNING,
            f"Config file {output_path} already exists, not overwriting",
        )
        return False

    default_config = {
        "firestore": {
            "credentials_path": "service-account-key.json",
            "project_id": "",
        },
        # Leave empty to read SUPABASE_URL / SUPABASE_SERVICE_ROLE_KEY
        "supabase": {"url": "", "key": ""},
        "include_phases": [],
        "exclude_phases": [],
        "max_retries": 3,
        "retry_delay": 2,
        "log_dir": "logs",
        "report_dir": "migration_output",
    }

    try:
        with open(output_path, "w") as f:
            yaml.safe_dump(default_config, f, default_flow_style=False, sort_keys=False)
        log_with_context(logging.INFO, f"Created default config file at {output_path}")
        return True
    except OSError as e:
        log_with_context(logging.ERROR, f"Failed to create default config file: {e}")
        return False


def should_process_phase(
    phase_name: str, config: MigrationConfig, group: str | None = None
) -> bool:
    """
    Determine if a top-level phase should run based on configuration filters.

    A phase matches a filter entry by its own name or by its group name
    (e.g. ``options`` covers every option collection).

    1. If include_phases is specified, only matching phases run
    2. Otherwise every phase runs except those matching exclude_phases

    Args:
        phase_name: The phase name (e.g. ``channels``)
        config: The MigrationConfig instance
        group: Optional group the phase belongs to

    Returns:
        True if the phase should run, False if it should be skipped
    """
    names = {phase_name} if group is None else {phase_name, group}
    if config.include_phases:
        return bool(names & set(config.include_phases))
    return not names & set(config.exclude_phases)
