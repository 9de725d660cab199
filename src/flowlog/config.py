"""Unified configuration loaded from .flowlog.toml, env vars, and CLI flags.

Loading order: defaults → TOML file → env vars → CLI flags.
"""

from __future__ import annotations

import logging
import os
import tomllib
from pathlib import Path

from pydantic import BaseModel, Field

from flowlog.models import DEFAULT_TIMEZONE
from flowlog.reconstruct import ReconstructConfig

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".flowlog.toml"
CONFIG_SEARCH_PATHS = [
    Path("."),
]
GLOBAL_CONFIG = Path.home() / ".config" / "flowlog" / "config.toml"


class JournalSectionConfig(BaseModel):
    """[journal] section."""

    directory: str = "."
    timezone: str = DEFAULT_TIMEZONE


class TimingSectionConfig(BaseModel):
    """[timing] section."""

    repo_path: str = ""
    use_commits: bool = True
    default_duration_minutes: int = Field(default=60, ge=0)
    pre_commit_buffer_minutes: int = Field(default=15, ge=0)
    post_commit_buffer_minutes: int = Field(default=5, ge=0)


class FlowlogConfig(BaseModel):
    """Top-level configuration model."""

    journal: JournalSectionConfig = Field(default_factory=JournalSectionConfig)
    timing: TimingSectionConfig = Field(default_factory=TimingSectionConfig)

    def to_reconstruct_config(self) -> ReconstructConfig:
        """Build the per-call config handed to the timing reconstructor.

        An empty ``repo_path`` means the current working directory.
        """
        return ReconstructConfig(
            repo_path=self.timing.repo_path or os.getcwd(),
            default_duration_minutes=self.timing.default_duration_minutes,
            pre_commit_buffer_minutes=self.timing.pre_commit_buffer_minutes,
            post_commit_buffer_minutes=self.timing.post_commit_buffer_minutes,
            default_timezone=self.journal.timezone,
        )


def load_config(path: str | Path | None = None) -> FlowlogConfig:
    """Load configuration from a TOML file.

    Search order:
    1. Explicit path (if provided)
    2. .flowlog.toml in CWD
    3. ~/.config/flowlog/config.toml

    Then overlay environment variables.
    """
    data: dict[str, object] = {}

    if path is not None:
        toml_path = Path(path)
        if toml_path.exists():
            data = _load_toml(toml_path)
        else:
            logger.warning("Config file not found: %s", toml_path)
    else:
        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = search_dir / CONFIG_FILENAME
            if candidate.exists():
                data = _load_toml(candidate)
                logger.info("Loaded config from %s", candidate)
                break
        if not data and GLOBAL_CONFIG.exists():
            data = _load_toml(GLOBAL_CONFIG)
            logger.info("Loaded config from %s", GLOBAL_CONFIG)

    config = FlowlogConfig.model_validate(data) if data else FlowlogConfig()
    return _apply_env_vars(config)


def merge_cli_overrides(config: FlowlogConfig, **cli_kwargs: object) -> FlowlogConfig:
    """Overlay explicitly-set CLI flags onto the config.

    Only keys with a non-None value are applied.
    """
    data = config.model_dump()

    mapping: dict[str, tuple[str, str]] = {
        "journal_dir": ("journal", "directory"),
        "timezone": ("journal", "timezone"),
        "repo_path": ("timing", "repo_path"),
        "use_commits": ("timing", "use_commits"),
        "pre_buffer": ("timing", "pre_commit_buffer_minutes"),
        "post_buffer": ("timing", "post_commit_buffer_minutes"),
    }

    for key, value in cli_kwargs.items():
        if value is None or key not in mapping:
            continue
        section, field = mapping[key]
        data[section][field] = value

    return FlowlogConfig.model_validate(data)


def _load_toml(path: Path) -> dict[str, object]:
    """Load a TOML file and return the data dict."""
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except (tomllib.TOMLDecodeError, OSError) as exc:
        logger.warning("Failed to parse %s: %s", path, exc)
        return {}


def _apply_env_vars(config: FlowlogConfig) -> FlowlogConfig:
    """Apply environment variable overrides to config."""
    data = config.model_dump()

    env_mapping: dict[str, tuple[str, str]] = {
        "FLOWLOG_JOURNAL_DIR": ("journal", "directory"),
        "FLOWLOG_TIMEZONE": ("journal", "timezone"),
        "FLOWLOG_REPO_PATH": ("timing", "repo_path"),
    }
    for env_var, (section, field) in env_mapping.items():
        value = os.environ.get(env_var)
        if value is not None:
            data[section][field] = value

    for env_var, field in [
        ("FLOWLOG_PRE_BUFFER", "pre_commit_buffer_minutes"),
        ("FLOWLOG_POST_BUFFER", "post_commit_buffer_minutes"),
    ]:
        raw = os.environ.get(env_var)
        if raw is None:
            continue
        try:
            data["timing"][field] = int(raw)
        except ValueError:
            logger.warning("Ignoring %s=%r: not an integer", env_var, raw)

    return FlowlogConfig.model_validate(data)
