"""
Configuration system for AI attribution analysis.
"""

import json
import re
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from ..shared_utilities import get_logger
from .exceptions import ConfigurationError

DEFAULT_CONFIG_FILENAME = ".ai-attribution.json"
SUPPORTED_OUTPUT_FORMATS = ("json", "table")

LIST_FIELDS = ("output_formats", "custom_ai_tool_trailers", "exclude_patterns")
FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "max_commits": (int,),
    "since_commit": (str, type(None)),
    "until_commit": (str,),
    "output_formats": (list, tuple),
    "output_directory": (str,),
    "fail_on_no_attribution": (bool,),
    "min_attribution_percentage": (int, float),
    "include_file_details": (bool,),
    "custom_ai_tool_trailers": (list, tuple),
    "exclude_patterns": (list, tuple),
    "project_name": (str, type(None)),
    "project_version": (str,),
}


@dataclass
class AttributionConfig:
    """Configuration for an attribution run."""

    max_commits: int = 100
    since_commit: str | None = None
    until_commit: str = "HEAD"
    output_formats: list[str] = field(default_factory=lambda: ["json", "table"])
    output_directory: str = "build/reports/ai-attribution"
    fail_on_no_attribution: bool = False
    min_attribution_percentage: float = 0.0
    include_file_details: bool = True
    custom_ai_tool_trailers: list[str] = field(default_factory=list)
    exclude_patterns: list[str] = field(default_factory=list)
    project_name: str | None = None
    project_version: str = "unspecified"

    def __post_init__(self):
        """Validate configuration values."""
        self._check_types()

        if self.max_commits < 1:
            raise ConfigurationError(
                f"max_commits must be a positive integer, got {self.max_commits}"
            )

        self.min_attribution_percentage = float(self.min_attribution_percentage)
        if not 0.0 <= self.min_attribution_percentage <= 100.0:
            raise ConfigurationError(
                "min_attribution_percentage must be between 0 and 100, "
                f"got {self.min_attribution_percentage}"
            )

        self.custom_ai_tool_trailers = list(self.custom_ai_tool_trailers)
        self.exclude_patterns = list(self.exclude_patterns)
        self.output_formats = [fmt.lower() for fmt in self.output_formats]
        unknown = [
            fmt for fmt in self.output_formats if fmt not in SUPPORTED_OUTPUT_FORMATS
        ]
        if unknown:
            raise ConfigurationError(
                f"Unsupported output format(s): {', '.join(unknown)}. "
                f"Supported: {', '.join(SUPPORTED_OUTPUT_FORMATS)}"
            )

    def _check_types(self) -> None:
        """Reject values of the wrong JSON type before they are compared."""
        for name, expected in FIELD_TYPES.items():
            value = getattr(self, name)
            # bool is an int subclass but never a valid count or percentage
            if isinstance(value, bool) and bool not in expected:
                valid = False
            else:
                valid = isinstance(value, expected)
            if not valid:
                raise ConfigurationError(
                    f"{name} has invalid type {type(value).__name__}: {value!r}"
                )

        for name in LIST_FIELDS:
            invalid = [item for item in getattr(self, name) if not isinstance(item, str)]
            if invalid:
                raise ConfigurationError(
                    f"{name} must contain only strings, got {invalid!r}"
                )

    def describe_range(self) -> str:
        """Human-readable description of the analyzed commit range."""
        return describe_range(self.since_commit, self.until_commit, self.max_commits)


def describe_range(since: str | None, until: str, max_commits: int) -> str:
    if since and since.strip():
        return f"{since}..{until}"
    return f"last {max_commits} commits up to {until}"


def _snake_case(key: str) -> str:
    """Convert ``maxCommits`` style keys to ``max_commits``."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).lower()


class AttributionConfigManager:
    """Loads attribution configuration from an optional JSON file."""

    def __init__(self, config_file: str | Path | None = None, repo_path: str = "."):
        """Initialize config manager.

        Args:
            config_file: Path to configuration file, defaults to
                ``.ai-attribution.json`` in the repository root
            repo_path: Repository root used to locate the default file
        """
        self.logger = get_logger(__name__)

        if config_file is None:
            self.config_file = Path(repo_path) / DEFAULT_CONFIG_FILENAME
        else:
            self.config_file = Path(config_file)

        self._values: dict[str, Any] = {}
        self._load_config()

    def _load_config(self) -> None:
        """Load configuration values from file."""
        if not self.config_file.exists():
            self.logger.debug(f"No config file at {self.config_file}, using defaults")
            return

        try:
            with open(self.config_file, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            self.logger.error(f"Failed to load config {self.config_file}: {e}")
            return

        if not isinstance(data, dict):
            self.logger.error(
                f"Config file {self.config_file} must contain a JSON object"
            )
            return

        known = {f.name for f in fields(AttributionConfig)}
        for key, value in data.items():
            name = _snake_case(key)
            if name in known:
                self._values[name] = value
            else:
                self.logger.warning(f"Ignoring unknown config key: {key}")

        self.logger.info(
            f"Loaded attribution configuration from {self.config_file}",
            keys=sorted(self._values),
        )

    def get_config(self, **overrides: Any) -> AttributionConfig:
        """Build the effective configuration.

        Overrides that are ``None`` (or empty sequences) leave the file or
        default value in place.
        """
        config = AttributionConfig(**self._values)

        applied = {
            key: value
            for key, value in overrides.items()
            if value is not None and value != () and value != []
        }
        if applied:
            config = replace(config, **applied)

        return config
