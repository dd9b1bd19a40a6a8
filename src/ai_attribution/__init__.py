"""
AI attribution toolkit.

Reads AI-assistance trailers from git history and aggregates them into
per-project and per-module statistics.
"""

from .aggregator import build_report, extract_module
from .config import AttributionConfig, AttributionConfigManager
from .core import AttributionAnalyzer, GitCommitParser
from .data_models import AiTool, AttributionReport, CommitAttribution, ModuleStats
from .exceptions import (
    AttributionError,
    AttributionThresholdError,
    ConfigurationError,
    GitRepositoryError,
)
from .trailers import classify_tool, extract_trailers, is_ai_assisted

__all__ = [
    "AiTool",
    "AttributionAnalyzer",
    "AttributionConfig",
    "AttributionConfigManager",
    "AttributionError",
    "AttributionReport",
    "AttributionThresholdError",
    "CommitAttribution",
    "ConfigurationError",
    "GitCommitParser",
    "GitRepositoryError",
    "ModuleStats",
    "build_report",
    "classify_tool",
    "extract_module",
    "extract_trailers",
    "is_ai_assisted",
]
