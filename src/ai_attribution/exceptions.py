"""
Exception types for AI attribution analysis.
"""


class AttributionError(Exception):
    """Base exception for attribution operations."""

    pass


class GitRepositoryError(AttributionError):
    """Repository cannot be opened or its history cannot be read."""

    pass


class ConfigurationError(AttributionError):
    """Configuration values are invalid."""

    pass


class AttributionThresholdError(AttributionError):
    """Attribution requirements configured for the run were not met."""

    pass
