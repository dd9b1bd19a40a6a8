"""
Data models for AI attribution analysis.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

SHORT_HASH_LENGTH = 7


class AiTool(Enum):
    """AI tools that can be recorded in commit trailers."""

    GITHUB_COPILOT = ("github-copilot", "GitHub Copilot")
    DEVIN = ("devin", "Devin AI")
    CLAUDE = ("claude", "Claude")
    CHATGPT = ("chatgpt", "ChatGPT")
    CODEWHISPERER = ("codewhisperer", "AWS CodeWhisperer")
    OTHER = ("other", "Other AI Tool")
    NONE = ("none", "No AI Assistance")

    @property
    def trailer_id(self) -> str:
        """Machine identifier used in trailer values."""
        return self.value[0]

    @property
    def display_name(self) -> str:
        """Human-readable tool name."""
        return self.value[1]


@dataclass(frozen=True, eq=False)
class CommitAttribution:
    """AI attribution data for a single commit.

    Two attributions are equal when they describe the same commit hash.
    """

    commit_hash: str
    author: str | None = None
    author_email: str | None = None
    commit_time: datetime | None = None
    message: str | None = None  # subject line only
    ai_assisted: bool = False
    ai_tool: AiTool | None = AiTool.NONE
    ai_confidence: str | None = None
    files_changed: tuple[str, ...] = ()
    short_hash: str = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "short_hash", self.commit_hash[:SHORT_HASH_LENGTH])
        if self.ai_tool is None:
            object.__setattr__(self, "ai_tool", AiTool.NONE)
        object.__setattr__(self, "files_changed", tuple(self.files_changed or ()))

    @property
    def file_count(self) -> int:
        return len(self.files_changed)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommitAttribution):
            return NotImplemented
        return self.commit_hash == other.commit_hash

    def __hash__(self) -> int:
        return hash(self.commit_hash)

    def __repr__(self) -> str:
        return (
            f"CommitAttribution(hash={self.short_hash}, "
            f"ai_assisted={self.ai_assisted}, tool={self.ai_tool.name})"
        )


@dataclass(frozen=True)
class ModuleStats:
    """File-level attribution statistics for one module."""

    module_name: str
    total_files: int
    ai_assisted_files: int
    ai_assisted_percentage: float


@dataclass(frozen=True)
class AttributionReport:
    """Complete attribution report for a project.

    Built by ``aggregator.build_report``; every statistic is computed once
    from ``commits`` at build time and stored as a plain field.
    """

    project_name: str
    project_version: str
    branch: str | None
    head_commit: str | None
    generated_at: datetime
    analyzed_range: str
    commits: tuple[CommitAttribution, ...]
    total_commits: int
    ai_assisted_commits: int
    ai_assisted_percentage: float
    total_files_changed: int
    ai_assisted_files_changed: int
    commits_by_tool: Mapping[AiTool, int]
    module_breakdown: Mapping[str, ModuleStats]

    @property
    def ai_assisted_commits_list(self) -> list[CommitAttribution]:
        """Commits carrying AI attribution, in walk order."""
        return [commit for commit in self.commits if commit.ai_assisted]
