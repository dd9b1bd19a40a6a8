"""
Core commit history walking and attribution extraction.
"""

from collections.abc import Iterable
from datetime import datetime, timezone
from fnmatch import fnmatch
from pathlib import Path

from git import Commit, Repo
from git.exc import (
    BadName,
    BadObject,
    GitCommandError,
    InvalidGitRepositoryError,
    NoSuchPathError,
)

from ..shared_utilities import get_logger, set_span_attribute, trace_operation
from .aggregator import build_report
from .config import AttributionConfig
from .data_models import AttributionReport, CommitAttribution
from .exceptions import AttributionThresholdError, GitRepositoryError
from .trailers import (
    extract_ai_confidence,
    extract_ai_tool,
    extract_trailers,
    is_ai_assisted,
)

DEFAULT_UNTIL_REF = "HEAD"
ALL_REFS = "--all"


class GitCommitParser:
    """
    Walks repository history and builds one ``CommitAttribution`` per commit.

    The repository is opened once and shared by the walk and the branch and
    head queries. Use it as a context manager so the handle is released on
    every exit path::

        with GitCommitParser(".", max_commits=200, since_commit="v1.0.0") as parser:
            commits = parser.parse_commits()
            branch = parser.get_current_branch()
    """

    def __init__(
        self,
        repo_path: str | Path,
        max_commits: int = 100,
        since_commit: str | None = None,
        until_commit: str | None = DEFAULT_UNTIL_REF,
        custom_ai_tool_trailers: Iterable[str] = (),
        exclude_patterns: Iterable[str] = (),
    ):
        """Initialize the parser.

        Args:
            repo_path: Path to the repository working tree
            max_commits: Upper bound on commits visited, most recent first
            since_commit: Exclusive lower bound (hash, tag or branch)
            until_commit: Inclusive upper bound, defaults to HEAD
            custom_ai_tool_trailers: Extra trailer names treated as ``AI-Tool``
            exclude_patterns: Glob patterns for paths dropped from file lists
        """
        self.logger = get_logger(__name__)
        self.repo_path = Path(repo_path)
        self.max_commits = max_commits
        self.since_commit = since_commit
        self.until_commit = until_commit
        self.custom_ai_tool_trailers = tuple(custom_ai_tool_trailers)
        self.exclude_patterns = tuple(exclude_patterns)
        self._repo: Repo | None = None

    def __enter__(self) -> "GitCommitParser":
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def open(self) -> Repo:
        """Open the repository handle if it is not open yet."""
        if self._repo is None:
            try:
                self._repo = Repo(self.repo_path)
            except (InvalidGitRepositoryError, NoSuchPathError) as e:
                raise GitRepositoryError(
                    f"Not a git repository: {self.repo_path}"
                ) from e
        return self._repo

    def close(self) -> None:
        if self._repo is not None:
            self._repo.close()
            self._repo = None

    @property
    def repo(self) -> Repo:
        if self._repo is None:
            raise GitRepositoryError("Repository is not open")
        return self._repo

    def parse_commits(self) -> list[CommitAttribution]:
        """Walk the configured range and return attributions, newest first."""
        revisions = self._build_revisions()

        with trace_operation(
            "walk_commit_history",
            {"repo": str(self.repo_path), "max_commits": self.max_commits},
        ) as span:
            try:
                attributions = [
                    self.parse_commit(commit)
                    for commit in self.repo.iter_commits(
                        revisions, max_count=self.max_commits
                    )
                ]
            except (GitCommandError, ValueError) as e:
                raise GitRepositoryError(
                    f"Failed to parse git commits in {self.repo_path}: {e}"
                ) from e

            assisted = sum(1 for attribution in attributions if attribution.ai_assisted)
            set_span_attribute(span, "commits.total", len(attributions))
            set_span_attribute(span, "commits.ai_assisted", assisted)

        self.logger.info(
            f"Parsed {len(attributions)} commits, {assisted} with AI attribution"
        )

        return attributions

    def _build_revisions(self) -> list[str]:
        """Translate the since/until bounds into rev-list arguments."""
        revisions = []

        until_ref = (self.until_commit or "").strip() or DEFAULT_UNTIL_REF
        until_sha = self.resolve(until_ref)
        if until_sha is None:
            self.logger.warning(
                f"Could not resolve '{until_ref}', walking history from all refs"
            )
        revisions.append(until_sha or ALL_REFS)

        if self.since_commit and self.since_commit.strip():
            since_sha = self.resolve(self.since_commit)
            if since_sha is not None:
                revisions.append(f"^{since_sha}")
            else:
                self.logger.info(
                    f"Could not resolve '{self.since_commit}', no lower bound applied"
                )

        return revisions

    def resolve(self, ref: str) -> str | None:
        """Resolve a hash, tag or branch name to a commit id, ``None`` if unknown."""
        try:
            return self.repo.commit(ref.strip()).hexsha
        except (BadName, BadObject, GitCommandError, IndexError, ValueError):
            return None

    def parse_commit(self, commit: Commit) -> CommitAttribution:
        """Build the attribution record for one commit."""
        trailers = extract_trailers(commit.message)

        return CommitAttribution(
            commit_hash=commit.hexsha,
            author=commit.author.name,
            author_email=commit.author.email,
            commit_time=datetime.fromtimestamp(commit.committed_date, tz=timezone.utc),
            message=commit.summary,
            ai_assisted=is_ai_assisted(trailers, self.custom_ai_tool_trailers),
            ai_tool=extract_ai_tool(trailers, self.custom_ai_tool_trailers),
            ai_confidence=extract_ai_confidence(trailers),
            files_changed=self.get_files_changed(commit),
        )

    def get_files_changed(self, commit: Commit) -> list[str]:
        """Paths changed between the first parent and ``commit``.

        Root commits report no files. Deleted files are reported by their old
        path. A diff failure is logged and yields an empty list.
        """
        if not commit.parents:
            return []

        try:
            diffs = commit.parents[0].diff(commit, no_renames=True)
        except (GitCommandError, ValueError, OSError) as e:
            self.logger.warning(
                f"Failed to get files changed for commit {commit.hexsha[:7]}: {e}"
            )
            return []

        files = []
        for diff in diffs:
            path = diff.a_path if diff.deleted_file else diff.b_path
            files.append(path or diff.a_path)

        if self.exclude_patterns:
            files = [path for path in files if not self._is_excluded(path)]

        return files

    def _is_excluded(self, path: str) -> bool:
        return any(fnmatch(path, pattern) for pattern in self.exclude_patterns)

    def get_current_branch(self) -> str:
        """Name of the checked-out branch.

        Raises:
            GitRepositoryError: If HEAD is detached or cannot be read
        """
        try:
            return self.repo.active_branch.name
        except TypeError as e:
            raise GitRepositoryError(
                f"HEAD is detached in {self.repo_path}, no current branch"
            ) from e

    def get_head_commit(self) -> str | None:
        """Full hash of HEAD, ``None`` when it cannot be resolved."""
        return self.resolve(DEFAULT_UNTIL_REF)


class AttributionAnalyzer:
    """
    Configuration-driven attribution run: walks history, builds the report
    and enforces the configured attribution requirements.
    """

    def __init__(self, repo_path: str | Path = "."):
        """Initialize analyzer.

        Args:
            repo_path: Path to the repository working tree
        """
        self.logger = get_logger(__name__)
        self.repo_path = Path(repo_path)

    def analyze(self, config: AttributionConfig) -> AttributionReport:
        """Walk the repository and build the attribution report."""
        parser = GitCommitParser(
            self.repo_path,
            max_commits=config.max_commits,
            since_commit=config.since_commit,
            until_commit=config.until_commit,
            custom_ai_tool_trailers=config.custom_ai_tool_trailers,
            exclude_patterns=config.exclude_patterns,
        )

        with parser:
            commits = parser.parse_commits()
            try:
                branch = parser.get_current_branch()
            except GitRepositoryError as e:
                self.logger.warning(f"{e}; reporting branch as {DEFAULT_UNTIL_REF}")
                branch = DEFAULT_UNTIL_REF
            head_commit = parser.get_head_commit()

        return build_report(
            project_name=config.project_name or self.repo_path.resolve().name,
            project_version=config.project_version,
            branch=branch,
            head_commit=head_commit,
            analyzed_range=config.describe_range(),
            commits=commits,
        )

    def validate_attribution(
        self, report: AttributionReport, config: AttributionConfig
    ) -> None:
        """Enforce the configured minimum attribution percentage.

        Raises:
            AttributionThresholdError: If the AI-assisted percentage is below
                ``min_attribution_percentage`` and enforcement is enabled
        """
        if not config.fail_on_no_attribution:
            return

        actual = report.ai_assisted_percentage
        minimum = config.min_attribution_percentage
        if actual < minimum:
            raise AttributionThresholdError(
                f"AI attribution percentage ({actual:.1f}%) is below required "
                f"minimum ({minimum:.1f}%). Ensure commits include AI-Tool or "
                "AI-Assisted trailers."
            )

        if report.ai_assisted_commits == 0 and report.total_commits > 0:
            self.logger.warning(
                "No AI-attributed commits found. Consider adding git trailers "
                "to track AI assistance."
            )
