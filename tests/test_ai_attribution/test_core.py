"""Tests for history walking and the attribution analyzer."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest
from git import Repo
from git.exc import GitCommandError

from src.ai_attribution.aggregator import build_report
from src.ai_attribution.config import AttributionConfig
from src.ai_attribution.core import AttributionAnalyzer, GitCommitParser
from src.ai_attribution.data_models import AiTool
from src.ai_attribution.exceptions import (
    AttributionThresholdError,
    GitRepositoryError,
)

APP_PATH = "src/main/java/com/bank/App.java"
SERVICE_PATH = "src/main/java/com/bank/payments/PaymentService.java"


def _walk(git_repo, **kwargs):
    with GitCommitParser(git_repo.path, **kwargs) as parser:
        return parser.parse_commits()


def _hashes(attributions):
    return [attribution.commit_hash for attribution in attributions]


class TestParseCommits:
    """Test GitCommitParser.parse_commits."""

    def test_newest_first(self, git_repo):
        commits = _walk(git_repo)

        assert _hashes(commits) == [
            git_repo.removal.hexsha,
            git_repo.docs.hexsha,
            git_repo.payments.hexsha,
            git_repo.root.hexsha,
        ]

    def test_attribution_fields(self, git_repo):
        removal, docs, payments, root = _walk(git_repo)

        assert payments.ai_assisted is True
        assert payments.ai_tool is AiTool.GITHUB_COPILOT
        assert payments.ai_confidence == "high"
        assert payments.message == "Add payment service"
        assert payments.author == "Alice Smith"
        assert payments.author_email == "alice@example.com"

        assert removal.ai_assisted is True
        assert removal.ai_tool is AiTool.CLAUDE
        assert removal.ai_confidence is None

        assert docs.ai_assisted is False
        assert docs.ai_tool is AiTool.NONE
        assert docs.author == "Bob Jones"
        assert docs.author_email == "bob@example.com"

        assert root.ai_assisted is False
        assert root.message == "Initial commit"

    def test_commit_time_is_utc(self, git_repo):
        commits = _walk(git_repo)
        expected = datetime.fromtimestamp(
            git_repo.docs.committed_date, tz=timezone.utc
        )

        assert commits[1].commit_time == expected
        assert commits[1].commit_time.tzinfo is timezone.utc

    def test_files_changed(self, git_repo):
        removal, docs, payments, root = _walk(git_repo)

        assert list(payments.files_changed) == ["README.md", SERVICE_PATH]
        assert list(docs.files_changed) == ["docs/guide.md"]
        assert list(removal.files_changed) == [APP_PATH]
        assert root.files_changed == ()

    def test_max_commits(self, git_repo):
        commits = _walk(git_repo, max_commits=2)

        assert _hashes(commits) == [git_repo.removal.hexsha, git_repo.docs.hexsha]

    def test_since_tag_is_exclusive(self, git_repo):
        commits = _walk(git_repo, since_commit="v1")

        assert _hashes(commits) == [git_repo.removal.hexsha, git_repo.docs.hexsha]

    def test_until_is_inclusive(self, git_repo):
        commits = _walk(git_repo, until_commit="v1")

        assert _hashes(commits) == [git_repo.payments.hexsha, git_repo.root.hexsha]

    def test_blank_until_defaults_to_head(self, git_repo):
        git_repo.repo.git.checkout(git_repo.docs.hexsha)

        commits = _walk(git_repo, until_commit="  ")

        assert _hashes(commits)[0] == git_repo.docs.hexsha
        assert len(commits) == 3

    def test_since_and_until_hashes(self, git_repo):
        commits = _walk(
            git_repo,
            since_commit=git_repo.payments.hexsha,
            until_commit=git_repo.docs.hexsha,
        )

        assert _hashes(commits) == [git_repo.docs.hexsha]

    def test_unresolvable_since_applies_no_bound(self, git_repo):
        commits = _walk(git_repo, since_commit="no-such-tag")

        assert len(commits) == 4

    def test_unresolvable_until_walks_all_refs(self, git_repo):
        commits = _walk(git_repo, until_commit="no-such-branch")

        assert set(_hashes(commits)) == {
            git_repo.removal.hexsha,
            git_repo.docs.hexsha,
            git_repo.payments.hexsha,
            git_repo.root.hexsha,
        }

    @pytest.mark.parametrize("bound", ["until_commit", "since_commit"])
    @pytest.mark.parametrize("ref", ["HEAD@{99}", "no-such-ref", "HEAD~99"])
    def test_out_of_range_refs_degrade(self, git_repo, bound, ref):
        commits = _walk(git_repo, **{bound: ref})

        assert set(_hashes(commits)) == {
            git_repo.removal.hexsha,
            git_repo.docs.hexsha,
            git_repo.payments.hexsha,
            git_repo.root.hexsha,
        }

    def test_exclude_patterns(self, git_repo):
        removal, docs, payments, _ = _walk(
            git_repo, exclude_patterns=["docs/*", "*.md"]
        )

        assert docs.files_changed == ()
        assert list(payments.files_changed) == [SERVICE_PATH]
        assert list(removal.files_changed) == [APP_PATH]

    def test_custom_tool_trailer(self, git_repo):
        git_repo.commit(
            "Tune batch size\n\nGenerated-By: Devin\n",
            files={"config/batch.yml": "size: 50\n"},
        )

        plain = _walk(git_repo, max_commits=1)[0]
        custom = _walk(
            git_repo, max_commits=1, custom_ai_tool_trailers=["Generated-By"]
        )[0]

        assert plain.ai_assisted is False
        assert custom.ai_assisted is True
        assert custom.ai_tool is AiTool.DEVIN

    def test_git_failure_is_wrapped(self, git_repo):
        with GitCommitParser(git_repo.path) as parser:
            with patch.object(
                Repo, "iter_commits", side_effect=GitCommandError("rev-list", 128)
            ):
                with pytest.raises(GitRepositoryError):
                    parser.parse_commits()


class TestFilesChanged:
    """Test GitCommitParser.get_files_changed edge cases."""

    def test_diff_failure_yields_empty_list(self, tmp_path):
        parser = GitCommitParser(tmp_path)
        commit = MagicMock()
        commit.hexsha = "abc123def4567890"
        commit.parents[0].diff.side_effect = GitCommandError("diff", 128)

        assert parser.get_files_changed(commit) == []

    def test_root_commit_has_no_files(self, tmp_path):
        parser = GitCommitParser(tmp_path)
        commit = MagicMock()
        commit.parents = ()

        assert parser.get_files_changed(commit) == []


class TestRepositoryAccess:
    """Test repository opening, branch and head queries."""

    def test_not_a_repository(self, tmp_path):
        plain_dir = tmp_path / "plain"
        plain_dir.mkdir()

        with pytest.raises(GitRepositoryError, match="Not a git repository"):
            GitCommitParser(plain_dir).open()

    def test_missing_path(self, tmp_path):
        with pytest.raises(GitRepositoryError):
            GitCommitParser(tmp_path / "missing").open()

    def test_repo_requires_open(self, tmp_path):
        with pytest.raises(GitRepositoryError, match="not open"):
            GitCommitParser(tmp_path).repo

    def test_close_releases_handle(self, git_repo):
        parser = GitCommitParser(git_repo.path)
        with parser:
            assert parser.repo is not None

        with pytest.raises(GitRepositoryError):
            parser.repo

    def test_current_branch(self, git_repo):
        with GitCommitParser(git_repo.path) as parser:
            assert parser.get_current_branch() == git_repo.repo.active_branch.name

    def test_detached_head(self, git_repo):
        git_repo.repo.git.checkout(git_repo.payments.hexsha)

        with GitCommitParser(git_repo.path) as parser:
            with pytest.raises(GitRepositoryError, match="detached"):
                parser.get_current_branch()

    def test_head_commit(self, git_repo):
        with GitCommitParser(git_repo.path) as parser:
            assert parser.get_head_commit() == git_repo.removal.hexsha

    def test_resolve(self, git_repo):
        with GitCommitParser(git_repo.path) as parser:
            assert parser.resolve("v1") == git_repo.payments.hexsha
            assert parser.resolve(" v1 ") == git_repo.payments.hexsha
            assert parser.resolve("no-such-tag") is None


class TestAttributionAnalyzer:
    """Test AttributionAnalyzer."""

    def test_analyze(self, git_repo):
        report = AttributionAnalyzer(git_repo.path).analyze(AttributionConfig())

        assert report.project_name == "payments"
        assert report.project_version == "unspecified"
        assert report.branch == git_repo.repo.active_branch.name
        assert report.head_commit == git_repo.removal.hexsha
        assert report.analyzed_range == "last 100 commits up to HEAD"
        assert report.total_commits == 4
        assert report.ai_assisted_commits == 2
        assert report.ai_assisted_percentage == 50.0
        assert report.total_files_changed == 4
        assert report.ai_assisted_files_changed == 3
        assert dict(report.commits_by_tool) == {
            AiTool.GITHUB_COPILOT: 1,
            AiTool.CLAUDE: 1,
        }
        assert list(report.module_breakdown) == [
            "com.bank",
            "docs",
            "root",
            "com.bank.payments",
        ]
        assert report.module_breakdown["docs"].ai_assisted_files == 0
        assert report.module_breakdown["com.bank"].ai_assisted_files == 1

    def test_analyze_with_range_and_name(self, git_repo):
        config = AttributionConfig(
            since_commit="v1", project_name="ledger", project_version="2.0.0"
        )

        report = AttributionAnalyzer(git_repo.path).analyze(config)

        assert report.project_name == "ledger"
        assert report.project_version == "2.0.0"
        assert report.analyzed_range == "v1..HEAD"
        assert report.total_commits == 2

    def test_analyze_detached_head_reports_head(self, git_repo):
        git_repo.repo.git.checkout(git_repo.docs.hexsha)

        report = AttributionAnalyzer(git_repo.path).analyze(AttributionConfig())

        assert report.branch == "HEAD"
        assert report.head_commit == git_repo.docs.hexsha
        assert report.total_commits == 3

    def test_analyze_not_a_repository(self, tmp_path):
        with pytest.raises(GitRepositoryError):
            AttributionAnalyzer(tmp_path).analyze(AttributionConfig())


class TestValidateAttribution:
    """Test AttributionAnalyzer.validate_attribution."""

    @pytest.fixture
    def half_assisted_report(self, make_commit):
        return build_report(
            project_name="payments",
            project_version="1.0.0",
            branch="main",
            head_commit=None,
            analyzed_range="last 100 commits up to HEAD",
            commits=[make_commit(True, AiTool.CLAUDE), make_commit()],
        )

    def test_disabled_by_default(self, make_commit):
        report = build_report("p", "1", "main", None, "r", [make_commit()])

        AttributionAnalyzer().validate_attribution(
            report, AttributionConfig(min_attribution_percentage=90.0)
        )

    def test_below_minimum_fails(self, half_assisted_report):
        config = AttributionConfig(
            fail_on_no_attribution=True, min_attribution_percentage=60.0
        )

        with pytest.raises(AttributionThresholdError) as exc_info:
            AttributionAnalyzer().validate_attribution(half_assisted_report, config)

        assert "(50.0%)" in str(exc_info.value)
        assert "(60.0%)" in str(exc_info.value)

    def test_at_minimum_passes(self, half_assisted_report):
        config = AttributionConfig(
            fail_on_no_attribution=True, min_attribution_percentage=50.0
        )

        AttributionAnalyzer().validate_attribution(half_assisted_report, config)

    def test_no_assisted_commits_only_warns_at_zero_minimum(self, make_commit):
        report = build_report("p", "1", "main", None, "r", [make_commit()])
        config = AttributionConfig(fail_on_no_attribution=True)

        AttributionAnalyzer().validate_attribution(report, config)
