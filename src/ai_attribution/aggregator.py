"""
Aggregation of commit attributions into a project-wide report.
"""

from collections.abc import Iterable
from datetime import datetime, timezone
from types import MappingProxyType

from ..shared_utilities import get_logger, trace_operation
from .data_models import AiTool, AttributionReport, CommitAttribution, ModuleStats

logger = get_logger(__name__)

# Files below this marker are grouped by package instead of directory
SOURCE_ROOT_MARKER = "src/main/java/"
ROOT_MODULE = "root"


def percentage(part: int, total: int) -> float:
    """Share of ``part`` in ``total`` as a percentage, 0.0 for an empty total."""
    return (part * 100.0) / total if total > 0 else 0.0


def extract_module(file_path: str) -> str:
    """Derive the module key for a repository-relative path.

    ``src/main/java/com/bank/payments/Service.java`` -> ``com.bank.payments``;
    ``docs/guide/intro.md`` -> ``docs/guide``; ``README.md`` -> ``root``.
    """
    marker_index = file_path.find(SOURCE_ROOT_MARKER)
    if marker_index >= 0:
        package_path = file_path[marker_index + len(SOURCE_ROOT_MARKER) :]
        last_slash = package_path.rfind("/")
        if last_slash > 0:
            return package_path[:last_slash].replace("/", ".")

    last_slash = file_path.rfind("/")
    return file_path[:last_slash] if last_slash > 0 else ROOT_MODULE


def compute_commits_by_tool(
    commits: Iterable[CommitAttribution],
) -> dict[AiTool, int]:
    """Count assisted commits per tool, in ``AiTool`` declaration order."""
    counts: dict[AiTool, int] = {}
    for commit in commits:
        if commit.ai_assisted:
            counts[commit.ai_tool] = counts.get(commit.ai_tool, 0) + 1

    return {tool: counts[tool] for tool in AiTool if tool in counts}


def compute_module_breakdown(
    commits: Iterable[CommitAttribution],
) -> dict[str, ModuleStats]:
    """Count distinct files per module and how many of them were AI-assisted.

    A file is classified by the first commit that touches it in iteration
    order; later commits touching the same file do not reclassify it.
    """
    seen_files: dict[str, set[str]] = {}
    assisted_files: dict[str, int] = {}

    for commit in commits:
        for file_path in commit.files_changed:
            module = extract_module(file_path)
            seen = seen_files.setdefault(module, set())
            assisted_files.setdefault(module, 0)
            if file_path in seen:
                continue
            seen.add(file_path)
            if commit.ai_assisted:
                assisted_files[module] += 1

    return {
        module: ModuleStats(
            module_name=module,
            total_files=len(files),
            ai_assisted_files=assisted_files[module],
            ai_assisted_percentage=percentage(assisted_files[module], len(files)),
        )
        for module, files in seen_files.items()
    }


def build_report(
    project_name: str,
    project_version: str,
    branch: str | None,
    head_commit: str | None,
    analyzed_range: str,
    commits: Iterable[CommitAttribution] | None,
) -> AttributionReport:
    """Build an immutable ``AttributionReport`` from walked commits.

    The generation timestamp is taken here; all statistics are computed
    once from the given commits.
    """
    with trace_operation(
        "build_attribution_report", {"project": project_name}
    ):
        commit_list = tuple(commits or ())

        total_commits = len(commit_list)
        ai_assisted_commits = 0
        total_files_changed = 0
        ai_assisted_files_changed = 0
        for commit in commit_list:
            total_files_changed += commit.file_count
            if commit.ai_assisted:
                ai_assisted_commits += 1
                ai_assisted_files_changed += commit.file_count

        report = AttributionReport(
            project_name=project_name,
            project_version=project_version,
            branch=branch,
            head_commit=head_commit,
            generated_at=datetime.now(timezone.utc),
            analyzed_range=analyzed_range,
            commits=commit_list,
            total_commits=total_commits,
            ai_assisted_commits=ai_assisted_commits,
            ai_assisted_percentage=percentage(ai_assisted_commits, total_commits),
            total_files_changed=total_files_changed,
            ai_assisted_files_changed=ai_assisted_files_changed,
            commits_by_tool=MappingProxyType(compute_commits_by_tool(commit_list)),
            module_breakdown=MappingProxyType(compute_module_breakdown(commit_list)),
        )

        logger.debug(
            "Attribution report built",
            commits=total_commits,
            ai_assisted=ai_assisted_commits,
            modules=len(report.module_breakdown),
        )

        return report
