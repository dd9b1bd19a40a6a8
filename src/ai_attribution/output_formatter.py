"""
Output formatting for AI attribution reports.
"""

import json
import math
from pathlib import Path
from typing import Any

from .data_models import AttributionReport, CommitAttribution

REPORT_BASENAME = "ai-attribution-report"
FILE_EXTENSIONS = {"json": "json", "table": "txt"}
BOX_WIDTH = 48


def round_half_up(value: float, digits: int = 2) -> float:
    """Round like a report reader expects: 66.665 -> 66.67."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


class AttributionReportFormatter:
    """Formats an ``AttributionReport`` for the console and for files."""

    def format_table_output(self, report: AttributionReport) -> str:
        """Format the report summary as a boxed table for console display."""
        rows = [
            ("Total Commits Analyzed:", f"{report.total_commits:>6}"),
            ("AI-Assisted Commits:", f"{report.ai_assisted_commits:>6}"),
            ("AI-Assisted Percentage:", f"{report.ai_assisted_percentage:>6.1f}%"),
            ("Total Files Changed:", f"{report.total_files_changed:>6}"),
            ("AI-Assisted Files:", f"{report.ai_assisted_files_changed:>6}"),
        ]

        lines = [
            "┌" + "─" * BOX_WIDTH + "┐",
            "│" + "AI ATTRIBUTION SUMMARY".center(BOX_WIDTH) + "│",
            "├" + "─" * BOX_WIDTH + "┤",
        ]
        for label, value in rows:
            lines.append("│" + f"  {label:<25} {value}".ljust(BOX_WIDTH) + "│")
        lines.append("└" + "─" * BOX_WIDTH + "┘")

        if report.commits_by_tool:
            lines.append("")
            lines.append("AI Tools Used:")
            for tool, count in report.commits_by_tool.items():
                lines.append(f"  - {tool.display_name}: {count} commits")

        return "\n".join(lines)

    def format_json_output(
        self, report: AttributionReport, include_file_details: bool = True
    ) -> str:
        """Format the full report as a JSON document."""
        output_data = {
            "metadata": {
                "projectName": report.project_name,
                "projectVersion": report.project_version,
                "branch": report.branch,
                "headCommit": report.head_commit,
                "generatedAt": report.generated_at.isoformat(),
                "analyzedRange": report.analyzed_range,
            },
            "summary": {
                "totalCommits": report.total_commits,
                "aiAssistedCommits": report.ai_assisted_commits,
                "aiAssistedPercentage": round_half_up(report.ai_assisted_percentage),
                "totalFilesChanged": report.total_files_changed,
                "aiAssistedFilesChanged": report.ai_assisted_files_changed,
            },
            "toolBreakdown": {
                tool.display_name: count
                for tool, count in report.commits_by_tool.items()
            },
            "moduleBreakdown": [
                {
                    "name": name,
                    "totalFiles": stats.total_files,
                    "aiAssistedFiles": stats.ai_assisted_files,
                    "aiAssistedPercentage": round_half_up(
                        stats.ai_assisted_percentage
                    ),
                }
                for name, stats in report.module_breakdown.items()
            ],
            "commits": [
                self._commit_to_dict(commit, include_file_details)
                for commit in report.commits
            ],
        }

        return json.dumps(output_data, indent=2, ensure_ascii=False)

    def _commit_to_dict(
        self, commit: CommitAttribution, include_file_details: bool
    ) -> dict[str, Any]:
        commit_dict: dict[str, Any] = {
            "hash": commit.short_hash,
            "fullHash": commit.commit_hash,
            "author": commit.author,
            "authorEmail": commit.author_email,
            "commitTime": commit.commit_time.isoformat() if commit.commit_time else None,
            "message": commit.message,
            "aiAssisted": commit.ai_assisted,
        }

        if commit.ai_assisted:
            commit_dict["aiTool"] = commit.ai_tool.display_name
            if commit.ai_confidence is not None:
                commit_dict["aiConfidence"] = commit.ai_confidence

        if include_file_details:
            commit_dict["filesChanged"] = list(commit.files_changed)
        commit_dict["fileCount"] = commit.file_count

        return commit_dict

    def format(
        self,
        report: AttributionReport,
        format_type: str,
        include_file_details: bool = True,
    ) -> str:
        if format_type == "json":
            return self.format_json_output(report, include_file_details)
        elif format_type == "table":
            return self.format_table_output(report)
        raise ValueError(f"Unsupported format: {format_type}")

    def save_to_file(
        self,
        report: AttributionReport,
        output_dir: str | Path,
        format_type: str = "json",
        include_file_details: bool = True,
    ) -> Path:
        """Write the formatted report into ``output_dir`` and return its path."""
        content = self.format(report, format_type, include_file_details)

        output_path = Path(output_dir) / (
            f"{REPORT_BASENAME}.{FILE_EXTENSIONS[format_type]}"
        )
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text(content + "\n", encoding="utf-8")

        return output_path
