"""
Main CLI entry point for AI attribution analysis.
"""

import click
from dotenv import load_dotenv

from ..shared_utilities import (
    configure_logging,
    get_logger,
    log_operation_error,
    trace_function,
)
from .config import SUPPORTED_OUTPUT_FORMATS, AttributionConfigManager
from .core import AttributionAnalyzer
from .exceptions import AttributionError
from .output_formatter import AttributionReportFormatter

# Load environment variables from .env file
load_dotenv()


@click.command()
@click.option(
    "--repo",
    "repo_path",
    default=".",
    type=click.Path(file_okay=False),
    help="Path to the git repository",
    show_default=True,
)
@click.option(
    "--max-commits",
    type=click.IntRange(min=1),
    envvar="AI_ATTRIBUTION_MAX_COMMITS",
    help="Maximum number of commits to analyze (default: 100)",
)
@click.option(
    "--since",
    "since_commit",
    envvar="AI_ATTRIBUTION_SINCE",
    help="Exclusive start of the range (commit, tag or branch)",
)
@click.option(
    "--until",
    "until_commit",
    envvar="AI_ATTRIBUTION_UNTIL",
    help="Inclusive end of the range (default: HEAD)",
)
@click.option(
    "--format",
    "output_formats",
    type=click.Choice(SUPPORTED_OUTPUT_FORMATS),
    multiple=True,
    help="Output format, repeatable (default: json and table)",
)
@click.option(
    "-o",
    "--output-dir",
    "output_directory",
    type=click.Path(file_okay=False),
    envvar="AI_ATTRIBUTION_OUTPUT_DIR",
    help="Directory for report files (default: build/reports/ai-attribution)",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(exists=True, dir_okay=False),
    help="Configuration file (default: <repo>/.ai-attribution.json)",
)
@click.option("--project-name", help="Project name (default: repository directory)")
@click.option("--project-version", help="Project version recorded in the report")
@click.option(
    "--fail-on-no-attribution/--no-fail-on-no-attribution",
    default=None,
    help="Fail when the AI attribution percentage is below the minimum",
)
@click.option(
    "--min-percentage",
    "min_attribution_percentage",
    type=click.FloatRange(0.0, 100.0),
    help="Minimum AI-assisted commit percentage",
)
@click.option(
    "--exclude",
    "exclude_patterns",
    multiple=True,
    help="Glob pattern for paths to leave out, repeatable",
)
@click.option(
    "--no-file-details",
    is_flag=True,
    help="Omit per-commit file lists from the JSON report",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Suppress the console summary",
)
@trace_function("ai_attribution_main", include_args=True)
def main(
    repo_path: str,
    max_commits: int | None,
    since_commit: str | None,
    until_commit: str | None,
    output_formats: tuple[str, ...],
    output_directory: str | None,
    config_file: str | None,
    project_name: str | None,
    project_version: str | None,
    fail_on_no_attribution: bool | None,
    min_attribution_percentage: float | None,
    exclude_patterns: tuple[str, ...],
    no_file_details: bool,
    quiet: bool,
) -> None:
    """
    Analyze git history for AI attribution trailers and report statistics.

    Commits declare AI assistance with trailers in the last paragraph of the
    message, e.g. "AI-Tool: claude" or "AI-Assisted: true".

    Examples:

        # Analyze the last 100 commits of the current repository
        ai-attribution

        # Analyze everything after a release tag as JSON only
        ai-attribution --since v1.0.0 --format json

        # Enforce a minimum share of attributed commits in CI
        ai-attribution --fail-on-no-attribution --min-percentage 10
    """
    configure_logging()
    logger = get_logger(__name__)

    try:
        config_manager = AttributionConfigManager(config_file, repo_path=repo_path)
        config = config_manager.get_config(
            max_commits=max_commits,
            since_commit=since_commit,
            until_commit=until_commit,
            output_formats=list(output_formats),
            output_directory=output_directory,
            project_name=project_name,
            project_version=project_version,
            fail_on_no_attribution=fail_on_no_attribution,
            min_attribution_percentage=min_attribution_percentage,
            exclude_patterns=list(exclude_patterns),
            include_file_details=False if no_file_details else None,
        )

        analyzer = AttributionAnalyzer(repo_path)
        formatter = AttributionReportFormatter()

        report = analyzer.analyze(config)

        if "table" in config.output_formats and not quiet:
            click.echo(formatter.format_table_output(report))

        analyzer.validate_attribution(report, config)

        for format_type in config.output_formats:
            output_path = formatter.save_to_file(
                report,
                config.output_directory,
                format_type,
                include_file_details=config.include_file_details,
            )
            logger.info(f"Generated {format_type.upper()} report: {output_path}")

        if not quiet:
            click.echo(f"AI attribution reports generated in: {config.output_directory}")

    except AttributionError as e:
        log_operation_error("attribution_analysis", e, repo=repo_path)
        click.echo(f"Error: {e}", err=True)
        raise click.Abort() from e


if __name__ == "__main__":
    main()
