"""Report Builder — turn comparison records into a sorted TSV table."""

from collections.abc import Sequence
from datetime import date, datetime
from enum import Enum
from typing import Any, Optional

from bundle_diff.models import ComparisonRecord, HealthStatusCatalog, MetadataRecord, Report

LEADING_COLUMNS = [
    "Name",
    "SourceVersion",
    "TargetVersion",
    "ChangeType",
    "UpdateSemanticType",
    "InGemfile",
    "GemfileSource",
    "GithubUrl",
    "RubyToolboxScore",
    "HealthOverallLevel",
]

TRAILING_COLUMNS = [
    "RubygemLatestRelease",
    "RubygemDownloads",
    "RubygemReverseDependenciesCount",
    "GithubAverageRecentCommittedAt",
    "GithubLatestRepoPush",
    "GithubArchived?",
    "GithubIsFork?",
    "GithubForksCount",
    "GithubStars",
    "GithubWatchers",
    "GithubIssuesTotal",
    "GithubIssuesClosed",
    "GithubIssuesOpen",
    "GithubPullRequestsTotal",
    "GithubPullRequestsClosed",
    "GithubPullRequestsOpen",
]


def build_header(catalog: HealthStatusCatalog) -> list[str]:
    return [*LEADING_COLUMNS, *catalog.names, *TRAILING_COLUMNS]


def build_report(
    records: Sequence[ComparisonRecord],
    catalog: HealthStatusCatalog,
) -> Report:
    """Render every record against the finalized catalog and sort the rows.

    Rows are ordered by their full tuple of rendered cells, not by name alone.
    """
    rows = [[render(v) for v in row_values(r, catalog)] for r in records]
    rows.sort()
    return Report(header=build_header(catalog), rows=rows)


def render_tsv(report: Report) -> str:
    return "\n".join(report.lines()) + "\n"


def row_values(record: ComparisonRecord, catalog: HealthStatusCatalog) -> list[Any]:
    """Raw cell values in header order (``None`` for anything unknown)."""
    meta = record.metadata
    return [
        record.name,
        record.version_before,
        record.version_after,
        record.change_type,
        record.semantic_delta,
        record.declared_in_manifest,
        record.source_type,
        record.source_url,
        meta.score if meta else None,
        meta.health.overall_level if meta and meta.health else None,
        *catalog.flag_vector(meta),
        *_popularity_values(meta),
    ]


def _popularity_values(meta: Optional[MetadataRecord]) -> list[Any]:
    gem = meta.rubygem if meta else None
    gem_stats = gem.stats if gem else None
    repo = meta.github_repo if meta else None
    repo_stats = repo.stats if repo else None
    issues = repo.issues if repo else None
    pulls = repo.pull_requests if repo else None
    return [
        gem.latest_release_on if gem else None,
        gem_stats.downloads if gem_stats else None,
        gem_stats.reverse_dependencies_count if gem_stats else None,
        repo.average_recent_committed_at if repo else None,
        repo.repo_pushed_at if repo else None,
        repo.is_archived if repo else None,
        repo.is_fork if repo else None,
        repo_stats.forks_count if repo_stats else None,
        repo_stats.stargazers_count if repo_stats else None,
        repo_stats.watchers_count if repo_stats else None,
        issues.total_count if issues else None,
        issues.closed_count if issues else None,
        issues.open_count if issues else None,
        pulls.total_count if pulls else None,
        pulls.closed_count if pulls else None,
        pulls.open_count if pulls else None,
    ]


def render(value: Any) -> str:
    """Render one cell. Missing values become an empty field."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return str(value.value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)
