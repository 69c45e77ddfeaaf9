"""Data models for bundle-diff."""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


# ── Lock file snapshots ───────────────────────────────────────────────────

class Spec(BaseModel):
    """A resolved gem at one snapshot."""

    model_config = ConfigDict(frozen=True)

    name: str
    version: str
    source: str = ""
    platform: Optional[str] = None
    remote: Optional[str] = None


class Snapshot(BaseModel):
    """Parsed lock file: resolved specs plus the gems declared in the Gemfile."""

    model_config = ConfigDict(frozen=True)

    specs: dict[str, Spec] = Field(default_factory=dict)
    dependencies: frozenset[str] = Field(default_factory=frozenset)

    def is_declared(self, name: str) -> bool:
        return name in self.dependencies


# ── Ruby Toolbox metadata ─────────────────────────────────────────────────

class HealthStatus(BaseModel):
    """One health flag raised by the Ruby Toolbox for a project."""

    key: str
    label: Optional[str] = None
    level: Optional[str] = None


class Health(BaseModel):
    overall_level: Optional[str] = None
    statuses: list[HealthStatus] = Field(default_factory=list)


class RubygemStats(BaseModel):
    downloads: Optional[int] = None
    reverse_dependencies_count: Optional[int] = None


class Rubygem(BaseModel):
    """rubygems.org data as relayed by the Ruby Toolbox."""

    name: Optional[str] = None
    current_version: Optional[str] = None
    latest_release_on: Optional[date] = None
    stats: Optional[RubygemStats] = None


class GithubRepoStats(BaseModel):
    forks_count: Optional[int] = None
    stargazers_count: Optional[int] = None
    watchers_count: Optional[int] = None


class StateCounts(BaseModel):
    """Issue or pull request totals split by state."""

    total_count: Optional[int] = None
    closed_count: Optional[int] = None
    open_count: Optional[int] = None


class GithubRepo(BaseModel):
    """GitHub repository activity as relayed by the Ruby Toolbox."""

    path: Optional[str] = None
    url: Optional[str] = None
    average_recent_committed_at: Optional[datetime] = None
    repo_pushed_at: Optional[datetime] = None
    is_archived: Optional[bool] = None
    is_fork: Optional[bool] = None
    stats: Optional[GithubRepoStats] = None
    issues: Optional[StateCounts] = None
    pull_requests: Optional[StateCounts] = None


class MetadataRecord(BaseModel):
    """Health and popularity data for one gem. Unknown fields are ignored."""

    name: str
    score: Optional[float] = None
    health: Optional[Health] = None
    rubygem: Optional[Rubygem] = None
    github_repo: Optional[GithubRepo] = None

    @property
    def status_keys(self) -> list[str]:
        if self.health is None:
            return []
        return [s.key for s in self.health.statuses]


class HealthStatusCatalog(BaseModel):
    """Sorted set of every health status key seen during one run.

    Defines the dynamic columns of the report, so it is built only after
    every metadata batch has been fetched.
    """

    model_config = ConfigDict(frozen=True)

    names: tuple[str, ...] = ()

    @classmethod
    def from_records(cls, records: list[MetadataRecord]) -> "HealthStatusCatalog":
        seen: set[str] = set()
        for record in records:
            seen.update(record.status_keys)
        return cls(names=tuple(sorted(seen)))

    def __len__(self) -> int:
        return len(self.names)

    def flag_vector(self, metadata: Optional[MetadataRecord]) -> list[Optional[bool]]:
        """One entry per catalog name; all ``None`` when there is no health data."""
        if metadata is None or metadata.health is None:
            return [None] * len(self.names)
        present = set(metadata.status_keys)
        return [name in present for name in self.names]


# ── Comparison ────────────────────────────────────────────────────────────

class ChangeType(str, Enum):
    """How a gem changed between the two snapshots."""

    added = "added"
    removed = "removed"
    updated = "updated"
    unchanged = "unchanged"


class SemanticDelta(str, Enum):
    """Which version component moved first, and in which direction."""

    major_up = "major+"
    major_down = "major-"
    minor_up = "minor+"
    minor_down = "minor-"
    patch_up = "patch+"
    patch_down = "patch-"
    rest = "rest"


class SourceType(str, Enum):
    """Where the Gemfile pulls a gem from."""

    gem = "gem"
    github = "github"
    subfolder = "subfolder"


class ComparisonRecord(BaseModel):
    """Reconciled before/after state of one gem."""

    model_config = ConfigDict(frozen=True)

    name: str
    spec_before: Optional[Spec] = None
    spec_after: Optional[Spec] = None
    change_type: ChangeType
    semantic_delta: Optional[SemanticDelta] = None
    declared_in_manifest: bool = False
    source_type: Optional[SourceType] = None
    source_url: Optional[str] = None
    metadata: Optional[MetadataRecord] = None

    @property
    def version_before(self) -> Optional[str]:
        return self.spec_before.version if self.spec_before else None

    @property
    def version_after(self) -> Optional[str]:
        return self.spec_after.version if self.spec_after else None


class Report(BaseModel):
    """Rendered comparison table: a header plus sorted rows of text cells."""

    header: list[str] = Field(default_factory=list)
    rows: list[list[str]] = Field(default_factory=list)

    def lines(self) -> list[str]:
        """Tab-separated lines, header first."""
        return ["\t".join(cols) for cols in [self.header, *self.rows]]

    def column(self, name: str) -> list[str]:
        idx = self.header.index(name)
        return [row[idx] for row in self.rows]
