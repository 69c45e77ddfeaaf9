"""Pytest configuration and fixtures."""

import git
import pytest

from bundle_diff.models import MetadataRecord, Snapshot, Spec


@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio backend for async tests."""
    return "asyncio"


BEFORE_LOCK = """\
GIT
  remote: https://github.com/rails/rails.git
  revision: 0123456789abcdef0123456789abcdef01234567
  branch: main
  specs:
    rails (7.0.4)
      actionpack (= 7.0.4)

PATH
  remote: engines/billing
  specs:
    billing (0.1.0)

GEM
  remote: https://rubygems.org/
  specs:
    actionpack (7.0.4)
      rack (~> 2.0)
    nokogiri (1.13.10-x86_64-linux)
    pry (0.14.1)
    rack (2.2.4)

PLATFORMS
  x86_64-linux

DEPENDENCIES
  billing!
  pry (~> 0.14)
  rails!

BUNDLED WITH
   2.3.26
"""

AFTER_LOCK = """\
GIT
  remote: https://github.com/rails/rails.git
  revision: fedcba9876543210fedcba9876543210fedcba98
  branch: main
  specs:
    rails (7.1.0)
      actionpack (= 7.1.0)

PATH
  remote: engines/billing
  specs:
    billing (0.1.0)

GEM
  remote: https://rubygems.org/
  specs:
    actionpack (7.1.0)
      rack (>= 2.2.4)
    nokogiri (1.14.0-x86_64-linux)
    rack (3.0.0)
    zeitwerk (2.6.8)

PLATFORMS
  x86_64-linux

DEPENDENCIES
  billing!
  rails!
  zeitwerk

BUNDLED WITH
   2.4.10
"""


@pytest.fixture
def before_lock_text():
    return BEFORE_LOCK


@pytest.fixture
def after_lock_text():
    return AFTER_LOCK


def make_snapshot(versions, declared=(), source="locally installed gems"):
    """Snapshot from a {name: version} mapping, all from one source."""
    return Snapshot(
        specs={n: Spec(name=n, version=v, source=source) for n, v in versions.items()},
        dependencies=frozenset(declared),
    )


def make_project(name, statuses=(), **extra):
    """Ruby Toolbox project payload as returned by the compare endpoint."""
    payload = {
        "name": name,
        "score": 42.5,
        "health": {
            "overall_level": "green",
            "statuses": [{"key": k, "label": k.replace("_", " "), "level": "yellow"} for k in statuses],
        },
        "rubygem": {
            "name": name,
            "latest_release_on": "2024-03-01",
            "stats": {"downloads": 1000, "reverse_dependencies_count": 12},
        },
        "github_repo": {
            "path": f"acme/{name}",
            "url": f"https://github.com/acme/{name}",
            "average_recent_committed_at": "2024-02-15T10:00:00Z",
            "repo_pushed_at": "2024-03-02T08:30:00Z",
            "is_archived": False,
            "is_fork": False,
            "stats": {"forks_count": 3, "stargazers_count": 50, "watchers_count": 7},
            "issues": {"total_count": 10, "closed_count": 8, "open_count": 2},
            "pull_requests": {"total_count": 20, "closed_count": 15, "open_count": 5},
        },
    }
    payload.update(extra)
    return payload


def make_record(name, statuses=(), **extra):
    return MetadataRecord.model_validate(make_project(name, statuses, **extra))


GIT_AUTHOR = git.Actor("Test Author", "dev@test.com")


@pytest.fixture
def lock_repo(tmp_path):
    """A git repo with two commits of Gemfile.lock, tagged v1 and v2."""
    repo = git.Repo.init(tmp_path)
    lock = tmp_path / "Gemfile.lock"

    lock.write_text(BEFORE_LOCK)
    repo.index.add(["Gemfile.lock"])
    repo.index.commit("initial lock", author=GIT_AUTHOR, committer=GIT_AUTHOR)
    repo.create_tag("v1")

    lock.write_text(AFTER_LOCK)
    repo.index.add(["Gemfile.lock"])
    repo.index.commit("bump gems", author=GIT_AUTHOR, committer=GIT_AUTHOR)
    repo.create_tag("v2")
    return tmp_path
