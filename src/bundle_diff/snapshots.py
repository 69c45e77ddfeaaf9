"""Reading lock file snapshots out of git history."""

import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import git  # GitPython
import structlog

from bundle_diff.errors import SnapshotSourceError

log = structlog.get_logger("bundle_diff.snapshots")


class SnapshotSource:
    """Reads a lock file as it existed at any ref of a local git repository."""

    def __init__(self, repo_path: str | Path = ".", lockfile: str = "Gemfile.lock") -> None:
        self.lockfile = lockfile
        try:
            self._repo = git.Repo(str(repo_path), search_parent_directories=True)
        except (git.exc.InvalidGitRepositoryError, git.exc.NoSuchPathError) as e:
            raise SnapshotSourceError(f"not a git repository: {repo_path}") from e

    @property
    def working_dir(self) -> Optional[Path]:
        wd = self._repo.working_tree_dir
        return Path(wd) if wd else None

    def read(self, ref: str) -> str:
        """Return the lock file text at ``ref`` (``git show <ref>:<lockfile>``)."""
        log.debug("snapshot.read", ref=ref, lockfile=self.lockfile)
        try:
            return self._repo.git.show(f"{ref}:{self.lockfile}")
        except git.exc.GitCommandError as e:
            stderr = (e.stderr or "").strip().removeprefix("stderr: ").strip("'\n ")
            raise SnapshotSourceError(
                f"cannot read {self.lockfile} at {ref!r}: {stderr or e}"
            ) from e


# ── Archiving ─────────────────────────────────────────────────────────────

def slugify(ref: str) -> str:
    """Lower-case a ref; runs of anything but letters, digits, ``_`` and ``-`` become one ``-``."""
    slug = re.sub(r"[^a-z0-9_-]+", "-", ref.lower())
    return re.sub(r"-{2,}", "-", slug).strip("-")


def archive_snapshots(
    base_dir: str | Path,
    source: str,
    target: str,
    source_text: str,
    target_text: str,
    now: Optional[datetime] = None,
) -> tuple[Path, Path]:
    """Save both lock files under ``<base>/<source>/<target>/<timestamp>/``.

    Returns the paths of the written source and target files.
    """
    csource, ctarget = slugify(source), slugify(target)
    stamp = (now or datetime.now(timezone.utc)).isoformat(timespec="milliseconds")
    out_dir = Path(base_dir) / csource / ctarget / stamp.replace(":", "-")
    out_dir.mkdir(parents=True, exist_ok=True)

    source_path = out_dir / f"Gemfile.{csource}.lock"
    target_path = out_dir / f"Gemfile.{ctarget}.lock"
    source_path.write_text(_with_newline(source_text))
    target_path.write_text(_with_newline(target_text))
    log.info("snapshot.archived", source=str(source_path), target=str(target_path))
    return source_path, target_path


def _with_newline(text: str) -> str:
    return text if not text or text.endswith("\n") else text + "\n"
