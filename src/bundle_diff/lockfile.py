"""Gemfile.lock parsing.

Turns Bundler lock file text into a :class:`Snapshot`. Source descriptors use
the same wording Bundler prints for its sources, e.g. ``locally installed
gems`` for ``GEM`` sections or ``source at `engines/billing``` for ``PATH``.
"""

import re
from typing import Optional

import structlog

from bundle_diff.errors import LockfileParseError
from bundle_diff.models import Snapshot, Spec

log = structlog.get_logger("bundle_diff.lockfile")

SOURCE_SECTIONS = {"GEM", "GIT", "PATH"}
DEPENDENCIES_SECTION = "DEPENDENCIES"

_OPTION_RE = re.compile(r"^  (?P<key>[a-z_]+): (?P<value>.*)$")
_SPEC_RE = re.compile(
    r"^ {4}(?P<name>[^ ()]+) \((?P<version>[^-()]+)(?:-(?P<platform>[^()]+))?\)$"
)
_SPEC_DEPENDENCY_RE = re.compile(r"^ {6}\S")
_DEPENDENCY_RE = re.compile(r"^ {2}(?P<name>[^ ()!]+)(?: \((?P<requirement>[^()]*)\))?(?P<pinned>!)?$")


class _SourceBlock:
    """Options collected for one GEM / GIT / PATH section."""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        self.options: dict[str, str] = {}

    @property
    def remote(self) -> Optional[str]:
        return self.options.get("remote")

    def describe(self) -> str:
        if self.kind == "GIT":
            at = (
                self.options.get("branch")
                or self.options.get("tag")
                or self.options.get("ref")
            )
            revision = self.options.get("revision", "")[:7]
            ref = f"{at}@{revision}" if at and revision else (at or revision)
            return f"{self.remote} (at {ref})" if ref else str(self.remote)
        if self.kind == "PATH":
            return f"source at `{self.remote}`"
        return "locally installed gems"


def parse_lockfile(text: str) -> Snapshot:
    """Parse Gemfile.lock text into a Snapshot.

    Gems listed once per platform collapse to a single spec (the last one
    listed wins). Sections without a bearing on the comparison (``PLATFORMS``,
    ``RUBY VERSION``, ``BUNDLED WITH``, ``CHECKSUMS`` …) are skipped.

    Raises:
        LockfileParseError: on a spec or dependency line that cannot be read,
            or on indented content before any section header.
    """
    specs: dict[str, Spec] = {}
    dependencies: set[str] = set()

    section: Optional[str] = None
    block: Optional[_SourceBlock] = None
    in_specs = False

    for lineno, raw in enumerate(text.splitlines(), start=1):
        line = raw.rstrip()
        if not line:
            continue

        if not line.startswith(" "):
            section = line.strip()
            in_specs = False
            block = _SourceBlock(section) if section in SOURCE_SECTIONS else None
            continue

        if section is None:
            raise LockfileParseError("content before first section header", lineno)

        if block is not None:
            if line == "  specs:":
                in_specs = True
                continue
            if not in_specs:
                match = _OPTION_RE.match(line)
                if not match:
                    raise LockfileParseError(f"unreadable source option {line.strip()!r}", lineno)
                block.options[match.group("key")] = match.group("value")
                continue
            if _SPEC_DEPENDENCY_RE.match(line):
                continue
            match = _SPEC_RE.match(line)
            if not match:
                raise LockfileParseError(f"unreadable spec {line.strip()!r}", lineno)
            name = match.group("name")
            if name in specs:
                log.debug("lockfile.duplicate_spec", name=name, line=lineno)
            specs[name] = Spec(
                name=name,
                version=match.group("version"),
                platform=match.group("platform"),
                source=block.describe(),
                remote=block.remote,
            )
        elif section == DEPENDENCIES_SECTION:
            match = _DEPENDENCY_RE.match(line)
            if not match:
                raise LockfileParseError(f"unreadable dependency {line.strip()!r}", lineno)
            dependencies.add(match.group("name"))

    log.debug("lockfile.parsed", specs=len(specs), dependencies=len(dependencies))
    return Snapshot(specs=specs, dependencies=frozenset(dependencies))
