"""Reconciler — align two lock file snapshots gem by gem."""

import re
from collections.abc import Mapping
from typing import Optional

from bundle_diff.models import (
    ChangeType,
    ComparisonRecord,
    MetadataRecord,
    SemanticDelta,
    Snapshot,
    SourceType,
    Spec,
)

# Evaluated in order against Spec.source; first match wins.
SOURCE_PATTERNS: list[tuple[re.Pattern[str], SourceType]] = [
    (re.compile(r"locally installed gems"), SourceType.gem),
    (re.compile(r"github\.com"), SourceType.github),
    (re.compile(r"source at"), SourceType.subfolder),
]

_COMPONENTS = (
    (SemanticDelta.major_up, SemanticDelta.major_down),
    (SemanticDelta.minor_up, SemanticDelta.minor_down),
    (SemanticDelta.patch_up, SemanticDelta.patch_down),
)


def reconcile(
    before: Snapshot,
    after: Snapshot,
    metadata: Mapping[str, MetadataRecord],
) -> list[ComparisonRecord]:
    """Build one ComparisonRecord per gem name found in either snapshot.

    Records come back sorted by name. Missing metadata leaves the record's
    ``metadata`` unset.
    """
    keys = sorted(before.specs.keys() | after.specs.keys())
    return [compare_one(key, before, after, metadata.get(key)) for key in keys]


def compare_one(
    name: str,
    before: Snapshot,
    after: Snapshot,
    metadata: Optional[MetadataRecord] = None,
) -> ComparisonRecord:
    spec_before = before.specs.get(name)
    spec_after = after.specs.get(name)
    change = classify_change(spec_before, spec_after)

    delta = None
    if change is ChangeType.updated and spec_before is not None and spec_after is not None:
        delta = semantic_delta(spec_before.version, spec_after.version)

    # Last known state: a removed gem is described by where it used to be.
    if spec_after is not None:
        last_snapshot, last_spec = after, spec_after
    elif spec_before is not None:
        last_snapshot, last_spec = before, spec_before
    else:
        raise ValueError(f"{name!r} is in neither snapshot")

    source_type = classify_source(last_spec.source)
    return ComparisonRecord(
        name=name,
        spec_before=spec_before,
        spec_after=spec_after,
        change_type=change,
        semantic_delta=delta,
        declared_in_manifest=last_snapshot.is_declared(name),
        source_type=source_type,
        source_url=source_url(last_spec, source_type, metadata),
        metadata=metadata,
    )


def classify_change(spec_before: Optional[Spec], spec_after: Optional[Spec]) -> ChangeType:
    if spec_before is None and spec_after is not None:
        return ChangeType.added
    if spec_before is not None and spec_after is None:
        return ChangeType.removed
    if spec_before is None or spec_after is None:
        raise ValueError("at least one spec is required")
    if spec_before.version == spec_after.version:
        return ChangeType.unchanged
    return ChangeType.updated


def version_components(version: str) -> list[Optional[int]]:
    """Major, minor and patch as ints; anything non-numeric or missing is None."""
    parts = version.split(".")[:3]
    parts += [""] * (3 - len(parts))
    return [int(p) if re.fullmatch(r"[0-9]+", p) else None for p in parts]


def semantic_delta(version_before: str, version_after: str) -> SemanticDelta:
    """Classify an update by the first component present on both sides that moved.

    ``1.2.0 -> 1.3.0`` is ``minor+``. Components that are missing or
    non-numeric on either side are skipped, so ``1.0 -> 1.0.1`` is ``rest``.
    """
    old = version_components(version_before)
    new = version_components(version_after)
    for a, b, (up, down) in zip(old, new, _COMPONENTS):
        if a is None or b is None or a == b:
            continue
        return up if b > a else down
    return SemanticDelta.rest


def classify_source(source: str) -> Optional[SourceType]:
    for pattern, label in SOURCE_PATTERNS:
        if pattern.search(source):
            return label
    return None


def source_url(
    spec: Spec,
    source_type: Optional[SourceType],
    metadata: Optional[MetadataRecord],
) -> Optional[str]:
    if source_type is SourceType.github:
        return spec.source
    if metadata is not None and metadata.github_repo is not None:
        return metadata.github_repo.url
    return None
