"""Lock file differ — orchestrates a full comparison between two git refs.

Reads both snapshots, fetches Ruby Toolbox metadata for every gem in either
of them, reconciles the two and renders the report. Metadata fetching is a
strict barrier: reconciliation starts only once every batch has returned.
"""

from pathlib import Path
from typing import Optional

import structlog

from bundle_diff.analysis.reconcile import reconcile
from bundle_diff.analysis.report import build_report
from bundle_diff.fetcher import ToolboxFetcher
from bundle_diff.lockfile import parse_lockfile
from bundle_diff.models import ChangeType, Report
from bundle_diff.snapshots import SnapshotSource, archive_snapshots

log = structlog.get_logger("bundle_diff.differ")


class LockfileDiffer:
    """Compares the lock file at ``source`` with the one at ``target``."""

    def __init__(
        self,
        source: str,
        target: str,
        snapshot_source: SnapshotSource,
        fetcher: ToolboxFetcher,
        archive_dir: Optional[str | Path] = None,
    ) -> None:
        self.source = source
        self.target = target
        self._snapshots = snapshot_source
        self._fetcher = fetcher
        self.archive_dir = archive_dir

    async def run(self) -> Report:
        bound = log.bind(source=self.source, target=self.target)

        source_text = self._snapshots.read(self.source)
        target_text = self._snapshots.read(self.target)
        if self.archive_dir is not None:
            archive_snapshots(
                self.archive_dir, self.source, self.target, source_text, target_text
            )

        before = parse_lockfile(source_text)
        after = parse_lockfile(target_text)
        bound.info("diff.snapshots_parsed", before=len(before.specs), after=len(after.specs))

        names = sorted(before.specs.keys() | after.specs.keys())
        metadata, catalog = await self._fetcher.fetch_all(names)

        records = reconcile(before, after, metadata)
        counts = {ct.value: 0 for ct in ChangeType}
        for r in records:
            counts[r.change_type.value] += 1
        bound.info("diff.reconciled", gems=len(records), **counts)

        return build_report(records, catalog)

    async def close(self) -> None:
        await self._fetcher.close()
