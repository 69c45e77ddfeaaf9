"""Ruby Toolbox metadata fetching via the project compare API."""

import asyncio
from collections.abc import Sequence
from typing import Optional

import httpx
import structlog
from pydantic import ValidationError

from bundle_diff import __version__
from bundle_diff.errors import MetadataFetchError
from bundle_diff.models import HealthStatusCatalog, MetadataRecord

log = structlog.get_logger("bundle_diff.fetcher")

DEFAULT_BASE_URL = "https://www.ruby-toolbox.com/api"
BATCH_SIZE = 100  # compare endpoint limit per request


def batched(names: Sequence[str], size: int = BATCH_SIZE) -> list[list[str]]:
    """Split ``names`` into consecutive slices of at most ``size`` items."""
    if size < 1:
        raise ValueError("batch size must be positive")
    return [list(names[i:i + size]) for i in range(0, len(names), size)]


class ToolboxFetcher:
    """Fetches health and popularity records for gems from the Ruby Toolbox."""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 30.0,
        batch_size: int = BATCH_SIZE,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.batch_size = batch_size
        self._client: Optional[httpx.AsyncClient] = None

    # ── HTTP plumbing ─────────────────────────────────────────────────────

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Accept": "application/json",
            "User-Agent": f"bundle-diff/{__version__}",
        }

    async def _client_instance(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers=self.headers,
                timeout=self.timeout,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    # ── Compare endpoint ──────────────────────────────────────────────────

    async def fetch_batch(self, names: Sequence[str]) -> list[MetadataRecord]:
        """Fetch records for up to one batch of names.

        Names unknown to the Ruby Toolbox are simply missing from the result.
        """
        if not names:
            return []
        if len(names) > self.batch_size:
            raise ValueError(f"batch of {len(names)} exceeds limit of {self.batch_size}")

        client = await self._client_instance()
        path = f"/projects/compare/{','.join(names)}"
        try:
            resp = await client.get(path)
            resp.raise_for_status()
            payload = resp.json()
        except httpx.HTTPStatusError as e:
            raise MetadataFetchError(
                f"Ruby Toolbox returned {e.response.status_code} for a batch of {len(names)} gems"
            ) from e
        except httpx.HTTPError as e:
            raise MetadataFetchError(f"Ruby Toolbox request failed: {e!r}") from e
        except ValueError as e:
            raise MetadataFetchError("Ruby Toolbox returned invalid JSON") from e

        projects = payload.get("projects") if isinstance(payload, dict) else None
        if not isinstance(projects, list):
            raise MetadataFetchError("Ruby Toolbox response has no 'projects' list")
        try:
            records = [MetadataRecord.model_validate(p) for p in projects]
        except ValidationError as e:
            raise MetadataFetchError(f"Ruby Toolbox returned an unexpected project shape: {e}") from e

        log.debug("toolbox.batch_fetched", requested=len(names), received=len(records))
        return records

    async def fetch_all(
        self, names: Sequence[str]
    ) -> tuple[dict[str, MetadataRecord], HealthStatusCatalog]:
        """Fetch every batch concurrently, then finalize the status catalog.

        Returns only once all batches completed; any failed batch fails the
        whole call and cancels the batches still in flight.
        """
        batches = batched(names, self.batch_size)
        log.info("toolbox.fetch_started", gems=len(names), batches=len(batches))
        tasks = [
            asyncio.create_task(self.fetch_batch(b), name=f"toolbox-batch-{i}")
            for i, b in enumerate(batches)
        ]
        try:
            results = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

        metadata: dict[str, MetadataRecord] = {}
        for records in results:
            for record in records:
                metadata[record.name] = record
        catalog = HealthStatusCatalog.from_records(list(metadata.values()))
        log.info(
            "toolbox.fetch_finished",
            records=len(metadata),
            missing=len(set(names) - metadata.keys()),
            health_statuses=len(catalog),
        )
        return metadata, catalog
