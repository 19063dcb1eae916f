"""Request flow: resolve, read cache, fetch, aggregate, store, shape."""

import logging

from ghstars.aggregator import aggregate
from ghstars.cache import CacheGateway
from ghstars.config import Settings
from ghstars.fetcher import BatchFetcher, fetch_units
from ghstars.periods import parse_period
from ghstars.shaper import render

logger = logging.getLogger(__name__)


class StarsService:
    """Serves per-repository event counts for day, week and month periods.

    Attributes:
        gateway: Cache gateway over the key-value store.
        fetcher: Batch facility used on cache misses.
        settings: Endpoint and credential configuration.
    """

    def __init__(self, gateway: CacheGateway, fetcher: BatchFetcher, settings: Settings):
        """Initialize service collaborators.

        Args:
            gateway: Cache gateway over the key-value store.
            fetcher: Batch facility used on cache misses.
            settings: Endpoint and credential configuration.
        """
        self.gateway = gateway
        self.fetcher = fetcher
        self.settings = settings

    async def get_counts(self, identifier: str, limit: int | None = None) -> bytes:
        """Return the JSON body for a period.

        Args:
            identifier: Raw period identifier, e.g. "2024-01-01".
            limit: Optional number of top repositories to include.

        Returns:
            UTF-8 encoded JSON response body.

        Raises:
            ValidationError: When the identifier is invalid.
            CacheError: When the cache entry cannot be read or stored.
            FetchError: When the batch fetch fails as a whole.
        """
        period = parse_period(identifier)

        cached = await self.gateway.read(period)
        if cached is not None:
            return render(cached.record, limit, stored=cached.raw)

        payloads = await fetch_units(period, self.fetcher, self.settings)
        record = aggregate(period, payloads)
        stored = await self.gateway.write(record)
        logger.info(
            "Computed %s from %d units: %d repositories",
            period.identifier,
            len(payloads),
            len(record.repositories),
        )
        return render(record, limit, stored=stored)
