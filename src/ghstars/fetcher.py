"""Subordinate locator building and fan-out fetching."""

import asyncio
import logging
from collections.abc import Callable
from typing import Any, Protocol, Self

import httpx

from ghstars.config import Settings
from ghstars.errors import FetchError
from ghstars.models import FetchResult, Period, PeriodKind

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[dict[str, Any]], None]


class BatchFetcher(Protocol):
    """Capability that fetches many locators and reports each outcome."""

    async def fetch_each(
        self,
        locators: list[str],
        *,
        api_key: str,
        base_path: str,
        log: ProgressCallback,
    ) -> list[FetchResult]:
        """Fetch every locator, returning one result per locator."""
        ...


class HttpxBatchFetcher:
    """Bounded-concurrency batch fetcher on top of httpx.

    Relative locators are resolved against ``base_path`` and carry the
    credential as a bearer token; absolute locators are fetched as-is.

    Attributes:
        concurrency: Maximum number of requests in flight.
        timeout: Per-request timeout in seconds.
    """

    def __init__(self, concurrency: int = 50, timeout: float = 30.0):
        """Initialize fetcher limits.

        Args:
            concurrency: Maximum number of requests in flight.
            timeout: Per-request timeout in seconds.
        """
        self.concurrency = concurrency
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> Self:
        """Enter async context manager."""
        self._client = httpx.AsyncClient(
            headers={"Accept": "application/json"},
            timeout=self.timeout,
            follow_redirects=True,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context manager."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def fetch_each(
        self,
        locators: list[str],
        *,
        api_key: str,
        base_path: str,
        log: ProgressCallback,
    ) -> list[FetchResult]:
        """Fetch all locators concurrently.

        Args:
            locators: URLs to fetch, absolute or relative to base_path.
            api_key: Credential for requests sent to base_path.
            base_path: Base endpoint for relative locators.
            log: Called with a progress update after each locator.

        Returns:
            One FetchResult per locator, in input order.
        """
        if not self._client:
            raise RuntimeError("Fetcher not initialized. Use async context manager.")

        client = self._client
        semaphore = asyncio.Semaphore(self.concurrency)
        total = len(locators)
        done = 0

        async def fetch_one(locator: str) -> FetchResult:
            nonlocal done
            url, headers = locator, {}
            if base_path and httpx.URL(locator).is_relative_url:
                url = str(httpx.URL(base_path).join(locator))
                if api_key:
                    headers["Authorization"] = f"Bearer {api_key}"

            async with semaphore:
                try:
                    response = await client.get(url, headers=headers)
                except httpx.RequestError as e:
                    logger.warning("Request for %s failed: %s", url, e)
                    result = FetchResult(locator=locator, status=0)
                else:
                    result = FetchResult(locator=locator, status=response.status_code)
                    if response.status_code == 200:
                        try:
                            result.payload = response.json()
                        except ValueError:
                            logger.warning("Undecodable body from %s", url)

            done += 1
            log({"done": done, "total": total, "locator": locator, "status": result.status})
            return result

        return list(await asyncio.gather(*(fetch_one(locator) for locator in locators)))


def build_locators(period: Period, settings: Settings) -> list[str]:
    """Build the subordinate locators for a period.

    Args:
        period: The resolved period.
        settings: Endpoint configuration.

    Returns:
        24 hourly locators per day for day and week periods, one daily
        locator per day of the month for month periods.
    """
    if period.kind is PeriodKind.MONTH:
        endpoint = settings.month_day_endpoint.rstrip("/")
        return [
            f"{endpoint}/{day.isoformat()}?limit={settings.month_day_limit}"
            for day in period.days()
        ]

    if period.kind is PeriodKind.WEEK:
        endpoint = settings.week_hour_endpoint.rstrip("/")
    else:
        endpoint = settings.day_hour_endpoint.rstrip("/")

    return [
        f"{endpoint}/{day.isoformat()}-{hour}" for day in period.days() for hour in range(24)
    ]


def _log_progress(update: dict[str, Any]) -> None:
    logger.debug("Fetch progress: %s", update)


async def fetch_units(period: Period, fetcher: BatchFetcher, settings: Settings) -> list[Any]:
    """Fetch every subordinate unit of a period.

    Units with a non-200 status or no payload are dropped without retry;
    the caller aggregates whatever succeeded.

    Args:
        period: The resolved period.
        fetcher: Batch facility performing the fan-out.
        settings: Credential, base endpoint and unit endpoints.

    Returns:
        Decoded payloads of the successful units.

    Raises:
        FetchError: When the batch call itself fails.
    """
    locators = build_locators(period, settings)
    logger.info("Fetching %d units for %s", len(locators), period.identifier)

    try:
        results = await fetcher.fetch_each(
            locators,
            api_key=settings.fetch_api_key,
            base_path=settings.fetch_base_path,
            log=_log_progress,
        )
    except httpx.HTTPError as e:
        raise FetchError(f"Batch fetch failed: {e}") from e

    payloads = [result.payload for result in results if result.ok]
    if len(payloads) < len(locators):
        logger.warning(
            "%d of %d units excluded for %s",
            len(locators) - len(payloads),
            len(locators),
            period.identifier,
        )
    logger.info("Fetched %d units for %s", len(payloads), period.identifier)
    return payloads
