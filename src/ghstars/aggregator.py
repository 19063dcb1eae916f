"""Merging of subordinate payloads into per-period repository counts."""

from collections.abc import Iterable
from typing import Any

import polars as pl

from ghstars.models import AggregateRecord, Period, PeriodKind
from ghstars.shaper import sort_counts

COUNTS_SCHEMA = {
    "repository": pl.Utf8,
    "count": pl.Int64,
}
INT64_MAX = 2**63 - 1


def repositories_of(payload: Any) -> dict[str, int]:
    """Extract the repository mapping from one unit payload.

    Hourly payloads carry their counts under ``repositories``; daily
    documents may be flat mappings. Non-integer and negative values are
    skipped.

    Args:
        payload: Decoded JSON body of a unit.

    Returns:
        Repository name to count for this unit.

    Raises:
        OverflowError: When a count does not fit a 64-bit counter.
    """
    if not isinstance(payload, dict):
        return {}

    mapping = payload.get("repositories", payload)
    if not isinstance(mapping, dict):
        return {}

    counts = {
        repo: count
        for repo, count in mapping.items()
        if isinstance(count, int) and not isinstance(count, bool) and count >= 0
    }
    for repo, count in counts.items():
        if count > INT64_MAX:
            raise OverflowError(f"Count for {repo} exceeds a 64-bit counter")
    return counts


def merge_counts(payloads: Iterable[Any]) -> dict[str, int]:
    """Sum repository counts across payloads.

    Args:
        payloads: Decoded unit payloads, in any order.

    Returns:
        Repository name to summed count, in first-seen order.

    Raises:
        OverflowError: When a summed count does not fit a 64-bit counter.
    """
    repos: list[str] = []
    counts: list[int] = []
    for payload in payloads:
        for repo, count in repositories_of(payload).items():
            repos.append(repo)
            counts.append(count)

    df = pl.DataFrame({"repository": repos, "count": counts}, schema=COUNTS_SCHEMA)
    merged = df.group_by("repository", maintain_order=True).agg(
        pl.col("count").sum(),
        pl.col("count").cast(pl.Float64).sum().alias("approx"),
    )

    # Int64 sums wrap silently; counts are non-negative, so a wrapped sum is
    # either negative or far beyond the range of the float approximation.
    overflowed = merged.filter((pl.col("count") < 0) | (pl.col("approx") >= 1.5 * 2**63))
    if not overflowed.is_empty():
        repo = overflowed["repository"][0]
        raise OverflowError(f"Summed count for {repo} exceeds a 64-bit counter")

    return dict(zip(merged["repository"].to_list(), merged["count"].to_list(), strict=True))


def sum_totals(payloads: Iterable[Any]) -> int:
    """Sum the scalar ``totalWatches`` counter across payloads."""
    total = 0
    for payload in payloads:
        if not isinstance(payload, dict):
            continue
        value = payload.get("totalWatches", 0)
        if isinstance(value, int) and not isinstance(value, bool):
            total += value
    return total


def aggregate(period: Period, payloads: list[Any]) -> AggregateRecord:
    """Build the aggregate record of a period from its unit payloads.

    Args:
        period: The period being aggregated.
        payloads: Payloads of the successfully fetched units.

    Returns:
        AggregateRecord with counts in canonical order.
    """
    total = sum_totals(payloads) if period.kind is PeriodKind.WEEK else None
    return AggregateRecord(
        period=period,
        repositories=sort_counts(merge_counts(payloads)),
        total=total,
    )
