"""Sorting, limiting and rendering of aggregate records."""

import json
import math

from ghstars.models import AggregateRecord, PeriodKind


def sort_counts(mapping: dict[str, int]) -> dict[str, int]:
    """Order repositories by count descending, then name ascending."""
    return dict(sorted(mapping.items(), key=lambda item: (-item[1], item[0])))


def parse_limit(raw: str | None) -> int | None:
    """Parse the ``limit`` query parameter.

    Any numeric value is a limit: fractions are truncated toward zero and
    negative values drop entries from the end, as a slice would.

    Args:
        raw: Raw parameter value, if present.

    Returns:
        The limit, or None when absent, blank, non-numeric or +infinity.
    """
    if raw is None or not raw.strip() or "_" in raw:
        return None
    try:
        value = float(raw)
    except ValueError:
        return None
    if math.isnan(value):
        return None
    if math.isinf(value):
        return None if value > 0 else 0
    return int(value)


def limit_counts(mapping: dict[str, int], limit: int | None) -> dict[str, int]:
    """Keep the first ``limit`` entries of a mapping.

    Args:
        mapping: Repository counts, already ordered.
        limit: Number of entries to keep, or None for all. A negative
            limit drops that many entries from the end.

    Returns:
        A new dictionary; the input is left untouched.
    """
    if limit is None:
        return dict(mapping)
    return dict(list(mapping.items())[:limit])


def render(record: AggregateRecord, limit: int | None = None, stored: bytes | None = None) -> bytes:
    """Render the JSON response body for a record.

    Day and month bodies are pretty-printed with two-space indentation,
    week bodies are compact. An unlimited week body is the stored entry
    verbatim when one is given.

    Args:
        record: Full aggregate record.
        limit: Optional number of repositories to include.
        stored: Bytes of the cache entry the record was read from.

    Returns:
        UTF-8 encoded JSON body.
    """
    if record.period.kind is PeriodKind.WEEK:
        if limit is None and stored is not None:
            return stored
        return dumps_compact(_limited(record, limit).to_document())

    body = json.dumps(_limited(record, limit).to_document(), indent=2, ensure_ascii=False)
    return body.encode("utf-8")


def dumps_compact(document: object) -> bytes:
    """Serialize a document without whitespace."""
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _limited(record: AggregateRecord, limit: int | None) -> AggregateRecord:
    ordered = sort_counts(record.repositories)
    return record.with_repositories(limit_counts(ordered, limit))
