"""Data models for ghstars."""

from dataclasses import dataclass, field, replace
from datetime import date, timedelta
from enum import Enum
from typing import Any


class PeriodKind(str, Enum):
    """Granularity of a period identifier."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class Period:
    """A validated period identifier with its derived date range.

    Attributes:
        kind: Granularity of the period.
        identifier: Normalized identifier as requested (e.g., "2024-W7").
        start_date: First day of the period.
        end_date: Last day of the period (inclusive).
    """

    kind: PeriodKind
    identifier: str
    start_date: date
    end_date: date

    def days(self) -> list[date]:
        """List every date in the period, in order.

        Returns:
            Dates from start_date to end_date inclusive.
        """
        span = (self.end_date - self.start_date).days
        return [self.start_date + timedelta(days=offset) for offset in range(span + 1)]


@dataclass
class FetchResult:
    """Outcome of fetching one subordinate unit.

    Attributes:
        locator: URL of the unit.
        status: HTTP status code, or 0 when the request never completed.
        payload: Decoded JSON body, if any.
    """

    locator: str
    status: int
    payload: Any | None = None

    @property
    def ok(self) -> bool:
        """Whether this unit takes part in aggregation."""
        return self.status == 200 and self.payload is not None


@dataclass(frozen=True)
class AggregateRecord:
    """Repository counts summed over one period.

    Attributes:
        period: The period the counts cover.
        repositories: Repository name to event count, in canonical order.
        total: Summed scalar event counter (week only).
    """

    period: Period
    repositories: dict[str, int] = field(default_factory=dict)
    total: int | None = None

    def with_repositories(self, repositories: dict[str, int]) -> "AggregateRecord":
        """Copy of this record with another repository mapping."""
        return replace(self, repositories=repositories)

    def to_document(self) -> dict[str, Any]:
        """Convert to the JSON document stored and served for the period.

        Returns:
            Dictionary shaped per granularity.
        """
        if self.period.kind is PeriodKind.DAY:
            return {"date": self.period.identifier, "repositories": dict(self.repositories)}

        if self.period.kind is PeriodKind.WEEK:
            return {
                "weekNumber": self.period.identifier,
                "startDate": self.period.start_date.isoformat(),
                "endDate": self.period.end_date.isoformat(),
                "totalWatches": self.total or 0,
                "repositories": dict(self.repositories),
            }

        return dict(self.repositories)

    @classmethod
    def from_document(cls, period: Period, document: Any) -> "AggregateRecord":
        """Rebuild a record from a stored JSON document.

        Day entries written as a flat mapping are accepted as well.

        Args:
            period: Period the document was stored under.
            document: Decoded JSON document.

        Returns:
            The stored record.

        Raises:
            TypeError: When the document does not hold a repository mapping.
        """
        if not isinstance(document, dict):
            raise TypeError(f"Expected a JSON object, got {type(document).__name__}")

        total = None
        mapping: Any = document
        if period.kind is PeriodKind.WEEK:
            mapping = document.get("repositories")
            total = int(document.get("totalWatches", 0))
        elif period.kind is PeriodKind.DAY and "repositories" in document:
            mapping = document["repositories"]

        if not isinstance(mapping, dict):
            raise TypeError("Stored document has no repository mapping")

        return cls(
            period=period,
            repositories={str(repo): int(count) for repo, count in mapping.items()},
            total=total,
        )
