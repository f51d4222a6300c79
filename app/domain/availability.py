"""Date range rules shared by the availability index and the conflict check."""

from dataclasses import dataclass
from datetime import date


@dataclass(frozen=True, order=True)
class BlockedRange:
    """Half-open [start, end) span reserved by a confirmed booking."""

    start: date
    end: date

    def as_dict(self) -> dict[str, str]:
        return {"start": self.start.isoformat(), "end": self.end.isoformat()}


def ranges_overlap(a_start: date, a_end: date, b_start: date, b_end: date) -> bool:
    """Half-open intervals overlap when each starts before the other ends."""
    return a_start < b_end and a_end > b_start


def sort_ranges(ranges: list[BlockedRange]) -> list[BlockedRange]:
    """Ascending by start, ties broken by end."""
    return sorted(ranges, key=lambda r: (r.start, r.end))
