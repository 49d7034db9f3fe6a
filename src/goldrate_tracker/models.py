"""
Value objects shared by the fetcher, snapshot store and reconciler.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def to_iso(value: datetime) -> str:
    """Serialize a datetime as ISO-8601, treating naive values as UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.isoformat()


@dataclass(frozen=True)
class RateEntry:
    """A single purity price as published by the upstream source"""

    code: str  # purity identifier, e.g. '999', '750', '585'
    label: str
    price: int  # whole currency units

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON export"""
        return {"code": self.code, "label": self.label, "price": self.price}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'RateEntry':
        """Rebuild an entry from its stored form (no upstream validation)."""
        return cls(code=str(data["code"]), label=str(data["label"]), price=int(data["price"]))


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable set of rate entries captured at one point in time.

    Once stored a snapshot is never mutated, only superseded.
    """

    entries: Tuple[RateEntry, ...]
    captured_at: datetime

    @classmethod
    def capture(cls, entries: Iterable[RateEntry], captured_at: Optional[datetime] = None) -> 'Snapshot':
        """Build a snapshot from entries, stamped with now unless a time is given."""
        return cls(entries=tuple(entries), captured_at=captured_at or utc_now())

    def price_map(self) -> Dict[str, int]:
        """Mapping of code to price."""
        return {entry.code: entry.price for entry in self.entries}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "entries": [entry.to_dict() for entry in self.entries],
            "captured_at": to_iso(self.captured_at),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Snapshot':
        captured_at = datetime.fromisoformat(data["captured_at"])
        if captured_at.tzinfo is None:
            captured_at = captured_at.replace(tzinfo=timezone.utc)
        return cls(
            entries=tuple(RateEntry.from_dict(item) for item in data["entries"]),
            captured_at=captured_at,
        )


@dataclass
class ReconciliationResult:
    """Aggregate view returned to the presentation layer after a refresh."""

    current: List[RateEntry]
    previous: List[RateEntry]
    last_updated: datetime
    previous_updated: Optional[datetime] = None
    error: Optional[str] = None  # set when a cached result is served after a failed fetch
    rotated: bool = field(default=False, compare=False)

    @property
    def has_previous(self) -> bool:
        return bool(self.previous)

    def previous_entry(self, code: str) -> Optional[RateEntry]:
        """Previous entry with the same code, if any."""
        for entry in self.previous:
            if entry.code == code:
                return entry
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Outbound JSON shape: {current, previous, lastUpdated, previousUpdated?, error?}"""
        data: Dict[str, Any] = {
            "current": [entry.to_dict() for entry in self.current],
            "previous": [entry.to_dict() for entry in self.previous],
            "lastUpdated": to_iso(self.last_updated),
        }
        if self.previous_updated is not None:
            data["previousUpdated"] = to_iso(self.previous_updated)
        if self.error:
            data["error"] = self.error
        return data


@dataclass
class RotationOutcome:
    """What rotate_and_store did and the slots it left behind."""

    rotated: bool
    current: Optional[Snapshot]
    previous: Optional[Snapshot]


@dataclass
class DigitAnalysis:
    """Display tiles to add and (optionally) remove, keyed by digit in ascending order."""

    needed: Dict[str, int] = field(default_factory=dict)
    removed: Dict[str, int] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.needed and not self.removed
