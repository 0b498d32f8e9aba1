"""Domain entities for watched repository subscriptions."""

from dataclasses import dataclass
from typing import Iterable, Tuple


@dataclass(frozen=True, order=True)
class Subscription:
    """Immutable subscription entity, keyed by organization and repository.

    Ordering compares organization first, then repository, both by code point.
    """

    organization: str
    repository: str

    def __post_init__(self):
        if not self.organization:
            raise ValueError("Subscription organization must not be empty")
        if not self.repository:
            raise ValueError("Subscription repository must not be empty")

    @property
    def full_name(self) -> str:
        return f"{self.organization}/{self.repository}"

    def __str__(self) -> str:
        return self.full_name


Snapshot = Tuple[Subscription, ...]


def make_snapshot(subscriptions: Iterable[Subscription]) -> Snapshot:
    """Return the subscriptions as a sorted, immutable snapshot."""
    return tuple(sorted(subscriptions))
