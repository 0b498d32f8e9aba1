"""Messages consumed by the session and the commands it emits.

Every input to the session is one of the message types below. Long-running
work is described by a command; the host runs it off the loop and delivers
exactly one completion message back.
"""

from dataclasses import dataclass
from typing import Optional, Tuple, Union

from unwatch.application.subscription_service import SubscriptionError, SubscriptionService
from unwatch.domain.subscription import Snapshot, Subscription


@dataclass(frozen=True)
class Resize:
    width: int
    height: int


@dataclass(frozen=True)
class Tick:
    pass


@dataclass(frozen=True)
class KeyPress:
    """A key press. row is the table row under the cursor, if any."""

    key: str
    row: Optional[int] = None


@dataclass(frozen=True)
class FetchCompleted:
    subscriptions: Snapshot = ()
    error: Optional[SubscriptionError] = None


@dataclass(frozen=True)
class UnwatchCompleted:
    subscriptions: Snapshot = ()
    error: Optional[SubscriptionError] = None


Message = Union[Resize, Tick, KeyPress, FetchCompleted, UnwatchCompleted]


@dataclass(frozen=True)
class FetchCommand:
    pass


@dataclass(frozen=True)
class UnwatchCommand:
    targets: Tuple[Subscription, ...]


@dataclass(frozen=True)
class QuitCommand:
    pass


Command = Union[FetchCommand, UnwatchCommand, QuitCommand]


def run_fetch(service: SubscriptionService) -> FetchCompleted:
    """Fetch all subscriptions and wrap the outcome in a completion message."""
    try:
        return FetchCompleted(subscriptions=service.fetch_subscriptions())
    except SubscriptionError as e:
        return FetchCompleted(error=e)


def run_unwatch(service: SubscriptionService, targets: Tuple[Subscription, ...]) -> UnwatchCompleted:
    """Unwatch targets, refetch, and wrap the outcome in a completion message."""
    try:
        return UnwatchCompleted(subscriptions=service.unwatch_and_refresh(targets))
    except SubscriptionError as e:
        return UnwatchCompleted(error=e)
