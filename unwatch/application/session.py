"""Interactive session state machine.

The session owns all UI state. It consumes one message at a time from the
host's event loop and answers with the next command to run, if any. It never
performs I/O itself, so every transition can be driven directly in tests.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Optional, Set, Tuple, Union

from unwatch.application.messages import (
    Command,
    FetchCommand,
    FetchCompleted,
    KeyPress,
    Message,
    QuitCommand,
    Resize,
    Tick,
    UnwatchCommand,
    UnwatchCompleted,
)
from unwatch.domain.subscription import Snapshot, Subscription

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    LOADING = "loading"
    LOADED = "loaded"
    UNWATCHING = "unwatching"
    ERROR = "error"


@dataclass(frozen=True)
class KeyBinding:
    keys: Tuple[str, ...]
    help_key: str
    description: str

    def matches(self, key: str) -> bool:
        return key in self.keys


@dataclass(frozen=True)
class KeyMap:
    mark: KeyBinding = KeyBinding(("space",), "space", "toggle mark")
    execute: KeyBinding = KeyBinding(("x",), "x", "unwatch")
    quit: KeyBinding = KeyBinding(("q", "ctrl+c"), "q", "quit")

    def short_help(self) -> str:
        return " • ".join(
            f"{b.help_key} {b.description}" for b in (self.mark, self.execute, self.quit)
        )


DEFAULT_KEYMAP = KeyMap()

SPINNER_FRAMES = ("|", "/", "-", "\\")

# Rows taken by the table header, borders and margins around the table.
CHROME_HEIGHT = 6
HELP_HEIGHT = 1
MARK_WIDTH = 1
CELL_PADDING = 2


@dataclass(frozen=True)
class ProgressView:
    label: str
    frame: str

    @property
    def text(self) -> str:
        return f"{self.label} {self.frame}"


@dataclass(frozen=True)
class TableRow:
    index: int
    organization: str
    repository: str
    marked: bool


@dataclass(frozen=True)
class TableView:
    rows: Tuple[TableRow, ...]
    page_size: int
    organization_width: int
    repository_width: int
    help: str


@dataclass(frozen=True)
class ErrorView:
    message: str


View = Union[ProgressView, TableView, ErrorView]


class Session:
    """State machine for one interactive unwatch session."""

    def __init__(self, keymap: KeyMap = DEFAULT_KEYMAP, width: int = 80, height: int = 24):
        self.keymap = keymap
        self.state = SessionState.LOADING
        self.subscriptions: Snapshot = ()
        self.rows: Dict[int, Subscription] = {}
        self.marked: Set[Subscription] = set()
        self.targets: Tuple[Subscription, ...] = ()
        self.error: Optional[Exception] = None
        self.focused = False
        self.frame = 0
        self.width = width
        self.height = height
        self.page_size = 1
        self.organization_width = 1
        self.repository_width = 1
        self._resize(width, height)

    def start(self) -> Command:
        """Return the command that loads the first snapshot."""
        logger.debug("Session started, loading subscriptions")
        return FetchCommand()

    def handle(self, message: Message) -> Optional[Command]:
        """
        Apply one message to the session.

        Args:
            message: The next event from the loop

        Returns:
            The command the host must run next, or None
        """
        if isinstance(message, Tick):
            self.frame = (self.frame + 1) % len(SPINNER_FRAMES)
            return None

        if isinstance(message, Resize):
            self._resize(message.width, message.height)
            return None

        if isinstance(message, KeyPress):
            return self._handle_key(message)

        if isinstance(message, (FetchCompleted, UnwatchCompleted)):
            self._complete(message)
            return None

        raise TypeError(f"Unknown session message: {message!r}")

    @property
    def busy(self) -> bool:
        return self.state in (SessionState.LOADING, SessionState.UNWATCHING)

    @property
    def marked_rows(self) -> FrozenSet[int]:
        return frozenset(i for i, s in self.rows.items() if s in self.marked)

    def selected(self) -> Tuple[Subscription, ...]:
        """Marked subscriptions in table order."""
        return tuple(s for s in self.subscriptions if s in self.marked)

    def subscription_at(self, row: int) -> Optional[Subscription]:
        return self.rows.get(row)

    def view(self) -> View:
        """Build the read-only view for the current state."""
        frame = SPINNER_FRAMES[self.frame]

        if self.state is SessionState.LOADING:
            return ProgressView("Loading subscriptions", frame)

        if self.state is SessionState.UNWATCHING:
            return ProgressView("Unwatching marked subscriptions", frame)

        if self.state is SessionState.ERROR:
            return ErrorView(f"Error: {self.error}")

        rows = tuple(
            TableRow(i, s.organization, s.repository, s in self.marked)
            for i, s in self.rows.items()
        )
        return TableView(
            rows=rows,
            page_size=self.page_size,
            organization_width=self.organization_width,
            repository_width=self.repository_width,
            help=self.keymap.short_help(),
        )

    def _handle_key(self, message: KeyPress) -> Optional[Command]:
        if self.keymap.quit.matches(message.key):
            logger.debug("Quit requested")
            return QuitCommand()

        if self.state is not SessionState.LOADED:
            return None

        if self.keymap.mark.matches(message.key):
            if message.row is not None:
                self._toggle(message.row)
            return None

        if self.keymap.execute.matches(message.key):
            self.targets = self.selected()
            self.state = SessionState.UNWATCHING
            self.focused = False
            logger.info(f"Unwatching {len(self.targets)} marked subscriptions")
            return UnwatchCommand(self.targets)

        return None

    def _toggle(self, row: int) -> None:
        subscription = self.rows.get(row)
        if subscription is None:
            return
        if subscription in self.marked:
            self.marked.discard(subscription)
        else:
            self.marked.add(subscription)

    def _complete(self, message: Union[FetchCompleted, UnwatchCompleted]) -> None:
        self.targets = ()

        if message.error is not None:
            logger.warning(f"Operation failed: {message.error}")
            self.error = message.error
            self.state = SessionState.ERROR
            self.focused = False
            return

        self.subscriptions = message.subscriptions
        self.rows = dict(enumerate(self.subscriptions))
        self.marked &= set(self.subscriptions)
        self.error = None
        self.state = SessionState.LOADED
        self.focused = True

    def _resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height
        self.page_size = max(height - CHROME_HEIGHT - HELP_HEIGHT, 1)

        flexible = max(width - MARK_WIDTH - 3 * CELL_PADDING, 2)
        self.organization_width = max(flexible // 3, 1)
        self.repository_width = max(flexible - self.organization_width, 1)
