"""Textual application hosting the unwatch session."""

import logging
from typing import FrozenSet, List, Optional, Tuple

from textual import events, work
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical
from textual.widgets import DataTable, Static

from unwatch.application.messages import (
    Command,
    FetchCommand,
    KeyPress,
    Message,
    QuitCommand,
    Resize,
    Tick,
    UnwatchCommand,
    run_fetch,
    run_unwatch,
)
from unwatch.application.session import (
    DEFAULT_KEYMAP,
    MARK_WIDTH,
    ErrorView,
    KeyMap,
    ProgressView,
    Session,
    TableView,
)
from unwatch.application.subscription_service import SubscriptionService
from unwatch.domain.subscription import Subscription

logger = logging.getLogger(__name__)

MARK = "✓"
TICK_INTERVAL = 0.1


def _bindings(keymap: KeyMap) -> List[Binding]:
    bindings = []
    for binding in (keymap.mark, keymap.execute, keymap.quit):
        for key in binding.keys:
            bindings.append(Binding(
                key,
                f"press('{key}')",
                binding.description,
                show=False,
                priority=binding is keymap.quit,
            ))
    return bindings


class UnwatchApp(App):
    """Full-screen list of watched repositories with bulk unwatch."""

    TITLE = "gh-unwatch"

    CSS = """
    #progress, #error {
        padding: 1 2;
    }

    #loaded {
        height: auto;
    }

    #help {
        color: $text-muted;
        padding: 0 1;
    }
    """

    BINDINGS = _bindings(DEFAULT_KEYMAP)

    def __init__(self, service: SubscriptionService, session: Optional[Session] = None):
        super().__init__()
        self.service = service
        self.session = session if session is not None else Session()
        self._table_layout: Optional[Tuple[Tuple[Subscription, ...], int, int]] = None
        self._rendered_marks: FrozenSet[int] = frozenset()

    def compose(self) -> ComposeResult:
        yield Static(id="progress", markup=False)
        with Vertical(id="loaded"):
            yield DataTable(id="subscriptions", cursor_type="row")
            yield Static(self.session.keymap.short_help(), id="help", markup=False)
        yield Static(id="error", markup=False)

    def on_mount(self) -> None:
        self.set_interval(TICK_INTERVAL, self.advance_spinner)
        self.session.handle(Resize(self.size.width, self.size.height))
        self._run_command(self.session.start())
        self.render_session()

    def on_resize(self, event: events.Resize) -> None:
        self.send_to_session(Resize(event.size.width, event.size.height))

    def action_press(self, key: str) -> None:
        table = self.query_one("#subscriptions", DataTable)
        row = table.cursor_row if table.row_count else None
        self.send_to_session(KeyPress(key, row))

    def advance_spinner(self) -> None:
        self.session.handle(Tick())
        if self.session.busy:
            self.render_session()

    def send_to_session(self, message: Message) -> None:
        """Feed one message to the session, run its command and redraw."""
        self._run_command(self.session.handle(message))
        self.render_session()

    def _run_command(self, command: Optional[Command]) -> None:
        if command is None:
            return
        if isinstance(command, FetchCommand):
            self.fetch_subscriptions()
        elif isinstance(command, UnwatchCommand):
            self.unwatch_subscriptions(command.targets)
        elif isinstance(command, QuitCommand):
            self.exit(return_code=0)

    @work(thread=True, group="subscriptions")
    def fetch_subscriptions(self) -> None:
        self.call_from_thread(self.send_to_session, run_fetch(self.service))

    @work(thread=True, group="subscriptions")
    def unwatch_subscriptions(self, targets: Tuple[Subscription, ...]) -> None:
        self.call_from_thread(self.send_to_session, run_unwatch(self.service, targets))

    def render_session(self) -> None:
        """Show exactly one of progress, table or error for the session state."""
        view = self.session.view()
        progress = self.query_one("#progress", Static)
        loaded = self.query_one("#loaded", Vertical)
        error = self.query_one("#error", Static)

        progress.display = isinstance(view, ProgressView)
        loaded.display = isinstance(view, TableView)
        error.display = isinstance(view, ErrorView)

        if isinstance(view, ProgressView):
            progress.update(view.text)
        elif isinstance(view, TableView):
            self._render_table(view)
        else:
            error.update(view.message)

    def _render_table(self, view: TableView) -> None:
        table = self.query_one("#subscriptions", DataTable)
        marks = frozenset(row.index for row in view.rows if row.marked)
        layout = (
            tuple(self.session.rows[row.index] for row in view.rows),
            view.organization_width,
            view.repository_width,
        )

        if layout != self._table_layout:
            cursor = table.cursor_row
            table.clear(columns=True)
            table.add_column("", width=MARK_WIDTH, key="mark")
            table.add_column("Organization", width=view.organization_width, key="organization")
            table.add_column("Repository", width=view.repository_width, key="repository")
            for row in view.rows:
                table.add_row(
                    MARK if row.marked else "",
                    row.organization,
                    row.repository,
                    key=str(row.index),
                )
            if view.rows:
                table.move_cursor(row=min(max(cursor, 0), len(view.rows) - 1))
            self._table_layout = layout
            logger.debug(f"Rendered {len(view.rows)} rows")
        else:
            for index in marks ^ self._rendered_marks:
                table.update_cell(str(index), "mark", MARK if index in marks else "")

        self._rendered_marks = marks
        table.styles.height = view.page_size + 1
        if self.session.focused and not table.has_focus:
            table.focus()
