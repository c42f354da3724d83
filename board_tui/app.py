"""Scrum board TUI: interactive terminal kanban for a project's stories."""

from __future__ import annotations

import asyncio

from rich.markup import escape
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical, VerticalScroll
from textual.css.query import NoMatches
from textual.message import Message
from textual.reactive import reactive
from textual.screen import ModalScreen
from textual.widgets import Footer, Header, Input, OptionList, Static
from textual.widgets.option_list import Option

from scrumboard.backlog import BacklogActions
from scrumboard.board.drag_drop import DragDropController, DragOutcome
from scrumboard.board.loader import load_board
from scrumboard.board.models import COLUMN_ORDER, BoardColumn, ColumnSummary, Story
from scrumboard.board.notifications import SlotNotifier, Toast, ToastSlot
from scrumboard.board.store import BoardStateStore
from scrumboard.config import ClientConfig
from scrumboard.exceptions import GatewayError, PermissionDeniedError
from scrumboard.gateway.interface import StoryGateway
from scrumboard.roles import role_display_name
from scrumboard.session import SessionContext

PRIORITY_COLORS = {
    "low": "green",
    "medium": "yellow",
    "high": "dark_orange",
    "critical": "red",
}

LOCKED_HINT = "Mark Sprint Ready to move this story"


def _story_detail(story: Story) -> str:
    lines = [
        f"[bold]#{story.id} {escape(story.title)}[/]",
        "",
        f"Priority: {story.priority.value}",
        f"Points: {story.points}",
        f"Status: {story.status.value}",
        f"Sprint Ready: {'yes' if story.is_sprint_ready else 'no'}",
        f"Starred: {'yes' if story.is_starred else 'no'}",
    ]
    if story.assignee:
        lines.append(f"Assignee: {story.assignee}")
    if story.release_plan_key:
        lines.append(f"Release: {escape(story.release_plan_key)} {escape(story.release_plan_name or '')}".rstrip())
    if story.tags:
        lines.append(f"Tags: {', '.join(story.tags)}")
    if story.labels:
        lines.append(f"Labels: {', '.join(story.labels)}")
    lines += ["", escape(story.description) if story.description else "[dim]No description provided[/]"]
    if story.acceptance_criteria:
        lines += ["", "[bold]Acceptance Criteria[/]", escape(story.acceptance_criteria)]
    return "\n".join(lines)


class CardSelected(Message):
    def __init__(self, story: Story) -> None:
        super().__init__()
        self.story = story


class StoryCard(Static):
    can_focus = True

    def __init__(self, story: Story, col_index: int, **kwargs) -> None:
        super().__init__(**kwargs)
        self.story = story
        self.col_index = col_index

    def compose(self) -> ComposeResult:
        s = self.story
        color = PRIORITY_COLORS.get(s.priority.value, "white")
        mvp = " [bold magenta]MVP[/]" if s.is_mvp else ""
        star = "[yellow]\u2605[/] " if s.is_starred else ""
        yield Static(f"{star}[bold]#{s.id}[/] [{color}]{s.priority.value}[/] {escape(s.title)}{mvp}")
        if s.is_sprint_ready:
            yield Static(f"[dim]{s.points} pts[/] [green]Sprint Ready[/]")
        else:
            yield Static(f"[dim]{s.points} pts  {LOCKED_HINT}[/]")

    def on_focus(self) -> None:
        self.post_message(CardSelected(self.story))


class BoardColumnView(VerticalScroll):
    def __init__(self, column: BoardColumn, col_index: int, **kwargs) -> None:
        super().__init__(**kwargs)
        self.column = column
        self.col_index = col_index

    def _header(self, summary: ColumnSummary) -> Static:
        return Static(
            f"[bold underline]{self.column.value}[/] [dim]({summary.count}) {summary.points} story points[/]",
            classes="column-header",
        )

    def compose(self) -> ComposeResult:
        yield self._header(ColumnSummary(column=self.column))
        yield Static("[dim]No user stories added[/]", classes="empty-label")

    async def show_stories(self, stories: list[Story], summary: ColumnSummary) -> None:
        widgets: list[Static] = [self._header(summary)]
        if not stories:
            widgets.append(Static("[dim]No user stories added[/]", classes="empty-label"))
        for story in sorted(stories, key=lambda s: s.id):
            widgets.append(
                StoryCard(story, col_index=self.col_index, id=f"story-{story.id}", classes="card")
            )
        await self.remove_children()
        await self.mount_all(widgets)


class DetailPanel(VerticalScroll):
    content_text: reactive[str] = reactive("")
    title_text: reactive[str] = reactive("Details")

    def compose(self) -> ComposeResult:
        yield Static("[dim]Select a story to view details[/]", id="detail-content")

    def watch_content_text(self, value: str) -> None:
        try:
            widget = self.query_one("#detail-content", Static)
            widget.update(value)
        except NoMatches:
            pass

    def watch_title_text(self, value: str) -> None:
        self.border_title = value


class ToastBanner(Static):
    """Renders whatever the toast slot currently holds."""

    def show_toast(self, toast: Toast | None) -> None:
        if toast is None:
            self.update("")
            self.remove_class("visible")
        else:
            self.update(escape(toast.message))
            self.add_class("visible")


class MoveScreen(ModalScreen[str | None]):
    """Column picker that stands in for dragging a card."""

    CSS = """
    MoveScreen { align: center middle; }
    #move-dialog {
        width: 40; height: auto; max-height: 20;
        border: solid $primary; background: $surface; padding: 1 2;
    }
    #move-title { text-align: center; padding-bottom: 1; }
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, story: Story) -> None:
        super().__init__()
        self.story = story

    def compose(self) -> ComposeResult:
        with Vertical(id="move-dialog"):
            yield Static(f"[bold]Move #{self.story.id} to:[/]", id="move-title")
            options = []
            for col in COLUMN_ORDER:
                label = col.value
                if col is self.story.status:
                    label += " [dim](current)[/]"
                options.append(Option(label, id=col.value))
            yield OptionList(*options, id="move-options")

    @on(OptionList.OptionSelected, "#move-options")
    def _on_option_selected(self, event: OptionList.OptionSelected) -> None:
        self.dismiss(event.option.id)

    def action_cancel(self) -> None:
        self.dismiss(None)


class AlertModal(ModalScreen[None]):
    """Blocking message the user has to acknowledge."""

    CSS = """
    AlertModal { align: center middle; }
    #alert-dialog {
        width: 60; height: auto; max-height: 12;
        border: solid $error; background: $surface; padding: 1 2;
    }
    #alert-hint { color: $text-muted; padding-top: 1; }
    """

    BINDINGS = [
        Binding("enter", "acknowledge", "OK"),
        Binding("escape", "acknowledge", "OK"),
    ]

    def __init__(self, message: str) -> None:
        super().__init__()
        self.message = message

    def compose(self) -> ComposeResult:
        with Vertical(id="alert-dialog"):
            yield Static(f"[bold red]{escape(self.message)}[/]", id="alert-message")
            yield Static("Press Enter to continue", id="alert-hint")

    def action_acknowledge(self) -> None:
        self.dismiss(None)


class PromptModal(ModalScreen[str | None]):
    """Single-line input dialog used for estimates, release plans and search."""

    CSS = """
    PromptModal { align: center middle; }
    #prompt-dialog {
        width: 50; height: auto; max-height: 12;
        border: solid $primary; background: $surface; padding: 1 2;
    }
    #prompt-title { text-align: center; padding-bottom: 1; }
    #prompt-input { width: 100%; }
    """

    BINDINGS = [Binding("escape", "cancel", "Cancel")]

    def __init__(self, title: str, placeholder: str = "", value: str = "") -> None:
        super().__init__()
        self.prompt_title = title
        self.placeholder = placeholder
        self.initial_value = value

    def compose(self) -> ComposeResult:
        with Vertical(id="prompt-dialog"):
            yield Static(f"[bold]{self.prompt_title}[/]", id="prompt-title")
            yield Input(value=self.initial_value, placeholder=self.placeholder, id="prompt-input")

    @on(Input.Submitted, "#prompt-input")
    def _on_submit(self, event: Input.Submitted) -> None:
        self.dismiss(event.value.strip())

    def action_cancel(self) -> None:
        self.dismiss(None)


class ScrumBoardApp(App):
    TITLE = "Scrum Board"

    CSS = """
    #main-layout {
        height: 1fr;
        width: 100%;
    }

    #board {
        width: 1fr;
        height: 100%;
    }

    BoardColumnView {
        width: 1fr;
        height: 100%;
        border-right: solid $surface-lighten-2;
        padding: 0;
    }

    BoardColumnView.active-col {
        border-right: solid $accent;
        border-left: solid $accent;
    }

    .column-header {
        text-align: center;
        padding: 0;
        background: $surface-lighten-1;
        margin-bottom: 1;
        height: 1;
    }

    .empty-label {
        text-align: center;
        color: $text-muted;
    }

    .card {
        padding: 0 1;
        margin: 0 0 1 0;
    }

    StoryCard:focus {
        background: $surface-lighten-1;
    }

    #toast {
        display: none;
        height: auto;
        padding: 0 1;
        background: $warning;
        color: $text;
    }

    #toast.visible {
        display: block;
    }

    #detail-panel {
        width: 50;
        height: 100%;
        border-left: solid $primary;
        padding: 1 1;
        display: none;
    }

    #detail-panel.visible {
        display: block;
    }
    """

    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "refresh", "Refresh"),
        Binding("m", "move_card", "Move"),
        Binding("t", "toggle_sprint_ready", "Sprint Ready"),
        Binding("e", "estimate", "Estimate"),
        Binding("s", "toggle_star", "Star"),
        Binding("l", "link_release", "Release"),
        Binding("slash", "search", "Search"),
        Binding("d", "toggle_detail", "Detail"),
        Binding("left", "col_left", "< Col", show=True),
        Binding("right", "col_right", "Col >", show=True),
        Binding("up", "card_up", "", show=False),
        Binding("down", "card_down", "", show=False),
        Binding("question_mark", "help_screen", "?=Help"),
    ]

    def __init__(
        self,
        gateway: StoryGateway,
        project_id: int,
        config: ClientConfig | None = None,
        session: SessionContext | None = None,
        owns_gateway: bool = False,
    ) -> None:
        super().__init__()
        self.gateway = gateway
        self.project_id = project_id
        self.client_config = config or ClientConfig(project_id=project_id)
        self.user_session = session
        self._owns_gateway = owns_gateway
        self.store = BoardStateStore()
        self.toast_slot = ToastSlot(on_change=self._on_toast_changed, default_timeout=self.client_config.toast_timeout)
        self.notifier = SlotNotifier(self.toast_slot, alert_handler=self._show_alert)
        self.controller = DragDropController(
            self.store, gateway, self.notifier, toast_timeout=self.client_config.toast_timeout
        )
        self.search_text: str = ""
        self.active_col_index: int = 0
        self._focused_story_id: int | None = None

    # -- Notifications --

    async def _show_alert(self, message: str) -> None:
        acknowledged: asyncio.Future[None] = asyncio.get_running_loop().create_future()

        def _on_dismiss(_result: None) -> None:
            if not acknowledged.done():
                acknowledged.set_result(None)

        self.push_screen(AlertModal(message), callback=_on_dismiss)
        await acknowledged

    def _on_toast_changed(self, toast: Toast | None) -> None:
        try:
            self._board_screen().query_one("#toast", ToastBanner).show_toast(toast)
        except NoMatches:
            pass

    # -- Layout --

    def compose(self) -> ComposeResult:
        yield Header()
        yield ToastBanner(id="toast")
        with Horizontal(id="main-layout"):
            with Horizontal(id="board"):
                for i, col in enumerate(COLUMN_ORDER):
                    yield BoardColumnView(col, col_index=i, id=f"col-{i}")
            yield DetailPanel(id="detail-panel")
        yield Footer()

    def _board_screen(self):
        # App.query only sees the active screen; the board lives under any modal
        return self.screen_stack[0]

    async def on_mount(self) -> None:
        self.store.add_listener(self._on_store_changed)
        self._highlight_active_column()
        await self.action_refresh()

    async def on_unmount(self) -> None:
        self.controller.close()
        self.toast_slot.close()
        self.store.remove_listener(self._on_store_changed)
        if self._owns_gateway and hasattr(self.gateway, "aclose"):
            await self.gateway.aclose()

    def _on_store_changed(self) -> None:
        self.call_later(self._render_board)

    async def _render_board(self) -> None:
        by_col = self.store.columns()
        if self.search_text:
            matching = {s.id for s in self.store.query(search_text=self.search_text)}
            by_col = {col: [s for s in stories if s.id in matching] for col, stories in by_col.items()}
        # Headers keep whole-column totals while a search narrows the cards
        summaries = {s.column: s for s in self.store.column_summary()}
        for view in self._get_column_widgets():
            await view.show_stories(by_col[view.column], summaries[view.column])
        self.sub_title = self._subtitle()
        self._restore_focus()

    def _restore_focus(self) -> None:
        if self._focused_story_id is None:
            return
        for card in self._board_screen().query(StoryCard):
            if card.story.id == self._focused_story_id:
                card.focus()
                return

    @on(CardSelected)
    def _on_card_selected(self, event: CardSelected) -> None:
        self._focused_story_id = event.story.id
        panel = self._board_screen().query_one("#detail-panel", DetailPanel)
        panel.title_text = f"Story #{event.story.id}"
        panel.content_text = _story_detail(event.story)

    # -- Loading --

    async def action_refresh(self) -> None:
        if self.user_session is None:
            self.user_session = SessionContext()
            await self.user_session.refresh(self.gateway)
        try:
            await load_board(self.gateway, self.store, self.project_id)
        except GatewayError as e:
            self.notifier.toast(f"Could not load stories: {e}")
            return
        self.sub_title = self._subtitle()

    def _subtitle(self) -> str:
        parts = [f"Project {self.project_id}"]
        if self.user_session is not None and self.user_session.is_authenticated:
            roles = ", ".join(role_display_name(r) for r in self.user_session.roles)
            parts.append(f"{self.user_session.username or 'user'} ({roles})")
        parts.append(f"{self.store.sprint_ready_count()}/{len(self.store)} sprint ready")
        if self.search_text:
            parts.append(f"search: {self.search_text}")
        return " | ".join(parts)

    # -- Column navigation --

    def _get_column_widgets(self) -> list[BoardColumnView]:
        return list(self._board_screen().query(BoardColumnView))

    def _highlight_active_column(self) -> None:
        for i, col in enumerate(self._get_column_widgets()):
            col.set_class(i == self.active_col_index, "active-col")

    def _cards_in_column(self, col_index: int) -> list[StoryCard]:
        cols = self._get_column_widgets()
        if col_index < 0 or col_index >= len(cols):
            return []
        return [w for w in cols[col_index].walk_children() if isinstance(w, StoryCard)]

    def _focus_first_in_active_col(self) -> None:
        cards = self._cards_in_column(self.active_col_index)
        if cards:
            cards[0].focus()
        else:
            cols = self._get_column_widgets()
            if self.active_col_index < len(cols):
                cols[self.active_col_index].focus()

    def action_col_left(self) -> None:
        if self.active_col_index > 0:
            self.active_col_index -= 1
            self._highlight_active_column()
            self._focus_first_in_active_col()

    def action_col_right(self) -> None:
        if self.active_col_index < len(COLUMN_ORDER) - 1:
            self.active_col_index += 1
            self._highlight_active_column()
            self._focus_first_in_active_col()

    def action_card_up(self) -> None:
        cards = self._cards_in_column(self.active_col_index)
        if not cards:
            return
        try:
            idx = cards.index(self.focused)
            if idx > 0:
                cards[idx - 1].focus()
        except ValueError:
            cards[-1].focus()

    def action_card_down(self) -> None:
        cards = self._cards_in_column(self.active_col_index)
        if not cards:
            return
        try:
            idx = cards.index(self.focused)
            if idx < len(cards) - 1:
                cards[idx + 1].focus()
        except ValueError:
            cards[0].focus()

    def watch_focused(self, focused) -> None:
        if isinstance(focused, StoryCard):
            self.active_col_index = focused.col_index
            self._highlight_active_column()

    def _focused_story(self) -> Story | None:
        if isinstance(self.focused, StoryCard):
            return self.store.get(self.focused.story.id)
        return None

    # -- Move --

    async def move_story(self, story_id: int, column: str | BoardColumn) -> DragOutcome:
        self._focused_story_id = story_id
        return await self.controller.drop(story_id, column)

    def action_move_card(self) -> None:
        story = self._focused_story()
        if story is None:
            self.notifier.toast("Select a story first")
            return

        def _on_move_result(result: str | None) -> None:
            if result:
                self.run_worker(self.move_story(story.id, result))

        self.push_screen(MoveScreen(story), callback=_on_move_result)

    # -- Backlog actions --

    def _backlog(self) -> BacklogActions:
        return BacklogActions(self.store, self.gateway, self.notifier, self.user_session or SessionContext())

    def action_toggle_sprint_ready(self) -> None:
        story = self._focused_story()
        if story is None:
            self.notifier.toast("Select a story first")
            return
        self.run_worker(self._backlog().toggle_sprint_ready(story.id))

    def action_estimate(self) -> None:
        story = self._focused_story()
        if story is None:
            self.notifier.toast("Select a story first")
            return

        def _on_points(value: str | None) -> None:
            if value is None:
                return
            try:
                points = int(value)
            except ValueError:
                self.notifier.toast("Story points must be a whole number")
                return
            self.run_worker(self._estimate(story.id, points))

        self.push_screen(
            PromptModal(f"Estimate #{story.id}", "Story points", str(story.points or "")),
            callback=_on_points,
        )

    async def _estimate(self, story_id: int, points: int) -> None:
        try:
            await self._backlog().estimate(story_id, points)
        except (ValueError, PermissionDeniedError) as e:
            self.notifier.toast(str(e))

    def action_toggle_star(self) -> None:
        story = self._focused_story()
        if story is None:
            self.notifier.toast("Select a story first")
            return
        self.run_worker(self._backlog().toggle_star(story.id))

    def action_link_release(self) -> None:
        story = self._focused_story()
        if story is None:
            self.notifier.toast("Select a story first")
            return

        def _on_identifier(value: str | None) -> None:
            if value is not None:
                self.run_worker(self._link_release(story.id, value))

        self.push_screen(
            PromptModal(
                f"Link #{story.id} to release plan",
                "Release Plan ID or key (e.g., 12 or REL-012)",
                story.release_plan_key or "",
            ),
            callback=_on_identifier,
        )

    async def _link_release(self, story_id: int, identifier: str) -> None:
        try:
            await self._backlog().link_release_plan(story_id, identifier)
        except PermissionDeniedError as e:
            self.notifier.toast(str(e))

    # -- Search --

    def action_search(self) -> None:
        def _on_search(value: str | None) -> None:
            if value is None:
                return
            self.search_text = value
            self.sub_title = self._subtitle()
            self.call_later(self._render_board)

        self.push_screen(PromptModal("Search stories", "Title or description", self.search_text), callback=_on_search)

    # -- Detail toggle --

    def action_toggle_detail(self) -> None:
        panel = self._board_screen().query_one("#detail-panel", DetailPanel)
        panel.toggle_class("visible")

    def action_help_screen(self) -> None:
        self.notifier.toast(
            "Keys: m=move  t=sprint ready  e=estimate  s=star  l=release plan  /=search  Left/Right=cols  Up/Down=cards  d=detail  r=refresh  q=quit",
            timeout=6,
        )


def run_board(config: ClientConfig | None = None) -> None:
    """Entry point for the scrumboard-board CLI."""
    if config is None:
        from scrumboard.config import load_config

        config = load_config()
    if config.project_id is None:
        raise SystemExit("Error: project_id is not configured (set SCRUMBOARD_PROJECT_ID)")

    from scrumboard.gateway.http import HttpStoryGateway

    gateway = HttpStoryGateway(config)
    app = ScrumBoardApp(gateway, config.project_id, config=config, owns_gateway=True)
    app.run()
