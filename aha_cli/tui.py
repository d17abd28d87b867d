"""Textual front end for the hierarchy browser."""

from __future__ import annotations

import re
from typing import ClassVar

from rich.text import Text
from textual import events
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import Static

from aha_cli.navigation.events import KeyInput, Tick
from aha_cli.navigation.hierarchy import Level, SelectableList
from aha_cli.session import BrowserSession

_HEX_COLOR = re.compile(r"^#[0-9a-fA-F]{6}$")
HIGHLIGHT = "bold black on white"


def render_list(items: SelectableList) -> Text:
    text = Text()
    for idx, label in enumerate(items.labels):
        if idx == items.selected:
            text.append(f">{label}\n", style=HIGHLIGHT)
        else:
            text.append(f" {label}\n")
    return text


class AhaBrowserApp(App):
    """Projects and releases on the left, features and detail on the right."""

    CSS = """
    #menu { width: 30%; }
    #projects { height: 1fr; border: round $secondary; }
    #releases { height: 3fr; border: round $secondary; }
    #features { height: 2fr; border: round $secondary; }
    #detail { height: 3fr; border: round $secondary; overflow-y: auto; }
    #debug { height: 3; border: round $secondary; }
    #prompt { dock: top; margin: 6 10; height: 5; border: double $accent; display: none; }
    """

    TICK_SECONDS: ClassVar[float] = 0.25

    def __init__(self, session: BrowserSession) -> None:
        super().__init__()
        self.session = session

    def compose(self) -> ComposeResult:
        with Horizontal():
            with Vertical(id="menu"):
                yield Static(id="projects")
                yield Static(id="releases")
            with Vertical(id="main"):
                yield Static(id="features")
                yield Static(id="detail")
                yield Static(id="debug")
        yield Static(id="prompt")

    def on_mount(self) -> None:
        self.query_one("#projects").border_title = "Projects"
        self.query_one("#releases").border_title = "Releases"
        self.query_one("#features").border_title = "Features"
        self.query_one("#debug").border_title = "dbg"
        self.set_interval(self.TICK_SECONDS, self._on_tick)
        self.refresh_view()

    def on_key(self, event: events.Key) -> None:
        event.stop()
        event.prevent_default()
        character = event.character if event.is_printable else None
        if not self.session.dispatch(KeyInput(key=event.key, character=character)):
            self.exit()
            return
        self.refresh_view()

    def _on_tick(self) -> None:
        self.session.dispatch(Tick())

    def refresh_view(self) -> None:
        navigator = self.session.navigator
        cache = navigator.cache

        self.query_one("#menu").display = navigator.level in (Level.PROJECT, Level.RELEASE)
        self.query_one("#projects", Static).update(render_list(cache.projects))
        self.query_one("#releases", Static).update(render_list(cache.releases))
        self.query_one("#features", Static).update(render_list(cache.features))

        detail_widget = self.query_one("#detail", Static)
        view = navigator.detail_view(width=detail_widget.size.width or 80)
        detail_widget.border_title = view.title
        detail_widget.update(self._render_detail(view))
        self.query_one("#debug", Static).update(Text(navigator.debug_text))

        modal = self.session.modal
        prompt = self.query_one("#prompt", Static)
        prompt.display = modal.active
        if modal.active:
            prompt.border_title = modal.prompt_label
            prompt.update(Text(modal.state.buffer))

    def _render_detail(self, view) -> Text:
        text = Text()
        for idx, line in enumerate(view.lines):
            if idx == 0 and view.status and _HEX_COLOR.match(view.status_color):
                name, _, _ = line.rpartition(f" [{view.status}]")
                text.append(f"{name} [")
                text.append(view.status, style=f"on {view.status_color}")
                text.append("]\n")
                continue
            text.append(f"{line}\n")
        return text
