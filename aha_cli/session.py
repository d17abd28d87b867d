"""Routes input events to the modal controller first, then to navigation."""

from __future__ import annotations

import logging

from aha_cli.domain.models import RecordKind
from aha_cli.navigation.breadcrumb import BreadcrumbStore
from aha_cli.navigation.events import Event, KeyInput, Tick
from aha_cli.navigation.hierarchy import Level
from aha_cli.navigation.keymap import KeyLayout
from aha_cli.navigation.modal import ModalInputController
from aha_cli.navigation.state_machine import Direction, Navigator
from aha_cli.tracker.record_source import RecordSource

logger = logging.getLogger(__name__)


class BrowserSession:
    def __init__(
        self,
        records: RecordSource,
        breadcrumbs: BreadcrumbStore,
        layout: KeyLayout | None = None,
    ) -> None:
        self.layout = layout or KeyLayout()
        self.breadcrumbs = breadcrumbs
        self.navigator = Navigator(records=records, breadcrumbs=breadcrumbs)
        self.modal = ModalInputController(self.navigator, self.layout)
        self.ticks = 0

    def start(self) -> Level:
        """Load projects and resume from the stored breadcrumb."""
        self.navigator.load_projects()
        return self.navigator.restore(self.breadcrumbs.load())

    def dispatch(self, event: Event) -> bool:
        """Handle one event to completion. Returns False when the user quit."""
        if isinstance(event, Tick):
            self.ticks += 1
            return True
        if self.modal.handle(event):
            return True
        return self._handle_nav(event)

    def _handle_nav(self, event: KeyInput) -> bool:
        key = event.key
        layout = self.layout
        if key == layout.quit:
            self.navigator.debug_text = "q exit"
            return False
        if key == layout.search:
            self.navigator.debug_text = "search"
            self.modal.open_search()
        elif key == layout.create:
            self._open_creation()
        elif layout.is_back(key):
            self.navigator.handle(Direction.BACK)
        elif layout.is_enter(key):
            self.navigator.handle(Direction.ENTER)
        elif layout.is_down(key):
            self.navigator.handle(Direction.DOWN)
        elif layout.is_up(key):
            self.navigator.handle(Direction.UP)
        else:
            self.navigator.debug_text = key
        return True

    def _open_creation(self) -> None:
        navigator = self.navigator
        if navigator.level == Level.FEATURE and navigator.selected_feature_row() is not None:
            self.modal.open_creation(RecordKind.REQUIREMENT)
        elif navigator.selected_release() is not None:
            self.modal.open_creation(RecordKind.FEATURE)
        else:
            navigator.debug_text = "select a release to create a feature"
            return
        navigator.debug_text = "create"
