"""Overlay input modes that take keys ahead of navigation: search and creation wizards."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from aha_cli.domain.models import (
    NOTES_NOT_REQUIRED,
    NOTES_REQUIRED,
    FeatureDraft,
    RecordKind,
    RequirementDraft,
)
from aha_cli.navigation.events import KeyInput
from aha_cli.navigation.keymap import KeyLayout
from aha_cli.navigation.state_machine import Navigator

logger = logging.getLogger(__name__)


class ModalKind(str, Enum):
    INACTIVE = "inactive"
    SEARCH = "search"
    CREATE = "create"


class WizardStep(str, Enum):
    NAME = "name"
    DESCRIPTION = "description"
    NOTES = "notes"


FEATURE_STEPS = (WizardStep.NAME, WizardStep.DESCRIPTION, WizardStep.NOTES)
REQUIREMENT_STEPS = (WizardStep.NAME, WizardStep.DESCRIPTION)
NOTES_PROMPT = "Needs notes? (Yes/No)"
SEARCH_PROMPT = "Search"


class CreationWizard:
    """Ordered prompts that fill a draft Feature or Requirement one answer at a time."""

    def __init__(self, kind: RecordKind) -> None:
        self.kind = kind
        self.steps = FEATURE_STEPS if kind == RecordKind.FEATURE else REQUIREMENT_STEPS
        self.reset()

    def reset(self) -> None:
        self._index = 0
        self.name = ""
        self.description = ""
        self.notes_answer: str | None = None

    @property
    def step(self) -> WizardStep | None:
        if self._index >= len(self.steps):
            return None
        return self.steps[self._index]

    @property
    def is_complete(self) -> bool:
        return self.step is None

    @property
    def initial_prompt(self) -> str:
        return f"{self.kind.value.capitalize()} Name"

    @property
    def prompt(self) -> str:
        step = self.step
        if step is None or step == WizardStep.NAME:
            return self.initial_prompt
        if step == WizardStep.DESCRIPTION:
            return "Description"
        return NOTES_PROMPT

    def advance(self, value: str) -> str | None:
        """Commit `value` to the current step; return the next prompt, or None when done."""
        step = self.step
        if step is None:
            return None
        if step == WizardStep.NAME:
            self.name = value
        elif step == WizardStep.DESCRIPTION:
            self.description = value
        else:
            self.notes_answer = value
        self._index += 1
        return None if self.is_complete else self.prompt

    def finalize(self) -> FeatureDraft | RequirementDraft:
        if self.kind == RecordKind.FEATURE:
            notes = NOTES_REQUIRED if self.notes_answer == "Yes" else NOTES_NOT_REQUIRED
            return FeatureDraft(name=self.name, description=self.description, notes=notes)
        notes = NOTES_REQUIRED if self.notes_answer == "Yes" else None
        return RequirementDraft(name=self.name, description=self.description, notes=notes)


@dataclass
class ModalState:
    kind: ModalKind = ModalKind.INACTIVE
    buffer: str = ""
    wizard: CreationWizard | None = field(default=None)


class ModalInputController:
    def __init__(self, navigator: Navigator, layout: KeyLayout | None = None) -> None:
        self.navigator = navigator
        self.layout = layout or KeyLayout()
        self.state = ModalState()
        self.prompt_label = CreationWizard(RecordKind.FEATURE).initial_prompt

    @property
    def active(self) -> bool:
        return self.state.kind != ModalKind.INACTIVE

    def open_search(self) -> None:
        self.state = ModalState(kind=ModalKind.SEARCH)
        self.prompt_label = SEARCH_PROMPT

    def open_creation(self, kind: RecordKind) -> None:
        wizard = CreationWizard(kind)
        self.state = ModalState(kind=ModalKind.CREATE, wizard=wizard)
        self.prompt_label = wizard.initial_prompt

    def handle(self, event: KeyInput) -> bool:
        """Consume `event` if a modal is open. Returns False when navigation should see it."""
        if not self.active:
            return False
        if event.key == self.layout.escape:
            self.cancel()
        elif event.key == "backspace":
            self.state.buffer = self.state.buffer[:-1]
        elif event.key == "enter":
            if self.state.kind == ModalKind.CREATE:
                self._submit_step()
        elif event.character and event.character.isprintable():
            self.state.buffer += event.character
        return True

    def cancel(self) -> None:
        wizard = self.state.wizard
        if wizard is not None:
            wizard.reset()
            self.prompt_label = wizard.initial_prompt
        self.state = ModalState()

    def _submit_step(self) -> None:
        wizard = self.state.wizard
        if wizard is None:
            return
        next_prompt = wizard.advance(self.state.buffer)
        self.state.buffer = ""
        if next_prompt is not None:
            self.prompt_label = next_prompt
            return

        draft = wizard.finalize()
        self.state = ModalState()
        logger.info("submitting new %s %r", wizard.kind.value, draft.name)
        if isinstance(draft, FeatureDraft):
            self.navigator.create_feature(draft)
        else:
            self.navigator.create_requirement(draft)
        self.prompt_label = wizard.initial_prompt
