from __future__ import annotations

from pathlib import Path

from aha_cli.domain.models import NOTES_NOT_REQUIRED, NOTES_REQUIRED, RecordKind, TrackerRecord
from aha_cli.navigation.breadcrumb import BreadcrumbStore
from aha_cli.navigation.events import KeyInput
from aha_cli.navigation.modal import (
    NOTES_PROMPT,
    CreationWizard,
    ModalInputController,
    ModalKind,
    WizardStep,
)
from aha_cli.navigation.state_machine import Direction, Navigator
from aha_cli.tracker.aha_connector_inmemory import InMemoryRecordSource


def _type(controller: ModalInputController, text: str) -> None:
    for character in text:
        controller.handle(KeyInput.char(character))
    controller.handle(KeyInput("enter"))


def _controller_at_release(tmp_path: Path) -> tuple[ModalInputController, InMemoryRecordSource]:
    source = InMemoryRecordSource()
    source.add_project(TrackerRecord(id="p1", name="Web"))
    source.add_release("p1", TrackerRecord(id="r1", name="2024.1"))
    navigator = Navigator(records=source, breadcrumbs=BreadcrumbStore(tmp_path / "crumb"))
    navigator.load_projects()
    navigator.handle(Direction.DOWN)
    navigator.handle(Direction.ENTER)
    navigator.handle(Direction.DOWN)
    return ModalInputController(navigator), source


def test_feature_wizard_completes_after_third_answer() -> None:
    wizard = CreationWizard(RecordKind.FEATURE)
    assert wizard.prompt == "Feature Name"
    assert wizard.advance("My Feature") == "Description"
    assert wizard.advance("desc text") == NOTES_PROMPT
    assert wizard.advance("Yes") is None
    assert wizard.is_complete

    draft = wizard.finalize()
    assert (draft.name, draft.description, draft.notes) == ("My Feature", "desc text", NOTES_REQUIRED)


def test_feature_notes_need_exact_yes() -> None:
    wizard = CreationWizard(RecordKind.FEATURE)
    for answer in ("n", "d", "yes"):
        wizard.advance(answer)
    assert wizard.finalize().notes == NOTES_NOT_REQUIRED


def test_requirement_wizard_has_two_steps() -> None:
    wizard = CreationWizard(RecordKind.REQUIREMENT)
    assert wizard.prompt == "Requirement Name"
    assert wizard.advance("Sub") == "Description"
    assert wizard.advance("body") is None
    draft = wizard.finalize()
    assert draft.name == "Sub"
    assert draft.notes is None


def test_reset_returns_to_first_step() -> None:
    wizard = CreationWizard(RecordKind.FEATURE)
    wizard.advance("half")
    wizard.reset()
    assert wizard.step == WizardStep.NAME
    assert wizard.name == ""


def test_inactive_controller_passes_keys_through(tmp_path: Path) -> None:
    controller, _ = _controller_at_release(tmp_path)
    assert controller.handle(KeyInput.char("j")) is False


def test_typed_feature_is_created_in_selected_release(tmp_path: Path) -> None:
    controller, source = _controller_at_release(tmp_path)
    controller.open_creation(RecordKind.FEATURE)

    _type(controller, "My Feature")
    assert controller.prompt_label == "Description"
    _type(controller, "desc text")
    assert controller.prompt_label == NOTES_PROMPT
    assert source.created == []
    _type(controller, "Yes")

    assert not controller.active
    assert controller.prompt_label == "Feature Name"
    draft = source.created[0]
    assert (draft.name, draft.release_id, draft.notes) == ("My Feature", "r1", NOTES_REQUIRED)


def test_escape_cancels_and_resets_prompt(tmp_path: Path) -> None:
    controller, source = _controller_at_release(tmp_path)
    controller.open_creation(RecordKind.FEATURE)
    _type(controller, "Half done")

    assert controller.handle(KeyInput("escape")) is True
    assert controller.state.kind == ModalKind.INACTIVE
    assert controller.state.buffer == ""
    assert controller.prompt_label == "Feature Name"
    assert source.created == []


def test_backspace_edits_buffer(tmp_path: Path) -> None:
    controller, _ = _controller_at_release(tmp_path)
    controller.open_search()
    for character in "abc":
        controller.handle(KeyInput.char(character))
    controller.handle(KeyInput("backspace"))
    assert controller.state.buffer == "ab"


def test_enter_in_search_is_swallowed(tmp_path: Path) -> None:
    controller, source = _controller_at_release(tmp_path)
    controller.open_search()
    controller.handle(KeyInput.char("x"))
    assert controller.handle(KeyInput("enter")) is True
    assert controller.state.kind == ModalKind.SEARCH
    assert controller.prompt_label == "Search"
    assert source.created == []
