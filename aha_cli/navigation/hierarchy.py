"""In-memory Project / Release / Feature collections with one selection per level."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Generic, TypeVar

from aha_cli.domain.models import TrackerRecord

T = TypeVar("T")

CHILD_MARK = "├"
LAST_CHILD_MARK = "└"


class Level(str, Enum):
    PROJECT = "project"
    RELEASE = "release"
    FEATURES = "features"
    FEATURE = "feature"


@dataclass
class SelectableList(Generic[T]):
    """Ordered (label, item) pairs plus an optional, always in-range selection."""

    items: list[tuple[str, T]] = field(default_factory=list)
    selected: int | None = None

    def __len__(self) -> int:
        return len(self.items)

    @property
    def labels(self) -> list[str]:
        return [label for label, _ in self.items]

    def next(self) -> None:
        if not self.items:
            self.selected = None
        elif self.selected is None:
            self.selected = 0
        else:
            self.selected = min(self.selected + 1, len(self.items) - 1)

    def previous(self) -> None:
        if not self.items:
            self.selected = None
        elif self.selected is None:
            self.selected = 0
        else:
            self.selected = max(self.selected - 1, 0)

    def select(self, index: int | None) -> None:
        if index is not None and not 0 <= index < len(self.items):
            raise IndexError(f"Selection {index} out of range for {len(self.items)} items")
        self.selected = index

    def unselect(self) -> None:
        self.selected = None

    def selected_item(self) -> T | None:
        if self.selected is None:
            return None
        return self.items[self.selected][1]

    def position(self, predicate) -> int | None:
        for idx, (_, item) in enumerate(self.items):
            if predicate(item):
                return idx
        return None


@dataclass(frozen=True)
class FeatureRow:
    """One displayed row of the Features pane; `requirement` is None for the feature itself."""

    feature: TrackerRecord
    requirement: TrackerRecord | None = None

    @property
    def record(self) -> TrackerRecord:
        return self.requirement if self.requirement is not None else self.feature

    @property
    def is_requirement(self) -> bool:
        return self.requirement is not None


def _status_label(record: TrackerRecord) -> str:
    return f"{record.name} - {record.status_name}"


def flatten_features(features: list[TrackerRecord]) -> list[tuple[str, FeatureRow]]:
    """Render the feature tree as rows: parent first, then its requirements in order."""
    rows: list[tuple[str, FeatureRow]] = []
    for feature in features:
        rows.append((_status_label(feature), FeatureRow(feature=feature)))
        last = len(feature.requirements) - 1
        for idx, requirement in enumerate(feature.requirements):
            mark = LAST_CHILD_MARK if idx == last else CHILD_MARK
            rows.append(
                (f"{mark} {_status_label(requirement)}", FeatureRow(feature, requirement))
            )
    return rows


class HierarchyCache:
    """Projects, releases, and the feature tree currently loaded from the tracker."""

    def __init__(self) -> None:
        self.projects: SelectableList[TrackerRecord] = SelectableList()
        self.releases: SelectableList[TrackerRecord] = SelectableList()
        self.feature_tree: list[TrackerRecord] = []
        self.features: SelectableList[FeatureRow] = SelectableList()

    def set_projects(self, projects: list[TrackerRecord]) -> None:
        self.projects = SelectableList([(p.name, p) for p in projects])

    def set_releases(self, releases: list[TrackerRecord]) -> None:
        self.releases = SelectableList([(r.name, r) for r in releases])

    def set_features(self, features: list[TrackerRecord]) -> None:
        self.feature_tree = list(features)
        self.features = SelectableList(flatten_features(self.feature_tree))

    def list_for(self, level: Level) -> SelectableList:
        if level == Level.PROJECT:
            return self.projects
        if level == Level.RELEASE:
            return self.releases
        # Feature level is a read view over the Features cursor.
        return self.features

    def selected_project(self) -> TrackerRecord | None:
        return self.projects.selected_item()

    def selected_release(self) -> TrackerRecord | None:
        return self.releases.selected_item()

    def selected_row(self) -> FeatureRow | None:
        return self.features.selected_item()
