"""Drill-down navigation over the tracker hierarchy.

Levels run Project -> Release -> Features -> Feature. Entering a level lazily
loads its list from the record source and records the selected id in the
breadcrumb; backing out deselects the list being left. The Feature level is a
read view that shares the Features cursor.
"""

from __future__ import annotations

import logging
from enum import Enum

from aha_cli.domain.models import FeatureDraft, RequirementDraft, TrackerRecord
from aha_cli.navigation.breadcrumb import Breadcrumb, BreadcrumbError, BreadcrumbStore
from aha_cli.navigation.detail import DetailView, format_detail, help_text
from aha_cli.navigation.hierarchy import FeatureRow, HierarchyCache, Level
from aha_cli.tracker.record_source import RecordSource, RecordSourceError

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"
    BACK = "back"
    ENTER = "enter"


class Navigator:
    def __init__(
        self,
        records: RecordSource,
        breadcrumbs: BreadcrumbStore,
        cache: HierarchyCache | None = None,
    ) -> None:
        self.records = records
        self.breadcrumbs = breadcrumbs
        self.cache = cache or HierarchyCache()
        self.level = Level.PROJECT
        self.breadcrumb = Breadcrumb()
        self.debug_text = ""
        self._detail: tuple[int, DetailView] | None = None

    def load_projects(self) -> None:
        """Initial load; failures propagate because there is nothing to browse without them."""
        self.cache.set_projects(self.records.list_projects())

    def handle(self, direction: Direction) -> None:
        self.invalidate_detail()
        self.debug_text = direction.value
        if direction == Direction.UP:
            self.cache.list_for(self.level).previous()
        elif direction == Direction.DOWN:
            self.cache.list_for(self.level).next()
        elif direction == Direction.BACK:
            self.back()
        elif direction == Direction.ENTER:
            self.enter()

    def enter(self) -> bool:
        """Drill into the selected item. Returns False when nothing changed."""
        if self.level == Level.PROJECT:
            project = self.cache.selected_project()
            if project is None or not self._load_releases(project.id):
                return False
            self._record("project", project.id)
            self.level = Level.RELEASE
            return True
        if self.level == Level.RELEASE:
            release = self.cache.selected_release()
            if release is None or not self._load_features(release.id):
                return False
            self._record("release", release.id)
            self.level = Level.FEATURES
            return True
        if self.level == Level.FEATURES:
            row = self.cache.selected_row()
            if row is None:
                return False
            self._record("feature", row.feature.id)
            self.level = Level.FEATURE
            return True
        return False

    def back(self) -> bool:
        if self.level == Level.RELEASE:
            self.cache.releases.unselect()
            self.level = Level.PROJECT
        elif self.level == Level.FEATURES:
            self.cache.features.unselect()
            self.level = Level.RELEASE
        elif self.level == Level.FEATURE:
            self.level = Level.FEATURES
        else:
            return False
        return True

    def restore(self, breadcrumb: Breadcrumb | None) -> Level:
        """Re-select the stored ids, stopping silently at the first one that is gone."""
        if breadcrumb is None:
            return self.level
        self.breadcrumb = breadcrumb

        index = self.cache.projects.position(lambda p: p.id == breadcrumb.project)
        if breadcrumb.project is None or index is None:
            return self.level
        self.cache.projects.select(index)
        if not self._load_releases(breadcrumb.project):
            return self.level
        self.level = Level.RELEASE

        index = self.cache.releases.position(lambda r: r.id == breadcrumb.release)
        if breadcrumb.release is None or index is None:
            return self.level
        self.cache.releases.select(index)
        if not self._load_features(breadcrumb.release):
            return self.level
        self.level = Level.FEATURES

        index = self.cache.features.position(
            lambda row: not row.is_requirement and row.feature.id == breadcrumb.feature
        )
        if breadcrumb.feature is not None and index is not None:
            self.cache.features.select(index)
        return self.level

    def selected_release(self) -> TrackerRecord | None:
        if self.level == Level.PROJECT:
            return None
        return self.cache.selected_release()

    def selected_feature_row(self) -> FeatureRow | None:
        if self.level != Level.FEATURE:
            return None
        return self.cache.selected_row()

    def create_feature(self, draft: FeatureDraft) -> TrackerRecord | None:
        release = self.selected_release()
        if release is None:
            self.debug_text = "select a release before creating a feature"
            return None
        draft.release_id = release.id
        try:
            created = self.records.create_feature(draft)
        except RecordSourceError as exc:
            self._report(f"could not create feature: {exc}")
            return None
        self._reload_features(release.id)
        self.debug_text = "feature created"
        return created

    def create_requirement(self, draft: RequirementDraft) -> TrackerRecord | None:
        row = self.selected_feature_row()
        release = self.cache.selected_release()
        if row is None or release is None:
            self.debug_text = "select a feature before creating a requirement"
            return None
        try:
            created = self.records.create_requirement(row.feature.reference_num, draft)
        except RecordSourceError as exc:
            self._report(f"could not create requirement: {exc}")
            return None
        self._reload_features(release.id, keep_feature_id=row.feature.id)
        self.debug_text = "requirement created"
        return created

    def detail_view(self, width: int = 80) -> DetailView:
        if self.level != Level.FEATURE:
            return help_text(self.level)
        if self._detail is not None and self._detail[0] == width:
            return self._detail[1]
        row = self.cache.selected_row()
        if row is None:
            return DetailView(title="Feature")
        view = format_detail(row, width)
        self._detail = (width, view)
        return view

    def invalidate_detail(self) -> None:
        self._detail = None

    def _load_releases(self, project_id: str) -> bool:
        try:
            releases = self.records.list_releases(project_id)
        except RecordSourceError as exc:
            self._report(f"could not load releases: {exc}")
            return False
        self.cache.set_releases(releases)
        return True

    def _load_features(self, release_id: str) -> bool:
        try:
            features = self.records.list_features(release_id)
        except RecordSourceError as exc:
            self._report(f"could not load features: {exc}")
            return False
        self.cache.set_features(features)
        return True

    def _reload_features(self, release_id: str, keep_feature_id: str | None = None) -> None:
        self.invalidate_detail()
        if not self._load_features(release_id):
            return
        index = None
        if keep_feature_id is not None:
            index = self.cache.features.position(
                lambda row: not row.is_requirement and row.feature.id == keep_feature_id
            )
        self.cache.features.select(index)
        if index is None and self.level == Level.FEATURE:
            self.level = Level.FEATURES

    def _record(self, field: str, value: str) -> None:
        self.breadcrumb = self.breadcrumb.with_field(field, value)
        try:
            self.breadcrumbs.save(self.breadcrumb)
        except BreadcrumbError as exc:
            self.debug_text = str(exc)
            logger.warning("%s", exc)

    def _report(self, message: str) -> None:
        self.debug_text = message
        logger.error(message)
