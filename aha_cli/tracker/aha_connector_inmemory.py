"""In-memory record source for deterministic tests and offline demos."""

from __future__ import annotations

from aha_cli.domain.models import (
    LINKED_PR_FIELD_NAME,
    AssignedUser,
    CustomField,
    Description,
    FeatureDraft,
    FieldUpdate,
    RecordKind,
    RequirementDraft,
    TrackerRecord,
    WorkflowStatus,
)
from aha_cli.tracker.record_source import RecordSourceError


class InMemoryRecordSource:
    """Record source backed by dictionaries; every write is recorded."""

    def __init__(self) -> None:
        self.projects: list[TrackerRecord] = []
        self.releases: dict[str, list[TrackerRecord]] = {}
        self.features: dict[str, list[TrackerRecord]] = {}
        self.records: dict[tuple[RecordKind, str], TrackerRecord] = {}
        self.executed_updates: list[tuple[RecordKind, str, FieldUpdate]] = []
        self.created: list[FeatureDraft | RequirementDraft] = []
        self.calls: list[tuple[str, str]] = []
        self.failing_keys: set[str] = set()
        self._next_id = 1000

    def add_project(self, record: TrackerRecord) -> TrackerRecord:
        self.projects.append(record)
        return record

    def add_release(self, project_id: str, record: TrackerRecord) -> TrackerRecord:
        self.releases.setdefault(project_id, []).append(record)
        return record

    def add_feature(self, release_id: str, record: TrackerRecord) -> TrackerRecord:
        self.features.setdefault(release_id, []).append(record)
        self._index(RecordKind.FEATURE, record)
        for requirement in record.requirements:
            self._index(RecordKind.REQUIREMENT, requirement)
        return record

    def list_projects(self) -> list[TrackerRecord]:
        self.calls.append(("list_projects", ""))
        return list(self.projects)

    def list_releases(self, project_id: str) -> list[TrackerRecord]:
        self.calls.append(("list_releases", project_id))
        self._maybe_fail(project_id)
        return list(self.releases.get(project_id, []))

    def list_features(self, release_id: str) -> list[TrackerRecord]:
        self.calls.append(("list_features", release_id))
        self._maybe_fail(release_id)
        return list(self.features.get(release_id, []))

    def create_feature(self, draft: FeatureDraft) -> TrackerRecord:
        self.calls.append(("create_feature", draft.release_id))
        self.created.append(draft)
        record = TrackerRecord(
            id=self._allocate_id(),
            name=draft.name,
            reference_num=f"NEW-{self._next_id}",
            description=Description(body=draft.description),
            workflow_status=WorkflowStatus(name="Under consideration", color="#dddddd"),
        )
        return self.add_feature(draft.release_id, record)

    def create_requirement(self, feature_key: str, draft: RequirementDraft) -> TrackerRecord:
        self.calls.append(("create_requirement", feature_key))
        self.created.append(draft)
        parent = self.records.get((RecordKind.FEATURE, feature_key))
        if parent is None:
            raise RecordSourceError(f"Unknown feature {feature_key}", reason_code="http_404")
        requirement = TrackerRecord(
            id=self._allocate_id(),
            name=draft.name,
            reference_num=f"{feature_key}-{len(parent.requirements) + 1}",
            description=Description(body=draft.description),
            workflow_status=WorkflowStatus(name="Under consideration", color="#dddddd"),
        )
        parent.requirements.append(requirement)
        self._index(RecordKind.REQUIREMENT, requirement)
        return requirement

    def fetch_record(self, kind: RecordKind, key: str) -> TrackerRecord:
        self.calls.append(("fetch_record", key))
        self._maybe_fail(key)
        record = self.records.get((kind, key))
        if record is None:
            raise RecordSourceError(f"Unknown {kind.value} {key}", reason_code="http_404")
        return record.model_copy(deep=True)

    def update_record(self, kind: RecordKind, key: str, update: FieldUpdate) -> TrackerRecord:
        self.calls.append(("update_record", key))
        if update.is_noop():
            raise ValueError("Refusing to submit an empty update")
        record = self.records.get((kind, key))
        if record is None:
            raise RecordSourceError(f"Unknown {kind.value} {key}", reason_code="http_404")
        self.executed_updates.append((kind, key, update))
        if update.assignee is not None:
            record.assigned_to_user = AssignedUser(email=update.assignee)
        if update.status is not None:
            color = record.status_color
            record.workflow_status = WorkflowStatus(name=update.status, color=color)
        if update.linked_pr_url is not None:
            record.custom_fields.append(
                CustomField(key="pull_request", name=LINKED_PR_FIELD_NAME, value=update.linked_pr_url)
            )
        return record.model_copy(deep=True)

    def _index(self, kind: RecordKind, record: TrackerRecord) -> None:
        if record.reference_num:
            self.records[(kind, record.reference_num)] = record

    def _maybe_fail(self, key: str) -> None:
        if key in self.failing_keys:
            raise RecordSourceError(f"Simulated transport failure for {key}")

    def _allocate_id(self) -> str:
        self._next_id += 1
        return str(self._next_id)
