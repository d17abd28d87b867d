"""Record Source contract, failure types, and factory helpers."""

from __future__ import annotations

from typing import Any, Protocol

from pydantic import ValidationError

from aha_cli.domain.models import (
    FeatureDraft,
    FieldUpdate,
    RecordKind,
    RequirementDraft,
    TrackerRecord,
)
from aha_cli.shared.settings import ConfigError, Settings


class RecordSourceError(RuntimeError):
    """Transport failure talking to the tracker. Never retried."""

    def __init__(self, message: str, reason_code: str = "transport_error") -> None:
        super().__init__(message)
        self.reason_code = reason_code


class RecordParseError(RecordSourceError):
    def __init__(self, message: str) -> None:
        super().__init__(message, reason_code="parse_error")


class RecordSource(Protocol):
    """Tracker operations used by navigation, creation, and reconciliation."""

    def list_projects(self) -> list[TrackerRecord]: ...

    def list_releases(self, project_id: str) -> list[TrackerRecord]: ...

    def list_features(self, release_id: str) -> list[TrackerRecord]: ...

    def create_feature(self, draft: FeatureDraft) -> TrackerRecord: ...

    def create_requirement(self, feature_key: str, draft: RequirementDraft) -> TrackerRecord: ...

    def fetch_record(self, kind: RecordKind, key: str) -> TrackerRecord: ...

    def update_record(self, kind: RecordKind, key: str, update: FieldUpdate) -> TrackerRecord: ...


def parse_record(payload: Any) -> TrackerRecord:
    if not isinstance(payload, dict):
        raise RecordParseError(f"Expected a record object, got {type(payload).__name__}")
    try:
        return TrackerRecord.model_validate(payload)
    except ValidationError as exc:
        raise RecordParseError(f"Invalid tracker record: {exc.error_count()} error(s)") from exc


def parse_records(payload: Any) -> list[TrackerRecord]:
    if not isinstance(payload, list):
        raise RecordParseError(f"Expected a list of records, got {type(payload).__name__}")
    return [parse_record(row) for row in payload]


def build_record_source(settings: Settings) -> RecordSource:
    connector_type = (settings.connector or "api").strip().lower()
    if connector_type == "in_memory":
        from aha_cli.tracker.aha_connector_inmemory import InMemoryRecordSource

        return InMemoryRecordSource()

    from aha_cli.tracker.aha_connector_api import AhaAPIConnector

    if not settings.aha_domain or not settings.aha_token:
        raise ConfigError("AHA_DOMAIN and AHA_TOKEN are required to reach the tracker")
    return AhaAPIConnector(domain=settings.aha_domain, token=settings.aha_token)


__all__ = [
    "RecordParseError",
    "RecordSource",
    "RecordSourceError",
    "build_record_source",
    "parse_record",
    "parse_records",
]
