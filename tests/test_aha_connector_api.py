from __future__ import annotations

import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import pytest
import requests

from aha_cli.domain.models import FeatureDraft, FieldUpdate, RecordKind, RequirementDraft
from aha_cli.shared.settings import ConfigError, Settings
from aha_cli.tracker.aha_connector_api import AhaAPIConnector
from aha_cli.tracker.aha_connector_inmemory import InMemoryRecordSource
from aha_cli.tracker.record_source import (
    RecordParseError,
    RecordSourceError,
    build_record_source,
)


@dataclass
class FakeResponse:
    status_code: int
    payload: Any

    @property
    def content(self) -> bytes:
        if self.payload is None:
            return b""
        return b"json"

    def json(self) -> Any:
        if isinstance(self.payload, Exception):
            raise self.payload
        return self.payload


class FakeSession:
    def __init__(self, responses: list[Any]) -> None:
        self.responses = responses
        self.calls: list[dict[str, Any]] = []

    def request(self, **kwargs: Any) -> FakeResponse:
        self.calls.append(kwargs)
        if not self.responses:
            raise RuntimeError("No fake response left")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _connector(*responses: Any) -> tuple[AhaAPIConnector, FakeSession]:
    session = FakeSession(list(responses))
    return AhaAPIConnector(domain="acme", token="secret-token", session=session), session


def _settings(**overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "aha_domain": "acme",
        "aha_token": "tok",
        "workflow_email": "",
        "github_token": "",
        "github_login": "",
        "workflow_repo": "",
        "connector": "api",
        "breadcrumb_path": Path("crumb"),
        "log_path": Path("log"),
    }
    values.update(overrides)
    return Settings(**values)


def test_list_projects_sends_bearer_token_and_parses_products() -> None:
    connector, session = _connector(
        FakeResponse(200, {"products": [{"id": 1, "name": "Web"}, {"id": "2", "name": "API"}]})
    )
    projects = connector.list_projects()

    assert [p.id for p in projects] == ["1", "2"]
    call = session.calls[0]
    assert call["method"] == "GET"
    assert call["url"] == "https://acme.aha.io/api/v1/products"
    assert call["headers"]["Authorization"] == "Bearer secret-token"
    assert call["timeout"] == 50


def test_list_releases_excludes_shipped() -> None:
    connector, session = _connector(FakeResponse(200, {"releases": []}))
    assert connector.list_releases("p1") == []
    assert session.calls[0]["url"].endswith("/products/p1/releases")
    assert session.calls[0]["params"]["exclude_shipped"] == "true"


def test_list_features_keeps_nested_requirements() -> None:
    connector, _ = _connector(
        FakeResponse(
            200,
            {
                "features": [
                    {
                        "id": "f1",
                        "name": "Login",
                        "reference_num": "WEB-1",
                        "workflow_status": {"name": "Ready", "color": "#123456"},
                        "requirements": [{"id": "q1", "name": "Form"}],
                        "score": 7,
                    }
                ]
            },
        )
    )
    (feature,) = connector.list_features("r1")
    assert feature.status_color == "#123456"
    assert feature.requirements[0].name == "Form"
    assert feature.model_extra["score"] == 7


def test_create_feature_posts_wrapped_payload() -> None:
    connector, session = _connector(
        FakeResponse(200, {"feature": {"id": "9", "name": "New", "reference_num": "WEB-9"}})
    )
    draft = FeatureDraft(name="New", description="d", release_id="r1", notes="Required")
    created = connector.create_feature(draft)

    assert created.reference_num == "WEB-9"
    call = session.calls[0]
    assert call["method"] == "POST"
    assert call["url"].endswith("/releases/r1/features")
    assert call["json"] == {
        "feature": {
            "name": "New",
            "description": "d",
            "release_id": "r1",
            "custom_fields": {"release_notes1": "Required"},
        }
    }


def test_create_feature_requires_release() -> None:
    connector, session = _connector()
    with pytest.raises(ValueError):
        connector.create_feature(FeatureDraft(name="x"))
    assert session.calls == []


def test_create_requirement_targets_parent_feature() -> None:
    connector, session = _connector(
        FakeResponse(200, {"requirement": {"id": "3", "name": "Sub", "reference_num": "WEB-1-1"}})
    )
    connector.create_requirement("WEB-1", RequirementDraft(name="Sub", description="b"))
    assert session.calls[0]["url"].endswith("/features/WEB-1/requirements")
    assert session.calls[0]["json"] == {"requirement": {"name": "Sub", "description": "b"}}


def test_update_sends_only_changed_fields() -> None:
    connector, session = _connector(
        FakeResponse(200, {"requirement": {"id": "3", "name": "Sub"}})
    )
    connector.update_record(
        RecordKind.REQUIREMENT, "WEB-1-1", FieldUpdate(status="In code review")
    )
    call = session.calls[0]
    assert call["method"] == "PUT"
    assert call["url"].endswith("/requirements/WEB-1-1")
    assert call["json"] == {"requirement": {"workflow_status": {"name": "In code review"}}}


def test_update_refuses_empty_plan() -> None:
    connector, session = _connector()
    with pytest.raises(ValueError):
        connector.update_record(RecordKind.FEATURE, "WEB-1", FieldUpdate())
    assert session.calls == []


def test_http_error_carries_reason_code() -> None:
    connector, _ = _connector(FakeResponse(404, {"error": "not found"}))
    with pytest.raises(RecordSourceError) as excinfo:
        connector.fetch_record(RecordKind.FEATURE, "WEB-404")
    assert excinfo.value.reason_code == "http_404"


def test_transport_failure_becomes_record_source_error() -> None:
    connector, _ = _connector(requests.ConnectionError("dns"))
    with pytest.raises(RecordSourceError) as excinfo:
        connector.list_projects()
    assert excinfo.value.reason_code == "transport_error"


def test_missing_envelope_is_a_parse_error() -> None:
    connector, _ = _connector(FakeResponse(200, {"unexpected": {}}))
    with pytest.raises(RecordParseError):
        connector.fetch_record(RecordKind.FEATURE, "WEB-1")


def test_non_json_body_is_a_parse_error() -> None:
    connector, _ = _connector(FakeResponse(200, ValueError("not json")))
    with pytest.raises(RecordParseError):
        connector.list_projects()


def test_record_without_id_is_rejected() -> None:
    connector, _ = _connector(FakeResponse(200, {"feature": {"name": "No id"}}))
    with pytest.raises(RecordParseError):
        connector.fetch_record(RecordKind.FEATURE, "WEB-1")


def test_build_record_source_selects_connector() -> None:
    assert isinstance(build_record_source(_settings(connector="in_memory")), InMemoryRecordSource)
    assert isinstance(build_record_source(_settings()), AhaAPIConnector)
    with pytest.raises(ConfigError):
        build_record_source(_settings(aha_token=""))


def test_each_thread_gets_its_own_default_session() -> None:
    connector = AhaAPIConnector(domain="acme", token="tok")
    main_session = connector.session
    assert connector.session is main_session

    seen: list[requests.Session] = []
    worker = threading.Thread(target=lambda: seen.append(connector.session))
    worker.start()
    worker.join()

    assert isinstance(seen[0], requests.Session)
    assert seen[0] is not main_session


def test_injected_session_is_shared_across_threads() -> None:
    connector, session = _connector()
    seen: list[Any] = []
    worker = threading.Thread(target=lambda: seen.append(connector.session))
    worker.start()
    worker.join()
    assert seen == [session]
