"""Aha! REST API record source."""

from __future__ import annotations

import logging
import threading
from typing import Any

import requests

from aha_cli import __version__
from aha_cli.domain.models import (
    FeatureDraft,
    FieldUpdate,
    RecordKind,
    RequirementDraft,
    TrackerRecord,
)
from aha_cli.tracker.record_source import (
    RecordParseError,
    RecordSourceError,
    parse_record,
    parse_records,
)

logger = logging.getLogger(__name__)

PAGE_SIZE = 200


class AhaAPIConnector:
    def __init__(
        self,
        domain: str,
        token: str,
        session: requests.Session | None = None,
        timeout_s: int = 50,
    ) -> None:
        self.domain = domain.strip()
        self.base_url = f"https://{self.domain}.aha.io/api/v1"
        self.timeout_s = timeout_s
        self._token = token
        self._shared_session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """An injected session is shared; otherwise each thread gets its own."""
        if self._shared_session is not None:
            return self._shared_session
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            self._local.session = session
        return session

    def list_projects(self) -> list[TrackerRecord]:
        payload = self._request("GET", "/products", params={"per_page": str(PAGE_SIZE)})
        return parse_records(_unwrap(payload, "products"))

    def list_releases(self, project_id: str) -> list[TrackerRecord]:
        payload = self._request(
            "GET",
            f"/products/{project_id}/releases",
            params={"exclude_shipped": "true", "per_page": str(PAGE_SIZE)},
        )
        return parse_records(_unwrap(payload, "releases"))

    def list_features(self, release_id: str) -> list[TrackerRecord]:
        payload = self._request(
            "GET",
            f"/releases/{release_id}/features",
            params={"per_page": str(PAGE_SIZE), "fields": "*"},
        )
        return parse_records(_unwrap(payload, "features"))

    def create_feature(self, draft: FeatureDraft) -> TrackerRecord:
        if not draft.release_id:
            raise ValueError("Feature draft needs a release_id")
        payload = self._request(
            "POST",
            f"/releases/{draft.release_id}/features",
            json={"feature": draft.to_payload()},
        )
        return parse_record(_unwrap(payload, "feature"))

    def create_requirement(self, feature_key: str, draft: RequirementDraft) -> TrackerRecord:
        payload = self._request(
            "POST",
            f"/features/{feature_key}/requirements",
            json={"requirement": draft.to_payload()},
        )
        return parse_record(_unwrap(payload, "requirement"))

    def fetch_record(self, kind: RecordKind, key: str) -> TrackerRecord:
        payload = self._request("GET", f"/{kind.collection}/{key}")
        return parse_record(_unwrap(payload, kind.value))

    def update_record(self, kind: RecordKind, key: str, update: FieldUpdate) -> TrackerRecord:
        if update.is_noop():
            raise ValueError("Refusing to submit an empty update")
        payload = self._request(
            "PUT",
            f"/{kind.collection}/{key}",
            json={kind.value: update.to_payload()},
        )
        return parse_record(_unwrap(payload, kind.value))

    def _request(
        self,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        params: dict[str, str] | None = None,
    ) -> Any:
        headers = {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "User-Agent": f"aha-cli/{__version__}",
            "Authorization": f"Bearer {self._token}",
        }
        url = f"{self.base_url}{path}"
        logger.debug("%s %s params=%s", method, url, params)
        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=headers,
                json=json,
                params=params,
                timeout=self.timeout_s,
            )
        except requests.RequestException as exc:
            raise RecordSourceError(f"{method} {path} failed: {exc}") from exc

        if response.status_code >= 400:
            raise RecordSourceError(
                f"{method} {path} returned HTTP {response.status_code}",
                reason_code=f"http_{response.status_code}",
            )
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as exc:
            raise RecordParseError(f"{method} {path} returned a non-JSON body") from exc


def _unwrap(payload: Any, root: str) -> Any:
    if not isinstance(payload, dict) or root not in payload:
        raise RecordParseError(f"Response is missing the '{root}' envelope")
    return payload[root]
