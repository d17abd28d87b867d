"""Typed tracker records, pull requests, and write payloads."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

LINKED_PR_FIELD_NAME = "Pull Request"
LINKED_PR_FIELD_KEY = "pull_request"
NOTES_FIELD_KEY = "release_notes1"
NOTES_REQUIRED = "Required"
NOTES_NOT_REQUIRED = "Not required"


class RecordKind(str, Enum):
    FEATURE = "feature"
    REQUIREMENT = "requirement"

    @property
    def collection(self) -> str:
        return f"{self.value}s"


class WorkflowStatus(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    color: str = ""


class AssignedUser(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = ""
    email: str = ""

    def is_empty(self) -> bool:
        return not (self.email.strip() or self.name.strip())


class CustomField(BaseModel):
    model_config = ConfigDict(extra="allow")

    key: str = ""
    name: str = ""
    value: Any = None


class Description(BaseModel):
    model_config = ConfigDict(extra="allow")

    body: str = ""

    @field_validator("body", mode="before")
    @classmethod
    def _none_body_is_empty(cls, value: Any) -> Any:
        return "" if value is None else value


class TrackerRecord(BaseModel):
    """A Project, Release, Feature, or Requirement as returned by the tracker.

    Only `id` and `name` are required; everything else is optional so that the
    same model serves all four hierarchy levels. Unknown fields are kept.
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(min_length=1)
    name: str
    reference_num: str = ""
    url: str | None = None
    workflow_status: WorkflowStatus | None = None
    assigned_to_user: AssignedUser | None = None
    custom_fields: list[CustomField] = Field(default_factory=list)
    description: Description | None = None
    requirements: list[TrackerRecord] = Field(default_factory=list)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("custom_fields", "requirements", mode="before")
    @classmethod
    def _none_is_empty_list(cls, value: Any) -> Any:
        return [] if value is None else value

    @property
    def status_name(self) -> str:
        return self.workflow_status.name if self.workflow_status else ""

    @property
    def status_color(self) -> str:
        return self.workflow_status.color if self.workflow_status else ""

    @property
    def description_body(self) -> str:
        return self.description.body if self.description else ""

    def has_assignee(self) -> bool:
        return self.assigned_to_user is not None and not self.assigned_to_user.is_empty()

    def has_custom_field(self, name: str) -> bool:
        return any(custom.name == name for custom in self.custom_fields)


@dataclass(frozen=True)
class PullRequest:
    number: int
    title: str
    url: str
    labels: tuple[str, ...] = ()
    body: str = ""
    state: str = "open"
    mergeable: str = ""
    mergeable_state: str = ""


@dataclass(frozen=True)
class IdentifierMatch:
    kind: RecordKind
    key: str


@dataclass(frozen=True)
class FieldUpdate:
    """Sparse write plan. A field left as None must not be sent."""

    assignee: str | None = None
    status: str | None = None
    linked_pr_url: str | None = None

    def is_noop(self) -> bool:
        return self.assignee is None and self.status is None and self.linked_pr_url is None

    def changed_fields(self) -> list[str]:
        names = []
        if self.assignee is not None:
            names.append("assignee")
        if self.status is not None:
            names.append("status")
        if self.linked_pr_url is not None:
            names.append("linked_pr")
        return names

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        if self.assignee is not None:
            payload["assigned_to_user"] = self.assignee
        if self.linked_pr_url is not None:
            payload["custom_fields"] = {LINKED_PR_FIELD_KEY: self.linked_pr_url}
        if self.status is not None:
            payload["workflow_status"] = {"name": self.status}
        return payload


@dataclass
class FeatureDraft:
    name: str = ""
    description: str = ""
    release_id: str = ""
    notes: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "name": self.name,
            "description": self.description,
            "release_id": self.release_id,
        }
        if self.notes is not None:
            payload["custom_fields"] = {NOTES_FIELD_KEY: self.notes}
        return payload


@dataclass
class RequirementDraft:
    name: str = ""
    description: str = ""
    notes: str | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"name": self.name, "description": self.description}
        if self.notes is not None:
            payload["custom_fields"] = {NOTES_FIELD_KEY: self.notes}
        return payload
