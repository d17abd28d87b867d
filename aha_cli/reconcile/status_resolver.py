"""Map pull-request labels to a tracker workflow status."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol

DEFAULT_LABEL_STATUSES: dict[str, str] = {
    "In development": "In development",
    "Needs code review": "In code review",
    "Needs PM review": "In PM review",
    "Ready": "Ready to ship",
}


def effective_statuses(
    labels: Sequence[str],
    overrides: Mapping[str, str] | None = None,
    defaults: Mapping[str, str] = DEFAULT_LABEL_STATUSES,
) -> list[str]:
    """Statuses each label maps to, in label order, with unmapped labels dropped.

    An override entry always wins, so an empty override value drops the label.
    """
    table = overrides or {}
    statuses: list[str] = []
    for label in labels:
        status = table[label] if label in table else defaults.get(label)
        if status:
            statuses.append(status)
    return statuses


class StatusPolicy(Protocol):
    def resolve(
        self, labels: Sequence[str], overrides: Mapping[str, str] | None = None
    ) -> str | None: ...


class SecondMatchPolicy:
    """Picks the second surviving mapped status; fewer than two yields None.

    This mirrors how the workflow tool has always behaved. `FirstMatchPolicy`
    is the drop-in alternative (`status_policy: first_match` in the config).
    """

    def resolve(
        self, labels: Sequence[str], overrides: Mapping[str, str] | None = None
    ) -> str | None:
        statuses = effective_statuses(labels, overrides)
        if len(statuses) < 2:
            return None
        return statuses[1]


class FirstMatchPolicy:
    def resolve(
        self, labels: Sequence[str], overrides: Mapping[str, str] | None = None
    ) -> str | None:
        statuses = effective_statuses(labels, overrides)
        return statuses[0] if statuses else None


_POLICIES: dict[str, type] = {
    "second_match": SecondMatchPolicy,
    "first_match": FirstMatchPolicy,
}


def build_status_policy(name: str = "second_match") -> StatusPolicy:
    try:
        return _POLICIES[name]()
    except KeyError as exc:
        raise ValueError(f"Unknown status policy: {name}") from exc


def resolve_status(
    labels: Sequence[str],
    overrides: Mapping[str, str] | None = None,
    policy: StatusPolicy | None = None,
) -> str | None:
    return (policy or SecondMatchPolicy()).resolve(labels, overrides)
