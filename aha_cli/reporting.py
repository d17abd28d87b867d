"""Pull-request status report shown by `aha-cli pr-status`."""

from __future__ import annotations

import re
from collections.abc import Iterable, Mapping
from dataclasses import dataclass

from rich.table import Table

from aha_cli.domain.models import PullRequest
from aha_cli.reconcile.matcher import match_identifier
from aha_cli.reconcile.status_resolver import StatusPolicy

REVIEW_CHECKLIST = ("Correctness", "Readability", "Security", "Testing")


@dataclass(frozen=True)
class PRStatusRow:
    number: int
    title: str
    tracker_key: str
    labels: tuple[str, ...]
    resolved_status: str
    checklist_complete: bool
    mergeable: str
    mergeable_state: str
    url: str


def review_checklist_complete(body: str) -> bool:
    """True when every review checklist item is ticked in the PR body."""
    for item in REVIEW_CHECKLIST:
        if not re.search(rf"^\s*-\s*\[[xX]\]\s*\[?{item}\b", body, re.MULTILINE):
            return False
    return True


def build_status_rows(
    pull_requests: Iterable[PullRequest],
    policy: StatusPolicy,
    overrides: Mapping[str, str] | None = None,
) -> list[PRStatusRow]:
    rows: list[PRStatusRow] = []
    for pr in pull_requests:
        match = match_identifier(pr.title)
        rows.append(
            PRStatusRow(
                number=pr.number,
                title=pr.title,
                tracker_key=match.key if match else "",
                labels=pr.labels,
                resolved_status=policy.resolve(pr.labels, overrides) or "",
                checklist_complete=review_checklist_complete(pr.body),
                mergeable=pr.mergeable,
                mergeable_state=pr.mergeable_state,
                url=pr.url,
            )
        )
    return rows


def render_status_table(rows: list[PRStatusRow], title: str) -> Table:
    table = Table(title=title, border_style="blue")
    for column in ("#", "Title", "Key", "Labels", "Status", "Checklist", "Mergeable", "URL"):
        table.add_column(column)
    for row in rows:
        mergeable = " / ".join(part for part in (row.mergeable, row.mergeable_state) if part)
        table.add_row(
            str(row.number),
            row.title,
            row.tracker_key or "-",
            ", ".join(row.labels),
            row.resolved_status or "-",
            "yes" if row.checklist_complete else "no",
            mergeable or "-",
            row.url,
        )
    return table
