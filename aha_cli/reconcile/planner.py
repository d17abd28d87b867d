"""Compute the minimal tracker update for a record linked to a pull request."""

from __future__ import annotations

from aha_cli.domain.models import LINKED_PR_FIELD_NAME, FieldUpdate, PullRequest, TrackerRecord

REVIEW_STATUS = "In code review"
PRE_DEVELOPMENT_STATUSES = frozenset({"Ready to develop", "Under consideration"})


def plan_update(
    record: TrackerRecord,
    pull_request: PullRequest,
    resolved_status: str | None,
    workflow_email: str,
) -> FieldUpdate:
    """Only fields that must change are set; an all-None result is a no-op.

    A resolved status equal to the record's current status is left unset, so
    re-running a sync against an up-to-date record plans nothing.
    """
    assignee = None
    if not record.has_assignee() and workflow_email:
        assignee = workflow_email

    linked_pr_url = None
    if not record.has_custom_field(LINKED_PR_FIELD_NAME):
        linked_pr_url = pull_request.url

    if resolved_status is not None:
        status = resolved_status if resolved_status != record.status_name else None
    elif record.status_name in PRE_DEVELOPMENT_STATUSES:
        status = REVIEW_STATUS
    else:
        status = None

    return FieldUpdate(assignee=assignee, status=status, linked_pr_url=linked_pr_url)
