"""Match pull requests to tracker records and write back the minimal update."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

from aha_cli.domain.models import FieldUpdate, IdentifierMatch, PullRequest, TrackerRecord
from aha_cli.notify import Notifier
from aha_cli.reconcile.matcher import match_identifier
from aha_cli.reconcile.planner import plan_update
from aha_cli.reconcile.status_resolver import SecondMatchPolicy, StatusPolicy
from aha_cli.tracker.record_source import RecordParseError, RecordSource, RecordSourceError

logger = logging.getLogger(__name__)

ACTION_SKIPPED = "skipped"
ACTION_FETCH_FAILED = "fetch_failed"
ACTION_NOOP = "noop"
ACTION_PLANNED = "planned"
ACTION_APPLIED = "applied"
ACTION_APPLY_FAILED = "apply_failed"


@dataclass(frozen=True)
class ReconcileOptions:
    dry_run: bool = False
    silent: bool = False
    workers: int = 1


@dataclass(frozen=True)
class ReconcileOutcome:
    pull_request: PullRequest
    action: str
    match: IdentifierMatch | None = None
    update: FieldUpdate | None = None
    error: str = ""


@dataclass(frozen=True)
class _Planned:
    pull_request: PullRequest
    match: IdentifierMatch | None
    record: TrackerRecord | None = None
    update: FieldUpdate | None = None
    error: str = ""


class ReconciliationEngine:
    def __init__(
        self,
        *,
        records: RecordSource,
        notifier: Notifier,
        workflow_email: str,
        label_overrides: Mapping[str, str] | None = None,
        status_policy: StatusPolicy | None = None,
        options: ReconcileOptions | None = None,
    ) -> None:
        self.records = records
        self.notifier = notifier
        self.workflow_email = workflow_email
        self.label_overrides = dict(label_overrides or {})
        self.status_policy = status_policy or SecondMatchPolicy()
        self.options = options or ReconcileOptions()

    def reconcile_all(self, pull_requests: Iterable[PullRequest]) -> list[ReconcileOutcome]:
        """Process every PR once; failures are reported per PR and never abort the batch."""
        prs = list(pull_requests)
        if self.options.workers > 1 and len(prs) > 1:
            with ThreadPoolExecutor(max_workers=self.options.workers) as pool:
                planned = list(pool.map(self._plan, prs))
        else:
            planned = [self._plan(pr) for pr in prs]
        return [self._finish(item) for item in planned]

    def reconcile(self, pull_request: PullRequest) -> ReconcileOutcome:
        return self._finish(self._plan(pull_request))

    def _plan(self, pull_request: PullRequest) -> _Planned:
        match = match_identifier(pull_request.title)
        if match is None:
            logger.debug("PR #%s has no tracker key in %r", pull_request.number, pull_request.title)
            return _Planned(pull_request=pull_request, match=None)

        try:
            record = self.records.fetch_record(match.kind, match.key)
        except RecordSourceError as exc:
            logger.error("Could not fetch %s %s: %s", match.kind.value, match.key, exc)
            return _Planned(pull_request=pull_request, match=match, error=str(exc))

        status = self.status_policy.resolve(pull_request.labels, self.label_overrides)
        update = plan_update(record, pull_request, status, self.workflow_email)
        return _Planned(pull_request=pull_request, match=match, record=record, update=update)

    def _finish(self, planned: _Planned) -> ReconcileOutcome:
        pr = planned.pull_request
        match = planned.match
        if match is None:
            return ReconcileOutcome(pull_request=pr, action=ACTION_SKIPPED)
        if planned.record is None or planned.update is None:
            return ReconcileOutcome(
                pull_request=pr, action=ACTION_FETCH_FAILED, match=match, error=planned.error
            )

        update = planned.update
        if update.is_noop():
            logger.debug("%s is already up to date for PR #%s", match.key, pr.number)
            return ReconcileOutcome(pull_request=pr, action=ACTION_NOOP, match=match, update=update)

        if not self.options.silent and planned.record.url:
            self.notifier.notify(
                title=match.key,
                message=f"Linked to PR #{pr.number}: {', '.join(update.changed_fields())}",
                url=planned.record.url,
            )

        if self.options.dry_run:
            logger.info("[dry-run] %s <- PR #%s %s", match.key, pr.number, update.to_payload())
            return ReconcileOutcome(
                pull_request=pr, action=ACTION_PLANNED, match=match, update=update
            )

        try:
            self.records.update_record(match.kind, match.key, update)
        except RecordParseError as exc:
            logger.warning("Updated %s but could not parse the response: %s", match.key, exc)
            return ReconcileOutcome(
                pull_request=pr, action=ACTION_APPLIED, match=match, update=update, error=str(exc)
            )
        except RecordSourceError as exc:
            logger.error("Could not update %s: %s", match.key, exc)
            return ReconcileOutcome(
                pull_request=pr,
                action=ACTION_APPLY_FAILED,
                match=match,
                update=update,
                error=str(exc),
            )

        logger.info("%s <- PR #%s (%s)", match.key, pr.number, ", ".join(update.changed_fields()))
        return ReconcileOutcome(pull_request=pr, action=ACTION_APPLIED, match=match, update=update)
