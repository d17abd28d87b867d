"""aha-cli command line: interactive browser plus batch PR synchronisation."""

from __future__ import annotations

import json
import logging
from collections import Counter
from pathlib import Path

import typer
from rich.console import Console

from aha_cli.domain.models import RecordKind
from aha_cli.github.pr_source import (
    GitHubSearchPRSource,
    PullRequestSource,
    PullRequestSourceError,
)
from aha_cli.navigation.breadcrumb import BreadcrumbStore
from aha_cli.navigation.keymap import KeyLayout
from aha_cli.navigation.modal import CreationWizard
from aha_cli.notify import DesktopNotifier, Notifier, NullNotifier
from aha_cli.reconcile.engine import ReconcileOptions, ReconciliationEngine
from aha_cli.reconcile.status_resolver import build_status_policy
from aha_cli.reporting import build_status_rows, render_status_table
from aha_cli.session import BrowserSession
from aha_cli.shared.logging_config import setup_logging
from aha_cli.shared.settings import ConfigError, Settings, load_settings
from aha_cli.tracker.record_source import RecordSource, RecordSourceError, build_record_source

logger = logging.getLogger("aha_cli.cli")

app = typer.Typer(add_completion=False, help="aha-cli: browse Aha! and sync it with GitHub PRs")


def build_pr_source(settings: Settings, repo: str) -> PullRequestSource:
    return GitHubSearchPRSource(repo=repo, login=settings.github_login, token=settings.github_token)


def build_notifier(silent: bool) -> Notifier:
    return NullNotifier() if silent else DesktopNotifier()


def _settings(ctx: typer.Context) -> Settings:
    try:
        return load_settings(config_path=ctx.obj.get("config"))
    except ConfigError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _records(settings: Settings) -> RecordSource:
    try:
        return build_record_source(settings)
    except ConfigError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    config: Path = typer.Option(None, "--config", "-c", help="YAML config file"),
    verbose: bool = typer.Option(False, "--verbose", "-v"),
) -> None:
    """Without a sub-command, open the interactive browser."""
    ctx.obj = {"config": config, "verbose": verbose}
    if ctx.invoked_subcommand is None:
        ctx.invoke(browse, ctx=ctx)


@app.command()
def browse(ctx: typer.Context) -> None:
    """Browse projects, releases, features and requirements."""
    from aha_cli.tui import AhaBrowserApp

    settings = _settings(ctx)
    setup_logging(verbose=ctx.obj["verbose"], log_file=settings.log_path, quiet=True)
    session = BrowserSession(
        records=_records(settings),
        breadcrumbs=BreadcrumbStore(settings.breadcrumb_path),
        layout=KeyLayout.from_config(settings.layout),
    )
    try:
        session.start()
    except RecordSourceError as exc:
        typer.echo(f"Can not load projects. Check your domain and api keys: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    AhaBrowserApp(session).run()


@app.command()
def sync(
    ctx: typer.Context,
    dry_run: bool = typer.Option(False, "--dry-run", "-d"),
    silent: bool = typer.Option(False, "--silent", "-s"),
    repo: str = typer.Option("", "--repo", "-r", help="owner/name; overrides configured repos"),
    workers: int = typer.Option(1, "--workers", min=1),
) -> None:
    """Link open pull requests to their tracker records."""
    verbose = ctx.obj["verbose"]
    setup_logging(verbose=verbose)
    settings = _settings(ctx)
    records = _records(settings)
    repos = settings.repos_for(repo or None)
    if not repos:
        typer.echo("Error: no repository configured (set WORKFLOW_REPO or --repo)", err=True)
        raise typer.Exit(code=1)

    options = ReconcileOptions(dry_run=dry_run, silent=silent, workers=workers)
    policy = build_status_policy(settings.status_policy)
    notifier = build_notifier(silent)
    totals: Counter[str] = Counter()
    for repo_config in repos:
        try:
            source = build_pr_source(settings, repo_config.name)
            pull_requests = source.list_open_pull_requests(repo_config.username)
        except (ValueError, PullRequestSourceError) as exc:
            logger.error("Skipping %s: %s", repo_config.name, exc)
            totals["repo_failed"] += 1
            continue
        engine = ReconciliationEngine(
            records=records,
            notifier=notifier,
            workflow_email=settings.workflow_email,
            label_overrides=repo_config.labels,
            status_policy=policy,
            options=options,
        )
        for outcome in engine.reconcile_all(pull_requests):
            totals[outcome.action] += 1

    summary = ", ".join(f"{action}={count}" for action, count in sorted(totals.items()))
    typer.echo(f"sync complete: {summary or 'nothing to do'}")


@app.command()
def generate(
    ctx: typer.Context,
    release_id: str = typer.Option(..., "--release-id"),
    name: str = typer.Option("", "--name"),
    description: str = typer.Option("", "--description"),
    notes: str = typer.Option("", "--notes", help="Yes if release notes are required"),
    dry_run: bool = typer.Option(False, "--dry-run", "-d"),
) -> None:
    """Create a single feature in a release, prompting for anything not given."""
    setup_logging(verbose=ctx.obj["verbose"])
    settings = _settings(ctx)

    wizard = CreationWizard(RecordKind.FEATURE)
    provided = [name, description, notes]
    while not wizard.is_complete:
        value = provided.pop(0) if provided else ""
        wizard.advance(value or typer.prompt(wizard.prompt))
    draft = wizard.finalize()
    draft.release_id = release_id

    if dry_run:
        typer.echo(json.dumps({"feature": draft.to_payload()}, indent=2))
        return
    try:
        created = _records(settings).create_feature(draft)
    except RecordSourceError as exc:
        typer.echo(f"Error: could not create feature: {exc}", err=True)
        raise typer.Exit(code=1) from exc
    typer.echo(f"Created {created.reference_num}: {created.name}")
    if created.url:
        typer.echo(created.url)


@app.command("pr-status")
def pr_status(
    ctx: typer.Context,
    include_closed: bool = typer.Option(False, "--include-closed"),
    repo: str = typer.Option("", "--repo", "-r"),
) -> None:
    """Show pull requests with their tracker key and label-derived status."""
    setup_logging(verbose=ctx.obj["verbose"])
    settings = _settings(ctx)
    repos = settings.repos_for(repo or None)
    if not repos:
        typer.echo("Error: no repository configured (set WORKFLOW_REPO or --repo)", err=True)
        raise typer.Exit(code=1)

    policy = build_status_policy(settings.status_policy)
    states = ["open", "closed"] if include_closed else ["open"]
    console = Console()
    failed = False
    for repo_config in repos:
        try:
            source = build_pr_source(settings, repo_config.name)
            pull_requests = [
                pr
                for state in states
                for pr in source.list_pull_requests(author=repo_config.username, state=state)
            ]
        except (ValueError, PullRequestSourceError) as exc:
            typer.echo(f"Error: {repo_config.name}: {exc}", err=True)
            failed = True
            continue
        rows = build_status_rows(pull_requests, policy, repo_config.labels)
        console.print(render_status_table(rows, title=repo_config.name))
    if failed:
        raise typer.Exit(code=1)


if __name__ == "__main__":
    app()
