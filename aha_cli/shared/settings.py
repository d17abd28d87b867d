"""Runtime settings merged from ~/.env, the environment, and the YAML config file."""

from __future__ import annotations

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

DEFAULT_CONFIG_NAME = ".aha_workflow"
DEFAULT_BREADCRUMB_NAME = ".aha_cli_cache"
DEFAULT_LOG_NAME = "ahacli.log"
STATUS_POLICIES = {"second_match", "first_match"}


class ConfigError(ValueError):
    """Configuration could not be read or is incomplete."""


@dataclass(frozen=True)
class RepoConfig:
    """One code-hosting repository whose PRs are reconciled against the tracker."""

    name: str
    username: str = ""
    labels: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class Settings:
    aha_domain: str
    aha_token: str
    workflow_email: str
    github_token: str
    github_login: str
    workflow_repo: str
    connector: str
    breadcrumb_path: Path
    log_path: Path
    config_path: Path | None = None
    repos: tuple[RepoConfig, ...] = ()
    layout: dict[str, str] = field(default_factory=dict)
    status_policy: str = "second_match"

    def repos_for(self, override: str | None = None) -> list[RepoConfig]:
        """Repositories to reconcile, honouring a `--repo` override."""

        if override:
            for repo in self.repos:
                if repo.name == override:
                    return [repo]
            return [RepoConfig(name=override, username=self.github_login)]
        if self.repos:
            return list(self.repos)
        if self.workflow_repo:
            return [RepoConfig(name=self.workflow_repo, username=self.github_login)]
        return []


def load_settings(
    config_path: Path | None = None,
    env: dict[str, str] | None = None,
    home: Path | None = None,
) -> Settings:
    home_dir = home or Path.home()
    if env is None:
        load_dotenv(home_dir / ".env", override=False)
        env = dict(os.environ)

    explicit = config_path is not None
    path = config_path or home_dir / DEFAULT_CONFIG_NAME
    file_config = _read_config_file(path, required=explicit)

    aha_section = _section(file_config, "aha")
    aha_domain = str(aha_section.get("domain") or env.get("AHA_DOMAIN", "")).strip()
    workflow_email = str(aha_section.get("email") or env.get("WORKFLOW_EMAIL", "")).strip()

    status_policy = str(file_config.get("status_policy") or "second_match").strip()
    if status_policy not in STATUS_POLICIES:
        raise ConfigError(
            f"Unknown status_policy {status_policy!r}; expected one of {sorted(STATUS_POLICIES)}"
        )

    return Settings(
        aha_domain=aha_domain,
        aha_token=_clean(env.get("AHA_TOKEN")),
        workflow_email=workflow_email,
        github_token=_clean(env.get("GITHUB_API_TOKEN") or env.get("GITHUB_TOKEN")),
        github_login=_clean(env.get("WORKFLOW_LOGIN")),
        workflow_repo=_clean(env.get("WORKFLOW_REPO")),
        connector=_clean(env.get("AHA_CLI_CONNECTOR")) or "api",
        breadcrumb_path=Path(
            env.get("AHA_CLI_BREADCRUMB_PATH") or home_dir / DEFAULT_BREADCRUMB_NAME
        ),
        log_path=Path(
            env.get("AHA_CLI_LOG_PATH") or Path(tempfile.gettempdir()) / DEFAULT_LOG_NAME
        ),
        config_path=path if path.exists() else None,
        repos=tuple(_parse_repos(file_config.get("repos"))),
        layout={str(k): str(v) for k, v in _section(file_config, "layout").items()},
        status_policy=status_policy,
    )


def _read_config_file(path: Path, required: bool) -> dict[str, Any]:
    if not path.exists():
        if required:
            raise ConfigError(f"Config file not found: {path}")
        return {}
    try:
        loaded = yaml.safe_load(path.read_text())
    except OSError as exc:
        raise ConfigError(f"Could not read config file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigError(f"Malformed config file {path}: {exc}") from exc
    if loaded is None:
        return {}
    if not isinstance(loaded, dict):
        raise ConfigError(f"Config file {path} must contain a mapping at the top level")
    return loaded


def _section(config: dict[str, Any], name: str) -> dict[str, Any]:
    value = config.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return value


def _parse_repos(raw: Any) -> list[RepoConfig]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise ConfigError("Config section 'repos' must be a list")
    repos: list[RepoConfig] = []
    for idx, entry in enumerate(raw):
        if not isinstance(entry, dict) or not str(entry.get("name", "")).strip():
            raise ConfigError(f"repos[{idx}] needs at least a 'name'")
        labels = entry.get("labels") or {}
        if not isinstance(labels, dict):
            raise ConfigError(f"repos[{idx}].labels must be a mapping of label to status")
        repos.append(
            RepoConfig(
                name=str(entry["name"]).strip(),
                username=str(entry.get("username", "")).strip(),
                labels={str(k): str(v) for k, v in labels.items()},
            )
        )
    return repos


def _clean(value: str | None) -> str:
    if value is None:
        return ""
    return value.strip()
