from __future__ import annotations

from pathlib import Path

import pytest

from aha_cli.shared.settings import ConfigError, RepoConfig, load_settings

CONFIG = """
aha:
  domain: acme
  email: workflow@acme.test
repos:
  - name: acme/app
    username: octo
    labels:
      Needs QA: In QA
  - name: acme/api
layout:
  down: n
status_policy: first_match
"""


def test_env_only_defaults(tmp_path: Path) -> None:
    settings = load_settings(
        env={"AHA_DOMAIN": "acme", "AHA_TOKEN": " tok ", "GITHUB_TOKEN": "gh"},
        home=tmp_path,
    )
    assert settings.aha_domain == "acme"
    assert settings.aha_token == "tok"
    assert settings.github_token == "gh"
    assert settings.connector == "api"
    assert settings.breadcrumb_path == tmp_path / ".aha_cli_cache"
    assert settings.log_path.name == "ahacli.log"
    assert settings.config_path is None
    assert settings.status_policy == "second_match"
    assert settings.repos == ()


def test_config_file_values_override_environment(tmp_path: Path) -> None:
    (tmp_path / ".aha_workflow").write_text(CONFIG)
    settings = load_settings(
        env={"AHA_DOMAIN": "other", "WORKFLOW_EMAIL": "env@acme.test", "WORKFLOW_LOGIN": "me"},
        home=tmp_path,
    )
    assert settings.aha_domain == "acme"
    assert settings.workflow_email == "workflow@acme.test"
    assert settings.repos[0] == RepoConfig("acme/app", "octo", {"Needs QA": "In QA"})
    assert settings.repos[1].labels == {}
    assert settings.layout == {"down": "n"}
    assert settings.status_policy == "first_match"
    assert settings.config_path == tmp_path / ".aha_workflow"


def test_github_api_token_wins_over_github_token(tmp_path: Path) -> None:
    settings = load_settings(
        env={"GITHUB_API_TOKEN": "primary", "GITHUB_TOKEN": "fallback"}, home=tmp_path
    )
    assert settings.github_token == "primary"


def test_explicit_missing_config_is_an_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigError):
        load_settings(config_path=tmp_path / "nope.yaml", env={}, home=tmp_path)


@pytest.mark.parametrize(
    "content",
    [
        "aha: [unclosed",
        "- just\n- a list\n",
        "repos: acme/app\n",
        "repos:\n  - username: octo\n",
        "status_policy: newest\n",
        "aha: domain\n",
    ],
)
def test_malformed_config_is_rejected(tmp_path: Path, content: str) -> None:
    path = tmp_path / "config.yaml"
    path.write_text(content)
    with pytest.raises(ConfigError):
        load_settings(config_path=path, env={}, home=tmp_path)


def test_dotenv_in_home_is_loaded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AHA_TOKEN", "")
    monkeypatch.delenv("AHA_TOKEN")
    (tmp_path / ".env").write_text("AHA_TOKEN=from-dotenv\n")
    settings = load_settings(home=tmp_path)
    assert settings.aha_token == "from-dotenv"


def test_repos_for_override_and_fallback(tmp_path: Path) -> None:
    (tmp_path / ".aha_workflow").write_text(CONFIG)
    settings = load_settings(env={"WORKFLOW_LOGIN": "me"}, home=tmp_path)
    assert [r.name for r in settings.repos_for()] == ["acme/app", "acme/api"]
    assert settings.repos_for("acme/app")[0].username == "octo"
    assert settings.repos_for("acme/other") == [RepoConfig("acme/other", "me")]

    bare = load_settings(
        env={"WORKFLOW_REPO": "acme/solo", "WORKFLOW_LOGIN": "me"}, home=tmp_path / "x"
    )
    assert bare.repos_for() == [RepoConfig("acme/solo", "me")]
    assert load_settings(env={}, home=tmp_path / "y").repos_for() == []
