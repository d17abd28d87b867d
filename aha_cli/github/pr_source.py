"""Pull-request source contract and the GitHub search implementation."""

from __future__ import annotations

import logging
from typing import Any, Protocol

import requests

from aha_cli.domain.models import PullRequest

logger = logging.getLogger(__name__)

GITHUB_API = "https://api.github.com"


class PullRequestSourceError(RuntimeError):
    pass


class PullRequestSource(Protocol):
    def list_open_pull_requests(self, author: str = "") -> list[PullRequest]: ...

    def list_pull_requests(self, author: str = "", state: str = "open") -> list[PullRequest]: ...


def parse_repo_name(repo_name: str) -> tuple[str, str]:
    parts = [part.strip() for part in repo_name.strip().split("/")]
    if len(parts) < 2 or not parts[0] or not parts[1]:
        raise ValueError(
            f"Wrong format for repository name {repo_name!r}; expected something like owner/name"
        )
    return parts[0], parts[1]


class GitHubSearchPRSource:
    """Lists pull requests for one repository through the issue search API."""

    def __init__(
        self,
        repo: str,
        login: str = "",
        token: str = "",
        base_url: str = GITHUB_API,
        session: requests.Session | None = None,
    ) -> None:
        self.owner, self.name = parse_repo_name(repo)
        self.login = login
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self._token = token

    @property
    def repo(self) -> str:
        return f"{self.owner}/{self.name}"

    def list_open_pull_requests(self, author: str = "") -> list[PullRequest]:
        return self.list_pull_requests(author=author, state="open")

    def list_pull_requests(self, author: str = "", state: str = "open") -> list[PullRequest]:
        query = f"is:{state} is:pr repo:{self.owner}/{self.name}"
        if author:
            query = f"{query} author:{author}"
        payload = self._search(query)
        items = payload.get("items") if isinstance(payload, dict) else None
        if not isinstance(items, list):
            raise PullRequestSourceError("GitHub search response has no 'items' list")
        return [pr for pr in (_pull_request_from_item(item) for item in items) if pr is not None]

    def _search(self, query: str) -> Any:
        headers = {"Accept": "application/vnd.github+json"}
        auth = (self.login, self._token) if self._token else None
        logger.debug("github search q=%s", query)
        try:
            response = self.session.request(
                method="GET",
                url=f"{self.base_url}/search/issues",
                headers=headers,
                params={"q": query, "sort": "created"},
                auth=auth,
                timeout=15,
            )
        except requests.RequestException as exc:
            raise PullRequestSourceError(f"GitHub search failed: {exc}") from exc
        if response.status_code >= 400:
            raise PullRequestSourceError(f"GitHub search returned HTTP {response.status_code}")
        try:
            return response.json()
        except ValueError as exc:
            raise PullRequestSourceError("GitHub search returned a non-JSON body") from exc


class InMemoryPRSource:
    def __init__(self, pull_requests: list[PullRequest] | None = None) -> None:
        self.pull_requests = list(pull_requests or [])
        self.queries: list[tuple[str, str]] = []

    def list_open_pull_requests(self, author: str = "") -> list[PullRequest]:
        return self.list_pull_requests(author=author, state="open")

    def list_pull_requests(self, author: str = "", state: str = "open") -> list[PullRequest]:
        self.queries.append((author, state))
        return [pr for pr in self.pull_requests if pr.state == state]


def _pull_request_from_item(item: Any) -> PullRequest | None:
    if not isinstance(item, dict) or not item.get("number"):
        return None
    labels = tuple(
        str(label.get("name", ""))
        for label in item.get("labels") or []
        if isinstance(label, dict) and label.get("name")
    )
    return PullRequest(
        number=int(item["number"]),
        title=str(item.get("title") or ""),
        url=str(item.get("html_url") or ""),
        labels=labels,
        body=str(item.get("body") or ""),
        state=str(item.get("state") or "open"),
        mergeable=str(item.get("mergeable") or ""),
        mergeable_state=str(item.get("mergeable_state") or ""),
    )
