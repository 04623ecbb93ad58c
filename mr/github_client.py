"""
github_client.py

Responsibility: Isolate all direct GitHub REST API interaction.

Repository creation goes through the `gh` CLI (see `gh.py`). This client only
performs read-only lookups with a known token:
- the authenticated user's login (for the final repository URL)
- whether `<owner>/<name>` already exists (to fail before `gh repo create`)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import requests


class GitHubError(RuntimeError):
    pass


@dataclass(frozen=True)
class RepoInfo:
    html_url: str


class GitHubClient:
    def __init__(self, token: str, api_base: str = "https://api.github.com") -> None:
        if not token.strip():
            raise GitHubError("GitHub token is required.")
        self._token = token
        self._api_base = api_base.rstrip("/")

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"Bearer {self._token}",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "mr",
        }

    def _request(self, method: str, path: str) -> Any:
        url = f"{self._api_base}{path}"
        try:
            r = requests.request(method, url, headers=self._headers(), timeout=30)
        except requests.RequestException as e:
            raise GitHubError(f"GitHub API request failed {method} {path}: {e}") from e
        if r.status_code >= 400:
            try:
                payload = r.json()
            except ValueError:
                payload = {"message": r.text}
            raise GitHubError(f"GitHub API error {r.status_code} {method} {path}: {payload.get('message', payload)}")
        return r.json()

    def viewer_login(self) -> str:
        data = self._request("GET", "/user")
        login = str(data.get("login") or "")
        if not login:
            raise GitHubError("GitHub API did not return a login for the token owner.")
        return login

    def get_repo(self, owner: str, name: str) -> RepoInfo | None:
        """
        Return RepoInfo if the repo exists and is accessible; otherwise None.
        """
        try:
            data = self._request("GET", f"/repos/{owner}/{name}")
        except GitHubError as e:
            msg = str(e).lower()
            if "404" in msg or "not found" in msg:
                return None
            raise
        return RepoInfo(html_url=data["html_url"])
