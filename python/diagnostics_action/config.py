from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from diagnostics_compare.compare import DEFAULT_THRESHOLD_MS

DEFAULT_BASE_BRANCH = "main"
DEFAULT_SERVER_URL = "https://github.com"
DEFAULT_API_URL = "https://api.github.com"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


@dataclass(frozen=True)
class ActionConfig:
    base_branch: str = DEFAULT_BASE_BRANCH
    threshold_ms: int = DEFAULT_THRESHOLD_MS
    custom_command: str | None = None
    extended: bool = False
    leave_comment: bool = False
    github_token: str | None = None


@dataclass(frozen=True)
class GitHubContext:
    api_url: str
    repository: str | None
    pull_request: int | None

    @property
    def owner(self) -> str | None:
        if not self.repository or "/" not in self.repository:
            return None
        return self.repository.split("/", 1)[0]

    @property
    def name(self) -> str | None:
        if not self.repository or "/" not in self.repository:
            return None
        return self.repository.split("/", 1)[1]


def parse_threshold(value: str | None) -> int:
    """Read the leading integer of ``value``; fall back to the default when there is none."""
    if value is None:
        return DEFAULT_THRESHOLD_MS
    match = _LEADING_INT.match(value)
    if match is None:
        return DEFAULT_THRESHOLD_MS
    return int(match.group(1))


def parse_bool(value: str | None) -> bool:
    return (value or "").strip().lower() == "true"


def _input(environ: Mapping[str, str], name: str) -> str:
    key = "INPUT_" + name.replace(" ", "_").upper()
    return environ.get(key, "").strip()


def config_from_env(environ: Mapping[str, str]) -> ActionConfig:
    threshold = _input(environ, "threshold") or _input(environ, "treshold")
    return ActionConfig(
        base_branch=_input(environ, "base-branch") or DEFAULT_BASE_BRANCH,
        threshold_ms=parse_threshold(threshold or None),
        custom_command=_input(environ, "custom-command") or None,
        extended=parse_bool(_input(environ, "extended")),
        leave_comment=parse_bool(_input(environ, "leave-comment")),
        github_token=_input(environ, "github-token") or None,
    )


def api_url_for_server(server_url: str) -> str:
    server = server_url.rstrip("/")
    if server == DEFAULT_SERVER_URL:
        return DEFAULT_API_URL
    return f"{server}/api/v3"


def _load_event(path: str | None) -> dict[str, Any]:
    if not path:
        return {}
    event_file = Path(path)
    if not event_file.is_file():
        return {}
    payload = json.loads(event_file.read_text(encoding="utf-8"))
    return payload if isinstance(payload, dict) else {}


def _pull_request_number(event: dict[str, Any]) -> int | None:
    pull_request = event.get("pull_request")
    if not isinstance(pull_request, dict):
        return None
    number = pull_request.get("number")
    return number if isinstance(number, int) else None


def github_context_from_env(environ: Mapping[str, str]) -> GitHubContext:
    api_url = environ.get("GITHUB_API_URL", "").strip()
    if not api_url:
        server_url = environ.get("GITHUB_SERVER_URL", "").strip() or DEFAULT_SERVER_URL
        api_url = api_url_for_server(server_url)
    event = _load_event(environ.get("GITHUB_EVENT_PATH"))
    return GitHubContext(
        api_url=api_url.rstrip("/"),
        repository=environ.get("GITHUB_REPOSITORY", "").strip() or None,
        pull_request=_pull_request_number(event),
    )
