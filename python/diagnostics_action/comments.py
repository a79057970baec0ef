from __future__ import annotations

import logging
from typing import Any

import requests

from diagnostics_compare.formatting import REPORT_MARKER

from .config import GitHubContext
from .errors import MissingCredential

logger = logging.getLogger(__name__)

PER_PAGE = 100
TIMEOUT_SECONDS = 30


def _headers(token: str) -> dict[str, str]:
    return {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "X-GitHub-Api-Version": "2022-11-28",
    }


def _issue_url(context: GitHubContext) -> str:
    if context.owner is None or context.name is None:
        raise MissingCredential("GITHUB_REPOSITORY must be set as '<owner>/<repo>' to leave a comment")
    if context.pull_request is None:
        raise MissingCredential("This action can only be run in PR context")
    return f"{context.api_url}/repos/{context.owner}/{context.name}/issues"


def list_comments(
    session: requests.Session, issues_url: str, pull_request: int, headers: dict[str, str]
) -> list[dict[str, Any]]:
    comments: list[dict[str, Any]] = []
    page = 1
    while True:
        resp = session.get(
            f"{issues_url}/{pull_request}/comments",
            headers=headers,
            params={"per_page": PER_PAGE, "page": page},
            timeout=TIMEOUT_SECONDS,
        )
        resp.raise_for_status()
        batch = resp.json()
        if not isinstance(batch, list):
            break
        comments.extend(item for item in batch if isinstance(item, dict))
        if len(batch) < PER_PAGE:
            break
        page += 1
    return comments


def find_report_comment(comments: list[dict[str, Any]]) -> dict[str, Any] | None:
    for comment in comments:
        if REPORT_MARKER in str(comment.get("body") or ""):
            return comment
    return None


def upsert_comment(
    body: str,
    token: str | None,
    context: GitHubContext,
    session: requests.Session | None = None,
) -> dict[str, Any]:
    """Update the pull request's previous report comment, or create one."""
    if not token:
        raise MissingCredential(
            "'github-token' is not set. Please give API token to send commit comment"
        )
    issues_url = _issue_url(context)
    headers = _headers(token)
    http = session or requests.Session()

    existing = find_report_comment(
        list_comments(http, issues_url, context.pull_request, headers)
    )
    if existing is not None:
        logger.debug("Updating comment %s:\n%s", existing.get("id"), body)
        resp = http.patch(
            f"{issues_url}/comments/{existing['id']}",
            headers=headers,
            json={"body": body},
            timeout=TIMEOUT_SECONDS,
        )
    else:
        logger.debug("Sending new comment:\n%s", body)
        resp = http.post(
            f"{issues_url}/{context.pull_request}/comments",
            headers=headers,
            json={"body": body},
            timeout=TIMEOUT_SECONDS,
        )
    resp.raise_for_status()
    return resp.json()
