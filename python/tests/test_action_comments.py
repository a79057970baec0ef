from __future__ import annotations

from typing import Any

import pytest
import requests

from diagnostics_action.comments import find_report_comment, upsert_comment
from diagnostics_action.config import GitHubContext
from diagnostics_action.errors import MissingCredential

CONTEXT = GitHubContext(api_url="https://api.github.com", repository="acme/widgets", pull_request=7)
REPORT = "## Diagnostics Comparison:\n\nrows\n"


class FakeResponse:
    def __init__(self, payload: Any, status_code: int = 200) -> None:
        self.payload = payload
        self.status_code = status_code

    def json(self) -> Any:
        return self.payload

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeSession:
    def __init__(self, pages: list[list[dict]], status_code: int = 200) -> None:
        self.pages = pages
        self.status_code = status_code
        self.calls: list[tuple[str, str, dict]] = []

    def get(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(("GET", url, kwargs))
        page = kwargs["params"]["page"]
        return FakeResponse(self.pages[page - 1] if page <= len(self.pages) else [])

    def patch(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(("PATCH", url, kwargs))
        return FakeResponse({"id": 99, **kwargs["json"]}, self.status_code)

    def post(self, url: str, **kwargs: Any) -> FakeResponse:
        self.calls.append(("POST", url, kwargs))
        return FakeResponse({"id": 100, **kwargs["json"]}, self.status_code)


def test_find_report_comment_matches_marker() -> None:
    comments = [{"id": 1, "body": "LGTM"}, {"id": 2, "body": None}, {"id": 3, "body": REPORT}]
    assert find_report_comment(comments) == {"id": 3, "body": REPORT}
    assert find_report_comment([{"id": 1, "body": "LGTM"}]) is None


def test_upsert_creates_comment_when_missing() -> None:
    session = FakeSession([[{"id": 1, "body": "LGTM"}]])

    result = upsert_comment(REPORT, "tok", CONTEXT, session=session)

    assert result["id"] == 100
    method, url, kwargs = session.calls[-1]
    assert method == "POST"
    assert url == "https://api.github.com/repos/acme/widgets/issues/7/comments"
    assert kwargs["json"] == {"body": REPORT}
    assert kwargs["headers"]["Authorization"] == "Bearer tok"


def test_upsert_updates_existing_report() -> None:
    session = FakeSession([[{"id": 1, "body": "LGTM"}, {"id": 55, "body": "## Diagnostics Comparison: old"}]])

    result = upsert_comment(REPORT, "tok", CONTEXT, session=session)

    assert result["id"] == 99
    method, url, _ = session.calls[-1]
    assert method == "PATCH"
    assert url == "https://api.github.com/repos/acme/widgets/issues/comments/55"
    assert [call[0] for call in session.calls].count("POST") == 0


def test_upsert_pages_through_comments() -> None:
    first = [{"id": i, "body": "noise"} for i in range(100)]
    second = [{"id": 500, "body": REPORT}]
    session = FakeSession([first, second])

    upsert_comment(REPORT, "tok", CONTEXT, session=session)

    assert [call[0] for call in session.calls] == ["GET", "GET", "PATCH"]
    assert session.calls[-1][1].endswith("/issues/comments/500")


def test_upsert_requires_token() -> None:
    with pytest.raises(MissingCredential, match="github-token"):
        upsert_comment(REPORT, None, CONTEXT, session=FakeSession([]))


def test_upsert_requires_pull_request_context() -> None:
    context = GitHubContext(api_url="https://api.github.com", repository="acme/widgets", pull_request=None)
    with pytest.raises(MissingCredential, match="PR context"):
        upsert_comment(REPORT, "tok", context, session=FakeSession([]))


def test_upsert_propagates_http_errors() -> None:
    session = FakeSession([[]], status_code=403)
    with pytest.raises(requests.HTTPError):
        upsert_comment(REPORT, "tok", CONTEXT, session=session)
