from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from diagnostics_action.cli import main

CURRENT = "Files: 42\nCheck time: 1.450s\n"
BASELINE = "Check time: 1.200s\n"


class ScriptedRunner:
    def __init__(self, diagnostics: list[str]) -> None:
        self.diagnostics = list(diagnostics)
        self.commands: list[object] = []

    def __call__(self, command, *, cwd: Path, shell: bool = False):
        self.commands.append(command)
        stdout = self.diagnostics.pop(0) if shell else ""
        return subprocess.CompletedProcess(command, 0, stdout=stdout, stderr="")


class RecordingSession:
    def __init__(self) -> None:
        self.posted: list[dict] = []

    def get(self, url: str, **kwargs):
        return _Response([])

    def post(self, url: str, **kwargs):
        self.posted.append(kwargs["json"])
        return _Response({"id": 1})

    def patch(self, url: str, **kwargs):
        raise AssertionError("no existing comment to update")


class _Response:
    def __init__(self, payload) -> None:
        self.payload = payload

    def json(self):
        return self.payload

    def raise_for_status(self) -> None:
        return None


def _workspace(tmp_path: Path) -> Path:
    (tmp_path / "package-lock.json").write_text("{}", encoding="utf-8")
    return tmp_path


def test_cli_prints_report(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    runner = ScriptedRunner([CURRENT, BASELINE])
    code = main(
        ["--cwd", str(_workspace(tmp_path)), "--custom-command", "npx tsc --diagnostics"],
        environ={},
        runner=runner,
    )
    assert code == 0
    out = capsys.readouterr().out
    assert "| Files | 0 | 42 | ▲ (+100.00%) |" in out
    assert ["npm", "install"] in runner.commands


def test_cli_flags_override_environment(tmp_path: Path) -> None:
    runner = ScriptedRunner([CURRENT, BASELINE])
    code = main(
        ["--cwd", str(_workspace(tmp_path)), "--base-branch", "release"],
        environ={"INPUT_BASE-BRANCH": "develop", "INPUT_CUSTOM-COMMAND": "npx tsc --diagnostics"},
        runner=runner,
    )
    assert code == 0
    assert ["git", "checkout", "release"] in runner.commands


def test_cli_leaves_comment(tmp_path: Path) -> None:
    event = tmp_path / "event.json"
    event.write_text(json.dumps({"pull_request": {"number": 3}}), encoding="utf-8")
    session = RecordingSession()

    code = main(
        ["--cwd", str(_workspace(tmp_path)), "--leave-comment"],
        environ={
            "INPUT_CUSTOM-COMMAND": "npx tsc --diagnostics",
            "INPUT_GITHUB-TOKEN": "tok",
            "GITHUB_REPOSITORY": "acme/widgets",
            "GITHUB_EVENT_PATH": str(event),
        },
        runner=ScriptedRunner([CURRENT, BASELINE]),
        session=session,
    )

    assert code == 0
    assert len(session.posted) == 1
    assert "Diagnostics Comparison" in session.posted[0]["body"]


def test_cli_fails_when_comment_token_missing(tmp_path: Path) -> None:
    code = main(
        ["--cwd", str(_workspace(tmp_path)), "--leave-comment"],
        environ={"INPUT_CUSTOM-COMMAND": "npx tsc --diagnostics"},
        runner=ScriptedRunner([CURRENT, BASELINE]),
        session=RecordingSession(),
    )
    assert code == 1


def test_cli_fails_on_contract_violation(tmp_path: Path) -> None:
    code = main(
        ["--cwd", str(_workspace(tmp_path)), "--custom-command", "npm run build"],
        environ={},
        runner=ScriptedRunner(["built\n"]),
    )
    assert code == 1
