from __future__ import annotations

import base64
import json
import logging
import shlex
import subprocess
from pathlib import Path
from typing import Callable, Sequence, Union

from diagnostics_compare.compare import compare_diagnostics

from .config import ActionConfig
from .errors import CommandFailed, ContractViolation, UnsupportedEnvironment

logger = logging.getLogger(__name__)

DIAGNOSTICS_MARKER = "Check time"

# Checked in order; the first lockfile present wins.
LOCKFILES = (
    ("yarn.lock", "yarn"),
    ("pnpm-lock.yaml", "pnpm"),
    ("package-lock.json", "npm"),
    ("bun.lockb", "bun"),
)

INSTALL_COMMANDS = {
    "yarn": ["yarn"],
    "npm": ["npm", "install"],
    "pnpm": ["pnpm", "install"],
}

Command = Union[Sequence[str], str]
Runner = Callable[..., "subprocess.CompletedProcess[str]"]


def _default_runner(
    command: Command, *, cwd: Path, shell: bool = False
) -> subprocess.CompletedProcess[str]:
    return subprocess.run(
        command,
        cwd=cwd,
        shell=shell,
        check=False,
        capture_output=True,
        text=True,
    )


def _display(command: Command) -> str:
    return command if isinstance(command, str) else " ".join(command)


def _run(
    runner: Runner | None,
    command: Command,
    cwd: Path,
    *,
    shell: bool = False,
    check: bool = True,
    display: str | None = None,
) -> str:
    run = runner or _default_runner
    shown = display or _display(command)
    logger.debug("running: %s", shown)
    proc = run(command, cwd=cwd, shell=shell)
    if proc.returncode != 0:
        if check:
            raise CommandFailed(shown, proc.returncode, proc.stderr or proc.stdout or "")
        logger.warning("command exited with %d: %s", proc.returncode, shown)
    return proc.stdout or ""


def yarn_bin_dir(cwd: Path, runner: Runner | None = None) -> str:
    return _run(runner, ["yarn", "bin"], cwd).strip()


def diagnostics_command(config: ActionConfig, bin_dir: str | None = None) -> str:
    if config.custom_command:
        return config.custom_command
    tsc = f"{bin_dir}/tsc" if bin_dir else "tsc"
    flag = "--extendedDiagnostics" if config.extended else "--diagnostics"
    return f"{shlex.quote(tsc)} {flag} --incremental false"


def run_diagnostics(command: str, cwd: Path, runner: Runner | None = None) -> str:
    # tsc exits non-zero on type errors but still prints its diagnostics.
    return _run(runner, command, cwd, shell=True, check=False)


def ensure_diagnostics_output(output: str, custom_command: str | None) -> None:
    if custom_command and DIAGNOSTICS_MARKER not in output:
        raise ContractViolation(
            f"Custom command '{custom_command}' does not output '--extendedDiagnostics' "
            "or '--diagnostics' flag. Please add it to your command."
        )


def _auth_header(token: str) -> str:
    basic = base64.b64encode(f"x-access-token:{token}".encode("utf-8")).decode("ascii")
    return f"http.extraheader=AUTHORIZATION: basic {basic}"


def fetch_branch(
    cwd: Path, branch: str, token: str | None = None, runner: Runner | None = None
) -> None:
    fetch_args = ["fetch", "--no-tags", "origin", f"+refs/heads/{branch}:refs/remotes/origin/{branch}"]
    command = ["git"]
    if token:
        command.extend(["-c", _auth_header(token)])
    command.extend(fetch_args)
    _run(runner, command, cwd, display=_display(["git", *fetch_args]))


def checkout_branch(cwd: Path, branch: str, runner: Runner | None = None) -> None:
    _run(runner, ["git", "checkout", branch], cwd)


def detect_package_manager(cwd: Path) -> str | None:
    for lockfile, manager in LOCKFILES:
        if (cwd / lockfile).exists():
            return manager
    manifest = cwd / "package.json"
    if not manifest.is_file():
        return None
    try:
        payload = json.loads(manifest.read_text(encoding="utf-8"))
    except json.JSONDecodeError:
        logger.warning("ignoring unreadable %s", manifest)
        return None
    declared = payload.get("packageManager") if isinstance(payload, dict) else None
    if not isinstance(declared, str) or not declared:
        return None
    return declared.split("@", 1)[0]


def install_dependencies(cwd: Path, manager: str | None, runner: Runner | None = None) -> None:
    command = INSTALL_COMMANDS.get(manager or "")
    if command is None:
        raise UnsupportedEnvironment(
            f"Package manager {manager} is not supported. Please use yarn, npm or pnpm"
        )
    logger.debug("installing dependencies with %s", manager)
    _run(runner, command, cwd)


def compare_branches(
    config: ActionConfig,
    cwd: Path | str,
    runner: Runner | None = None,
) -> str:
    """Diagnose the working tree, then the base branch, and return the markdown report.

    The working tree is left checked out on ``config.base_branch``.
    """
    root = Path(cwd)
    bin_dir = None if config.custom_command else yarn_bin_dir(root, runner)
    command = diagnostics_command(config, bin_dir)
    logger.debug("diagnostics command: %s", command)

    current = run_diagnostics(command, root, runner)
    ensure_diagnostics_output(current, config.custom_command)

    fetch_branch(root, config.base_branch, config.github_token, runner)
    checkout_branch(root, config.base_branch, runner)

    manager = detect_package_manager(root)
    logger.debug("package manager: %s", manager)
    install_dependencies(root, manager, runner)

    previous = run_diagnostics(command, root, runner)
    return compare_diagnostics(previous, current, config.threshold_ms)
