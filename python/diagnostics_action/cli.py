from __future__ import annotations

import argparse
import logging
import os
from dataclasses import replace
from pathlib import Path
from typing import Mapping

import requests

from .comments import upsert_comment
from .config import ActionConfig, config_from_env, github_context_from_env
from .errors import DiagnosticsActionError
from .workspace import Runner, compare_branches

logger = logging.getLogger(__name__)


def _apply_overrides(config: ActionConfig, args: argparse.Namespace) -> ActionConfig:
    overrides = {
        "base_branch": args.base_branch,
        "threshold_ms": args.threshold_ms,
        "custom_command": args.custom_command,
        "github_token": args.github_token,
    }
    if args.extended:
        overrides["extended"] = True
    if args.leave_comment:
        overrides["leave_comment"] = True
    return replace(config, **{k: v for k, v in overrides.items() if v is not None})


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Compare tsc diagnostics of the working tree against a base branch"
    )
    parser.add_argument("--cwd", type=Path, default=Path("."))
    parser.add_argument("--base-branch")
    parser.add_argument("--threshold-ms", type=int)
    parser.add_argument("--custom-command")
    parser.add_argument("--extended", action="store_true")
    parser.add_argument("--leave-comment", action="store_true")
    parser.add_argument("--github-token")
    parser.add_argument("--verbose", action="store_true")
    return parser


def main(
    argv: list[str] | None = None,
    environ: Mapping[str, str] | None = None,
    runner: Runner | None = None,
    session: requests.Session | None = None,
) -> int:
    args = _build_parser().parse_args(argv)
    env = os.environ if environ is None else environ
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    config = _apply_overrides(config_from_env(env), args)
    logger.info("Starting...")
    try:
        report = compare_branches(config, args.cwd, runner=runner)
        print(report)
        if config.leave_comment:
            upsert_comment(report, config.github_token, github_context_from_env(env), session=session)
    except (DiagnosticsActionError, requests.RequestException) as exc:
        logger.error("%s", exc)
        return 1

    logger.info("Finished!")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
