from __future__ import annotations


class DiagnosticsActionError(Exception):
    """Base class for failures of the branch comparison workflow."""


class UnsupportedEnvironment(DiagnosticsActionError):
    """The checkout uses a dependency installer we cannot drive."""


class MissingCredential(DiagnosticsActionError):
    """Posting a comment was requested without a token or pull request."""


class ContractViolation(DiagnosticsActionError):
    """A custom diagnostics command did not print compiler diagnostics."""


class CommandFailed(DiagnosticsActionError):
    def __init__(self, command: str, returncode: int, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        detail = stderr.strip() or "no output"
        super().__init__(f"command failed ({returncode}): {command}: {detail}")
