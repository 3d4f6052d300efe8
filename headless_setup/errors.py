from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .results import Report


class SetupError(RuntimeError):
    """Fatal failure; the run stops and the process exits non-zero."""

    exit_code = 1


class MissingPrerequisiteError(SetupError):
    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"{tool} NOT found on PATH")


class UnresolvedInputError(SetupError):
    pass


class ReleaseLookupError(SetupError):
    pass


class PackageInstallError(SetupError):
    pass


class StoreInitError(SetupError):
    pass


class VerificationFailed(SetupError):
    def __init__(self, message: str, report: Optional["Report"] = None) -> None:
        self.report = report
        super().__init__(message)
