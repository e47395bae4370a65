"""Errors raised while building a container adjustment."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..api.schemas import ContainerAdjustment


class InjectionError(Exception):
    """Base error for a failed injection request.

    ``operation`` names the step that failed and prefixes the message once the
    orchestrator has annotated the error. ``adjustment`` holds whatever had
    been accumulated before the failure, when that is worth reporting.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message
        self.operation: str | None = None
        self.adjustment: ContainerAdjustment | None = None

    def __str__(self) -> str:
        if self.operation:
            return f"{self.operation}: {self.message}"
        return self.message


class HookNotFound(InjectionError):
    def __init__(self, message: str = "habana-container-hook was not found on the system") -> None:
        super().__init__(message)


class DeviceNotFound(InjectionError):
    """A host device node could not be stat-ed."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path


class DeviceResolutionFailed(InjectionError):
    pass
