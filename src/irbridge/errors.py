from __future__ import annotations

from typing import Optional


class IrbridgeError(Exception):
    """
    User-facing, structured error.

    These errors are safe to show directly in the editor output pane
    without leaking stack traces or server paths.
    """

    def __init__(self, code: str, message: str):
        self.code = code
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class StageError(IrbridgeError):
    """A front-end stage rejected its input."""

    def __init__(self, stage: str, message: str):
        super().__init__("stage_error", message)
        self.stage = stage


class TransportFailure(IrbridgeError):
    """The compilation service could not be reached or answered garbage."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__("transport_failure", message)
        self.status_code = status_code


class CodegenDiagnostic(IrbridgeError):
    """The native code generator rejected the IR."""

    def __init__(self, message: str):
        super().__init__("codegen_diagnostic", message)


class ResourceError(IrbridgeError):
    """A working-context artifact could not be created, written or read."""

    def __init__(self, message: str):
        super().__init__("resource_error", message)
