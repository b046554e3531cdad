"""
Stage library adapter
=====================

Purpose:
- Put any text-to-text front-end library behind one uniform interface
- Turn error-shaped results and raised exceptions into StageError

This module:
- DOES NOT time anything
- DOES NOT talk to the compilation service
- DOES NOT cache (every call goes to the library)
"""

from __future__ import annotations

from typing import Callable, Dict, Optional, Protocol

from irbridge.errors import StageError
from irbridge.frontend.library import (
    ERROR_PREFIX,
    EXECUTION_ERROR_PREFIX,
    EXECUTION_RESULT_PREFIX,
    SEMANTIC_ERRORS_HEADER,
    ReferenceFrontend,
)
from irbridge.pipeline.results import StageName


# -----------------------------
# Protocols
# -----------------------------

class StageLibrary(Protocol):
    def lex(self, source: str) -> str:
        ...

    def parse(self, source: str) -> str:
        ...

    def generate_ir(self, source: str) -> str:
        ...

    def optimize_ir(self, ir: str) -> str:
        ...

    def execute(self, ir: str) -> str:
        ...


LIBRARY_METHODS: Dict[StageName, str] = {
    StageName.LEX: "lex",
    StageName.AST: "parse",
    StageName.IR: "generate_ir",
    StageName.OPTIMIZE: "optimize_ir",
    StageName.EXECUTE: "execute",
}


# -----------------------------
# Error shapes
# -----------------------------

def error_message(stage: StageName, output: str) -> Optional[str]:
    """
    Return the diagnostic carried by an error-shaped output, else None.

    Only prefixes and the semantic-error section count; a valid listing
    that merely mentions the word "error" is not a failure.
    """

    text = output.lstrip()

    if text.startswith(ERROR_PREFIX):
        return text[len(ERROR_PREFIX):].strip()

    if stage == StageName.AST and SEMANTIC_ERRORS_HEADER in output:
        section = output.split(SEMANTIC_ERRORS_HEADER, 1)[1]
        lines = [ln.strip().lstrip("-").strip() for ln in section.splitlines()]
        return "; ".join(ln for ln in lines if ln) or "semantic analysis failed"

    if stage == StageName.EXECUTE:
        if text.startswith(EXECUTION_ERROR_PREFIX):
            return text[len(EXECUTION_ERROR_PREFIX):].strip()
        if not text.startswith(EXECUTION_RESULT_PREFIX):
            return f"unrecognized execution output: {text[:80]!r}"

    return None


# -----------------------------
# Adapter
# -----------------------------

class StageAdapter:
    """
    Uniform `text -> text` access to the front-end stages.

    Every method either returns the stage output or raises StageError.
    The adapter holds no per-call state, so one instance may serve any
    number of concurrent pipelines.
    """

    def __init__(self, library: Optional[StageLibrary] = None):
        self._library = library if library is not None else ReferenceFrontend()

    def run(self, stage: StageName, text: str) -> str:
        method = LIBRARY_METHODS.get(stage)
        if method is None:
            raise ValueError(f"stage '{stage.value}' is not served by the stage library")
        op: Callable[[str], str] = getattr(self._library, method)

        try:
            output = op(text)
        except Exception as exc:
            raise StageError(stage.value, f"{stage.value}: {exc}") from exc

        if not isinstance(output, str):
            raise StageError(stage.value, f"{stage.value}: library returned {type(output).__name__}, expected text")

        message = error_message(stage, output)
        if message is not None:
            raise StageError(stage.value, message)

        return output

    def lex(self, source: str) -> str:
        return self.run(StageName.LEX, source)

    def parse(self, source: str) -> str:
        return self.run(StageName.AST, source)

    def generate_ir(self, source: str) -> str:
        return self.run(StageName.IR, source)

    def optimize_ir(self, ir: str) -> str:
        return self.run(StageName.OPTIMIZE, ir)

    def execute(self, ir: str) -> str:
        return self.run(StageName.EXECUTE, ir)
