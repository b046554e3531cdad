"""
Compilation service
===================

Purpose:
- Stage IR into a per-request working context
- Run the native code generator (llc) as a subprocess
- Return assembly or a scrubbed diagnostic

Per request:
    RECEIVED -> STAGING_INPUT -> INVOKING_CODEGEN -> READING_OUTPUT -> RESPONDED
                      any state can move to FAILED

Isolation comes from naming, not locking: every request gets its own
directory, so concurrent requests never share an input or output path.

This module:
- DOES NOT know about HTTP (see irbridge.api.routes)
- DOES NOT parse or validate IR
"""

from __future__ import annotations

import logging
import os
import shutil
import subprocess
import tempfile
import threading
import uuid
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import List, Optional, Sequence, Set

from irbridge.errors import CodegenDiagnostic, IrbridgeError, ResourceError

logger = logging.getLogger(__name__)

INPUT_NAME = "input.ll"
OUTPUT_NAME = "output.s"


class ServiceState(str, Enum):
    RECEIVED = "received"
    STAGING_INPUT = "staging_input"
    INVOKING_CODEGEN = "invoking_codegen"
    READING_OUTPUT = "reading_output"
    RESPONDED = "responded"
    FAILED = "failed"


@dataclass
class CompileOutcome:
    request_id: str
    state: ServiceState
    asm: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.asm is not None


# ---------------------------------------------------------------------------
# Working context
# ---------------------------------------------------------------------------

class WorkingContext:
    """
    Private scratch directory for one request.

    Released on exit from the `with` block, whatever happened inside.
    """

    def __init__(self, request_id: str, root: Optional[str] = None):
        self.request_id = request_id
        try:
            self.directory = Path(tempfile.mkdtemp(prefix=f"irbridge-{request_id}-", dir=root))
        except OSError as e:
            raise ResourceError(f"cannot create working context: {e.strerror or e}") from e
        self.input_path = self.directory / INPUT_NAME
        self.output_path = self.directory / OUTPUT_NAME

    def __enter__(self) -> "WorkingContext":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def stage_input(self, ir: str) -> None:
        try:
            self.input_path.write_text(ir, encoding="utf-8")
        except UnicodeEncodeError:
            raise ResourceError("input is not valid UTF-8 text") from None
        except OSError as e:
            raise ResourceError(f"cannot stage input: {e.strerror or e}") from e

    def read_output(self) -> str:
        if not self.output_path.exists():
            raise ResourceError("code generator produced no output")
        try:
            return self.output_path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            raise ResourceError("output is not valid UTF-8 text") from None
        except OSError as e:
            raise ResourceError(f"cannot read output: {e.strerror or e}") from e

    def scrub(self, text: str) -> str:
        """Remove every trace of this context's filesystem location."""
        for path, name in ((self.input_path, INPUT_NAME), (self.output_path, OUTPUT_NAME)):
            text = text.replace(str(path), name)
            text = text.replace(os.path.realpath(path), name)
        for directory in {str(self.directory), os.path.realpath(self.directory)}:
            text = text.replace(directory + os.sep, "").replace(directory, ".")
        return text

    def release(self) -> None:
        shutil.rmtree(self.directory, ignore_errors=True)


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class CompilationService:
    def __init__(
        self,
        llc_path: str = "llc",
        *,
        llc_args: Sequence[str] = (),
        timeout: float = 30.0,
        work_dir: Optional[str] = None,
    ):
        self.llc_path = llc_path
        self.llc_args = list(llc_args)
        self.timeout = timeout
        self.work_dir = work_dir
        self._in_flight: Set[str] = set()
        self._lock = threading.Lock()

    @property
    def in_flight(self) -> int:
        with self._lock:
            return len(self._in_flight)

    def command(self, ctx: WorkingContext) -> List[str]:
        return [self.llc_path, *self.llc_args, str(ctx.input_path), "-o", str(ctx.output_path)]

    def compile(self, ir: str, request_id: Optional[str] = None) -> CompileOutcome:
        request_id = request_id or uuid.uuid4().hex
        state = ServiceState.RECEIVED
        logger.info("[%s] received %d bytes of IR", request_id, len(ir))
        logger.debug("[%s] IR:\n%s", request_id, ir)

        try:
            with WorkingContext(request_id, root=self.work_dir) as ctx:
                self._track(ctx, add=True)
                try:
                    state = ServiceState.STAGING_INPUT
                    ctx.stage_input(ir)

                    state = ServiceState.INVOKING_CODEGEN
                    self._invoke(ctx)

                    state = ServiceState.READING_OUTPUT
                    asm = ctx.read_output()
                finally:
                    self._track(ctx, add=False)

        except IrbridgeError as e:
            logger.warning("[%s] failed while %s: %s", request_id, state.value, e)
            return CompileOutcome(request_id, ServiceState.FAILED, error=e.message)

        logger.info("[%s] responded with %d bytes of assembly", request_id, len(asm))
        return CompileOutcome(request_id, ServiceState.RESPONDED, asm=asm)

    # -------------------------
    # Internals
    # -------------------------

    def _invoke(self, ctx: WorkingContext) -> None:
        tool = Path(self.llc_path).name
        try:
            proc = subprocess.run(
                self.command(ctx),
                capture_output=True,
                text=True,
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            raise CodegenDiagnostic(f"{tool} timed out after {self.timeout:g} s")
        except OSError as e:
            raise CodegenDiagnostic(f"failed to launch code generator '{tool}': {e.strerror or e.__class__.__name__}")

        stderr = (proc.stderr or "").strip()
        if proc.returncode != 0 or stderr:
            message = ctx.scrub(stderr) if stderr else f"{tool} exited with status {proc.returncode}"
            raise CodegenDiagnostic(message)

    def _track(self, ctx: WorkingContext, *, add: bool) -> None:
        with self._lock:
            if add:
                self._in_flight.add(str(ctx.directory))
            else:
                self._in_flight.discard(str(ctx.directory))
