from __future__ import annotations

import logging
import time
from typing import Optional, Protocol

from irbridge.errors import CodegenDiagnostic, StageError, TransportFailure
from irbridge.pipeline.adapter import StageAdapter
from irbridge.pipeline.results import (
    AssemblyArtifact,
    CompilationRequest,
    FailureKind,
    PipelineRun,
    StageFailure,
    StageName,
    StageSuccess,
)

logger = logging.getLogger(__name__)

# -----------------------------
# Protocols
# -----------------------------

class CodegenBackend(Protocol):
    async def compile_ir(self, ir: str) -> str:
        ...


# -----------------------------
# Coordinator
# -----------------------------

class PipelineCoordinator:
    """
    Coordinator for the staged pipeline.

    Responsibilities:
    - Enforce stage order (IR -> optimize -> codegen -> execute)
    - Time every stage on a monotonic clock
    - Stop at the first failing stage
    - Tell front-end failures, codegen diagnostics and transport
      failures apart

    Every call builds its own PipelineRun and recomputes each stage from
    the source text; nothing is cached between calls.

    This class must NEVER contain compiler logic.
    """

    def __init__(
        self,
        stages: StageAdapter,
        codegen: CodegenBackend,
    ):
        self._stages = stages
        self._codegen = codegen

    # -------------------------
    # Display operations
    # -------------------------

    def tokens(self, source: str) -> PipelineRun:
        return self._display(source, StageName.LEX)

    def ast(self, source: str) -> PipelineRun:
        return self._display(source, StageName.AST)

    def ir(self, source: str) -> PipelineRun:
        return self._display(source, StageName.IR)

    def optimized_ir(self, source: str) -> PipelineRun:
        run, started = self._start(source)
        ir = self._run_stage(run, StageName.IR, source)
        if ir is not None:
            self._run_stage(run, StageName.OPTIMIZE, ir)
        return self._finish(run, started)

    # -------------------------
    # Compile and run
    # -------------------------

    async def compile_and_run(self, source: str) -> PipelineRun:
        """
        Source -> IR -> optimized IR -> assembly, then evaluate the
        optimized IR.

        The codegen request is the only await; the front-end stages run to
        completion before it is issued.
        """

        run, started = self._start(source)

        ir = self._run_stage(run, StageName.IR, source)
        if ir is None:
            return self._finish(run, started)

        optimized = self._run_stage(run, StageName.OPTIMIZE, ir)
        if optimized is None:
            return self._finish(run, started)

        if not await self._run_codegen(run, optimized):
            return self._finish(run, started)

        run.execution = self._run_stage(run, StageName.EXECUTE, optimized)
        return self._finish(run, started)

    # -------------------------
    # Stage execution
    # -------------------------

    def _display(self, source: str, stage: StageName) -> PipelineRun:
        run, started = self._start(source)
        self._run_stage(run, stage, source)
        return self._finish(run, started)

    def _run_stage(self, run: PipelineRun, stage: StageName, text: str) -> Optional[str]:
        t0 = time.perf_counter()
        try:
            output = self._stages.run(stage, text)
        except StageError as e:
            run.stages.append(StageFailure(stage, e.message, FailureKind.STAGE, _ms_since(t0)))
            return None

        run.stages.append(StageSuccess(stage, output, _ms_since(t0)))
        return output

    async def _run_codegen(self, run: PipelineRun, ir: str) -> bool:
        t0 = time.perf_counter()
        try:
            asm = await self._codegen.compile_ir(ir)
        except CodegenDiagnostic as e:
            run.artifact = AssemblyArtifact(diagnostic=e.message)
            run.stages.append(StageFailure(StageName.CODEGEN, e.message, FailureKind.DIAGNOSTIC, _ms_since(t0)))
            return False
        except TransportFailure as e:
            run.stages.append(StageFailure(StageName.CODEGEN, e.message, FailureKind.TRANSPORT, _ms_since(t0)))
            return False

        run.artifact = AssemblyArtifact(assembly=asm)
        run.stages.append(StageSuccess(StageName.CODEGEN, asm, _ms_since(t0)))
        return True

    # -------------------------
    # Bookkeeping
    # -------------------------

    def _start(self, source: str):
        self._validate_input(source)
        return PipelineRun(request=CompilationRequest(source)), time.perf_counter()

    def _finish(self, run: PipelineRun, started: float) -> PipelineRun:
        run.total_ms = _ms_since(started)
        failure = run.failure
        if failure is None:
            logger.info("[%s] %s completed in %.2f ms", run.request.request_id, run.last_stage.value, run.total_ms)
        else:
            logger.info(
                "[%s] %s failed (%s) in %.2f ms",
                run.request.request_id,
                failure.stage.value,
                failure.kind.value,
                run.total_ms,
            )
        return run

    # -------------------------
    # Validation
    # -------------------------

    def _validate_input(self, source: str) -> None:
        if not isinstance(source, str):
            raise TypeError("Source must be a string")


def _ms_since(t0: float) -> float:
    return (time.perf_counter() - t0) * 1000.0
