"""
Pipeline data model
===================

Value types shared by the adapter, the coordinator and the CLI.
Nothing here executes a stage.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union


class StageName(str, Enum):
    LEX = "lex"
    AST = "ast"
    IR = "ir"
    OPTIMIZE = "optimize"
    CODEGEN = "codegen"
    EXECUTE = "execute"


STAGE_LABELS = {
    StageName.LEX: "Token Generation",
    StageName.AST: "AST Generation",
    StageName.IR: "IR Generation",
    StageName.OPTIMIZE: "Optimized IR Generation",
    StageName.CODEGEN: "Code Generation",
    StageName.EXECUTE: "Code Execution",
}


class FailureKind(str, Enum):
    STAGE = "stage"          # front-end rejected the input
    DIAGNOSTIC = "diagnostic"  # llc rejected the IR
    TRANSPORT = "transport"  # service unreachable / malformed response


@dataclass(frozen=True)
class CompilationRequest:
    source_text: str
    request_id: str = field(default_factory=lambda: uuid.uuid4().hex)


@dataclass(frozen=True)
class StageSuccess:
    stage: StageName
    output: str
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class StageFailure:
    stage: StageName
    message: str
    kind: FailureKind = FailureKind.STAGE
    elapsed_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return False


StageResult = Union[StageSuccess, StageFailure]


@dataclass(frozen=True)
class AssemblyArtifact:
    """Final output of a compile-and-run: assembly, or a diagnostic."""

    assembly: Optional[str] = None
    diagnostic: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.assembly is not None


@dataclass
class PipelineRun:
    """
    Everything one request produced.

    Owned by the coordinator call that created it; never shared.
    """

    request: CompilationRequest
    stages: List[StageResult] = field(default_factory=list)
    total_ms: float = 0.0
    artifact: Optional[AssemblyArtifact] = None
    execution: Optional[str] = None

    @property
    def failure(self) -> Optional[StageFailure]:
        for result in self.stages:
            if isinstance(result, StageFailure):
                return result
        return None

    @property
    def success(self) -> bool:
        return bool(self.stages) and self.failure is None

    @property
    def last_stage(self) -> Optional[StageName]:
        return self.stages[-1].stage if self.stages else None

    def stage(self, name: StageName) -> Optional[StageResult]:
        for result in self.stages:
            if result.stage == name:
                return result
        return None

    @property
    def output(self) -> str:
        """Text for the output pane: last stage output or the failure message."""
        failure = self.failure
        if failure is not None:
            return f"Error: {failure.message}"
        if self.artifact is not None and self.artifact.assembly is not None:
            text = self.artifact.assembly
            if self.execution:
                text = f"{text.rstrip()}\n\n{self.execution}\n"
            return text
        return self.stages[-1].output if self.stages else ""


@dataclass(frozen=True)
class Telemetry:
    status: str
    elapsed_ms: float
    success_rate: str
    time_complexity: str = "O(n)"
    space_complexity: str = "O(n)"

    @classmethod
    def from_run(cls, run: PipelineRun) -> "Telemetry":
        stage = run.last_stage
        label = STAGE_LABELS.get(stage, "Pipeline") if stage is not None else "Pipeline"
        return cls(
            status=f"{label} {'completed' if run.success else 'failed'}",
            elapsed_ms=run.total_ms,
            success_rate="100%" if run.success else "0%",
        )

    def lines(self) -> List[str]:
        return [
            f"Status: {self.status}",
            f"Time: {self.elapsed_ms:.2f} ms",
            f"Success Rate: {self.success_rate}",
            f"Time Complexity: {self.time_complexity}",
            f"Space Complexity: {self.space_complexity}",
        ]
