from irbridge.pipeline.adapter import StageAdapter, StageLibrary
from irbridge.pipeline.results import (
    AssemblyArtifact,
    CompilationRequest,
    FailureKind,
    PipelineRun,
    StageFailure,
    StageName,
    StageSuccess,
    Telemetry,
)

__all__ = [
    "AssemblyArtifact",
    "CompilationRequest",
    "FailureKind",
    "PipelineRun",
    "StageAdapter",
    "StageFailure",
    "StageLibrary",
    "StageName",
    "StageSuccess",
    "Telemetry",
]
