from irbridge.codegen.client import CodegenClient, normalize_assembly
from irbridge.codegen.service import CompilationService, CompileOutcome, WorkingContext

__all__ = [
    "CodegenClient",
    "CompilationService",
    "CompileOutcome",
    "WorkingContext",
    "normalize_assembly",
]
