from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class Capability:
    name: str
    supported: bool
    notes: str = ""


def get_capabilities() -> Dict[str, List[Capability]]:
    """
    Canonical declaration of what irbridge supports TODAY.

    This is intentionally explicit and conservative.
    """
    return {
        "stages": [
            Capability("lex", True, "Token listing"),
            Capability("ast", True, "AST listing with semantic checks"),
            Capability("ir", True, "Textual LLVM IR"),
            Capability("optimize", True, "Constant folding and propagation"),
            Capability("codegen", True, "Target assembly via llc"),
            Capability("execute", True, "Evaluates @main of the optimized IR"),
            Capability("link", False, "Assembly is not assembled or linked"),
        ],
        "language": [
            Capability("int", True),
            Capability("functions", True, "int parameters, int return"),
            Capability("arithmetic", True, "+ - * / % and unary minus"),
            Capability("char literals", True, "Lowered to their code point"),
            Capability("float", False, "float and char declarations are rejected; no f32 or i8 lowering"),
            Capability("type checking", False, "Single int type, so no type mismatch diagnostics"),
            Capability(
                "control flow",
                False,
                "if / while / for are lexed but not parsed",
            ),
            Capability("multiple files", False),
        ],
        "codegen": [
            Capability("llvm-ir", True),
            Capability("per-request isolation", True, "One working directory per request"),
            Capability("timeout", True, "Subprocess is killed after the configured limit"),
        ],
    }
