"""
Reference front-end library
===========================

The in-process stage library: every operation takes one text argument and
returns one text result. Failures are NOT raised; they come back as
error-shaped text, exactly like the browser build of the original library:

- `Error: <stage>: <message>` for lex / parse / IR failures
- a `--- Semantic Errors ---` section appended to the AST listing
- `Execution error: <reason>` from `execute`

`irbridge.pipeline.adapter` is the only place that interprets these shapes.
"""

from __future__ import annotations

from irbridge.frontend.execute import ExecutionError, run_main
from irbridge.frontend.irgen import lower_program
from irbridge.frontend.lexer import LexError, serialize_tokens, tokenize
from irbridge.frontend.optimize import optimize
from irbridge.frontend.parser import ParseError, analyze, format_tree, parse_source

ERROR_PREFIX = "Error:"
SEMANTIC_ERRORS_HEADER = "--- Semantic Errors ---"
SEMANTIC_OK = "Semantic analysis passed."
EXECUTION_RESULT_PREFIX = "Execution result:"
EXECUTION_ERROR_PREFIX = "Execution error:"


class ReferenceFrontend:
    def lex(self, source: str) -> str:
        try:
            return serialize_tokens(tokenize(source))
        except LexError as e:
            return f"{ERROR_PREFIX} lex: {e}"

    def parse(self, source: str) -> str:
        try:
            program = parse_source(source)
        except (LexError, ParseError) as e:
            return f"{ERROR_PREFIX} parse: {e}"

        listing = format_tree(program)
        errors = analyze(program)
        if errors:
            return listing + f"\n{SEMANTIC_ERRORS_HEADER}\n" + "".join(f"  - {e}\n" for e in errors)
        return listing + f"\n{SEMANTIC_OK}\n"

    def generate_ir(self, source: str) -> str:
        try:
            program = parse_source(source)
        except (LexError, ParseError) as e:
            return f"{ERROR_PREFIX} ir: {e}"

        errors = analyze(program)
        if errors:
            return f"{ERROR_PREFIX} ir: " + "; ".join(errors)
        return lower_program(program)

    def optimize_ir(self, ir: str) -> str:
        if ir.lstrip().startswith(ERROR_PREFIX):
            return f"{ERROR_PREFIX} optimize: input is not IR"
        return optimize(ir)

    def execute(self, ir: str) -> str:
        try:
            return f"{EXECUTION_RESULT_PREFIX} {run_main(ir)}"
        except ExecutionError as e:
            return f"{EXECUTION_ERROR_PREFIX} {e}"
