"""
AST --> LLVM IR
===============

Purpose:
- Lower a checked Program into textual LLVM IR accepted by llc

The subset has no control flow, so every function is a single `entry`
block in SSA form: a local variable is simply the operand that last
defined it, and no stack slots are needed.

This module:
- DOES NOT validate (callers run semantic analysis first)
- DOES NOT optimize
"""

from __future__ import annotations

from typing import Dict, List

from irbridge.frontend.parser import (
    Assign,
    BinaryOp,
    Call,
    Expr,
    ExprStmt,
    Function,
    IntLiteral,
    Program,
    Return,
    UnaryOp,
    VarDecl,
    VarRef,
)


MODULE_HEADER = "; ModuleID = 'irbridge'\nsource_filename = \"input.c\"\n"

BINARY_OPCODES = {
    "+": "add",
    "-": "sub",
    "*": "mul",
    "/": "sdiv",
    "%": "srem",
}


class _FunctionEmitter:
    def __init__(self, fn: Function):
        self._fn = fn
        self._lines: List[str] = []
        self._env: Dict[str, str] = {name: f"%p.{name}" for name in fn.params}
        self._next_temp = 1

    def _temp(self) -> str:
        name = f"%t{self._next_temp}"
        self._next_temp += 1
        return name

    def _emit(self, line: str) -> None:
        self._lines.append(f"  {line}")

    def emit(self) -> str:
        params = ", ".join(f"i32 %p.{p}" for p in self._fn.params)
        returned = False

        for stmt in self._fn.body:
            if isinstance(stmt, VarDecl):
                self._env[stmt.name] = self._expr(stmt.init) if stmt.init is not None else "0"
            elif isinstance(stmt, Assign):
                self._env[stmt.name] = self._expr(stmt.value)
            elif isinstance(stmt, ExprStmt):
                self._expr(stmt.expr)
            elif isinstance(stmt, Return):
                self._emit(f"ret i32 {self._expr(stmt.value)}")
                returned = True
                # anything after the terminator is unreachable
                break

        if not returned:
            self._emit("ret i32 0")

        body = "\n".join(self._lines)
        return f"define i32 @{self._fn.name}({params}) {{\nentry:\n{body}\n}}\n"

    def _expr(self, expr: Expr) -> str:
        if isinstance(expr, IntLiteral):
            return str(expr.value)

        if isinstance(expr, VarRef):
            return self._env[expr.name]

        if isinstance(expr, UnaryOp):
            operand = self._expr(expr.operand)
            dest = self._temp()
            self._emit(f"{dest} = sub i32 0, {operand}")
            return dest

        if isinstance(expr, BinaryOp):
            lhs = self._expr(expr.left)
            rhs = self._expr(expr.right)
            dest = self._temp()
            self._emit(f"{dest} = {BINARY_OPCODES[expr.op]} i32 {lhs}, {rhs}")
            return dest

        if isinstance(expr, Call):
            args = ", ".join(f"i32 {self._expr(a)}" for a in expr.args)
            dest = self._temp()
            self._emit(f"{dest} = call i32 @{expr.name}({args})")
            return dest

        raise TypeError(f"unknown expression node: {expr!r}")


def lower_program(program: Program) -> str:
    parts = [MODULE_HEADER]
    for fn in program.functions:
        parts.append(_FunctionEmitter(fn).emit())
    return "\n".join(parts)
