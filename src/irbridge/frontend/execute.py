"""
IR evaluator
============

Purpose:
- Run `@main` of the IR produced by this front-end
- Report the returned value the way the editor shows it

This is NOT a general LLVM interpreter: it understands exactly the
instruction forms `irgen` emits (i32 arithmetic, calls, ret).
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Dict, List

from irbridge.frontend.optimize import fold_binary, wrap_i32

MAX_CALL_DEPTH = 256

_DEFINE_RE = re.compile(r"^define i32 @(?P<name>[\w.]+)\((?P<params>.*)\)\s*\{\s*$")
_BINARY_RE = re.compile(
    r"^(?P<dest>%[\w.]+) = (?P<op>add|sub|mul|sdiv|srem) i32 (?P<lhs>\S+), (?P<rhs>\S+)$"
)
_CALL_RE = re.compile(r"^(?:(?P<dest>%[\w.]+) = )?call i32 @(?P<name>[\w.]+)\((?P<args>.*)\)$")
_RET_RE = re.compile(r"^ret i32 (?P<value>\S+)$")


class ExecutionError(Exception):
    pass


@dataclass
class IRFunction:
    name: str
    params: List[str]
    body: List[str]


def load_functions(ir: str) -> Dict[str, IRFunction]:
    functions: Dict[str, IRFunction] = {}
    current = None

    for raw in ir.splitlines():
        line = raw.strip()
        if not line or line.startswith(";"):
            continue

        if current is None:
            m = _DEFINE_RE.match(line)
            if m:
                params = [p.split()[-1] for p in m.group("params").split(",") if p.strip()]
                current = IRFunction(m.group("name"), params, [])
            continue

        if line == "}":
            functions[current.name] = current
            current = None
        elif not line.endswith(":"):
            current.body.append(line)

    if current is not None:
        raise ExecutionError(f"function '@{current.name}' is not closed")

    return functions


class Evaluator:
    def __init__(self, functions: Dict[str, IRFunction]):
        self._functions = functions

    def call(self, name: str, args: List[int], depth: int = 0) -> int:
        if depth > MAX_CALL_DEPTH:
            raise ExecutionError("call depth exceeded")
        fn = self._functions.get(name)
        if fn is None:
            raise ExecutionError(f"unsupported function '{name}'")
        if len(args) != len(fn.params):
            raise ExecutionError(f"'{name}' expects {len(fn.params)} argument(s), got {len(args)}")

        env: Dict[str, int] = dict(zip(fn.params, args))

        for line in fn.body:
            m = _BINARY_RE.match(line)
            if m:
                lhs = _operand(m.group("lhs"), env)
                rhs = _operand(m.group("rhs"), env)
                value = fold_binary(m.group("op"), lhs, rhs)
                if value is None:
                    if rhs == 0:
                        raise ExecutionError("division by zero")
                    raise ExecutionError(f"integer overflow in {m.group('op')} {lhs}, {rhs}")
                env[m.group("dest")] = value
                continue

            m = _CALL_RE.match(line)
            if m:
                call_args = [
                    _operand(a.split()[-1], env)
                    for a in m.group("args").split(",") if a.strip()
                ]
                value = self.call(m.group("name"), call_args, depth + 1)
                if m.group("dest"):
                    env[m.group("dest")] = value
                continue

            m = _RET_RE.match(line)
            if m:
                return _operand(m.group("value"), env)

            raise ExecutionError(f"unsupported instruction: {line}")

        raise ExecutionError(f"no recognizable return in '{name}'")


def _operand(token: str, env: Dict[str, int]) -> int:
    if token.startswith("%"):
        if token not in env:
            raise ExecutionError(f"use of undefined value {token}")
        return env[token]
    try:
        return wrap_i32(int(token))
    except ValueError:
        raise ExecutionError(f"unsupported operand {token}") from None


def run_main(ir: str) -> int:
    functions = load_functions(ir)
    if "main" not in functions:
        raise ExecutionError("no main function")
    return Evaluator(functions).call("main", [])
