"""
IR constant folding
===================

Folds `%tN = <op> i32 <const>, <const>` into its value and substitutes the
value into every later use, so chains like `(40 + 1) + 1` collapse fully.
Division by zero and the INT_MIN / -1 overflow are left for llc to see.
"""

from __future__ import annotations

import re
from typing import Dict, Optional

OPTIMIZED_HEADER = "; Optimized IR"

_FOLD_RE = re.compile(
    r"^\s*(?P<dest>%t\d+) = (?P<op>add|sub|mul|sdiv|srem) i32 (?P<lhs>-?\d+), (?P<rhs>-?\d+)\s*$"
)
_TEMP_RE = re.compile(r"(?<![\w.%])%t\d+(?![\w.])")

INT32_MIN = -(2 ** 31)


def wrap_i32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def fold_binary(op: str, lhs: int, rhs: int) -> Optional[int]:
    """
    Evaluate one i32 instruction with C semantics, or None when it traps.
    """

    if op == "add":
        return wrap_i32(lhs + rhs)
    if op == "sub":
        return wrap_i32(lhs - rhs)
    if op == "mul":
        return wrap_i32(lhs * rhs)
    if rhs == 0 or (lhs == INT32_MIN and rhs == -1):
        return None

    quotient = abs(lhs) // abs(rhs)
    if (lhs < 0) != (rhs < 0):
        quotient = -quotient
    if op == "sdiv":
        return wrap_i32(quotient)
    return wrap_i32(lhs - rhs * quotient)


def optimize(ir: str) -> str:
    known: Dict[str, str] = {}
    out = [OPTIMIZED_HEADER]

    for line in ir.splitlines():
        if line.startswith(OPTIMIZED_HEADER):
            continue
        if line.startswith("define "):
            known = {}

        line = _substitute(line, known)

        m = _FOLD_RE.match(line)
        if m:
            value = fold_binary(m.group("op"), int(m.group("lhs")), int(m.group("rhs")))
            if value is not None:
                known[m.group("dest")] = str(value)
                continue

        out.append(line)

    return "\n".join(out) + "\n"


def _substitute(line: str, known: Dict[str, str]) -> str:
    if not known:
        return line

    def repl(m: re.Match) -> str:
        return known.get(m.group(), m.group())

    if " = " in line:
        dest, rhs = line.split(" = ", 1)
        return f"{dest} = {_TEMP_RE.sub(repl, rhs)}"
    return _TEMP_RE.sub(repl, line)
