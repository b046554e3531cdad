"""
Parser + semantic analysis
==========================

Purpose:
- Recursive-descent parsing of the supported C subset
- Scope checks (undeclared / redeclared names, unknown functions, arity)
- Render the AST listing shown in the editor

Supported subset:
    program   := function*
    function  := 'int' IDENT '(' [ 'int' IDENT { ',' 'int' IDENT } ] ')' block
    block     := '{' statement* '}'
    statement := 'int' IDENT [ '=' expr ] ';'
               | IDENT '=' expr ';'
               | 'return' expr ';'
               | expr ';'
    expr      := term { ('+' | '-') term }
    term      := unary { ('*' | '/' | '%') unary }
    unary     := '-' unary | primary
    primary   := INTEGER | CHAR | IDENT | IDENT '(' args ')' | '(' expr ')'
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from irbridge.frontend.lexer import Token, tokenize


class ParseError(Exception):
    pass


# ---------------------------------------------------------------------------
# AST
# ---------------------------------------------------------------------------

@dataclass
class IntLiteral:
    value: int


@dataclass
class VarRef:
    name: str
    line: int = 0


@dataclass
class UnaryOp:
    op: str
    operand: "Expr"


@dataclass
class BinaryOp:
    op: str
    left: "Expr"
    right: "Expr"


@dataclass
class Call:
    name: str
    args: List["Expr"]
    line: int = 0


Expr = Union[IntLiteral, VarRef, UnaryOp, BinaryOp, Call]


@dataclass
class VarDecl:
    name: str
    init: Optional[Expr]
    line: int = 0


@dataclass
class Assign:
    name: str
    value: Expr
    line: int = 0


@dataclass
class Return:
    value: Expr


@dataclass
class ExprStmt:
    expr: Expr


Stmt = Union[VarDecl, Assign, Return, ExprStmt]


@dataclass
class Function:
    name: str
    params: List[str]
    body: List[Stmt]
    line: int = 0


@dataclass
class Program:
    functions: List[Function] = field(default_factory=list)

    def function(self, name: str) -> Optional[Function]:
        for fn in self.functions:
            if fn.name == name:
                return fn
        return None


# ---------------------------------------------------------------------------
# Parser
# ---------------------------------------------------------------------------

class Parser:
    def __init__(self, tokens: List[Token]):
        self._tokens = tokens
        self._pos = 0

    # ----------------------------
    # Token helpers
    # ----------------------------

    def _peek(self, offset: int = 0) -> Optional[Token]:
        idx = self._pos + offset
        if idx < len(self._tokens):
            return self._tokens[idx]
        return None

    def _check(self, value: str) -> bool:
        tok = self._peek()
        return tok is not None and tok.value == value

    def _advance(self) -> Token:
        tok = self._peek()
        if tok is None:
            raise ParseError("unexpected end of input")
        self._pos += 1
        return tok

    def _expect(self, value: str) -> Token:
        tok = self._peek()
        if tok is None:
            raise ParseError(f"expected '{value}' but reached end of input")
        if tok.value != value:
            raise ParseError(f"expected '{value}' but got '{tok.value}' on line {tok.line}")
        self._pos += 1
        return tok

    def _expect_identifier(self) -> Token:
        tok = self._peek()
        if tok is None:
            raise ParseError("expected identifier but reached end of input")
        if tok.type != "IDENTIFIER":
            raise ParseError(f"expected identifier but got '{tok.value}' on line {tok.line}")
        self._pos += 1
        return tok

    def _expect_int_type(self) -> None:
        tok = self._peek()
        if tok is not None and tok.type == "KEYWORD" and tok.value in ("float", "char"):
            raise ParseError(f"unsupported type '{tok.value}' on line {tok.line}")
        self._expect("int")

    # ----------------------------
    # Grammar
    # ----------------------------

    def parse_program(self) -> Program:
        program = Program()
        while self._peek() is not None:
            program.functions.append(self._parse_function())
        return program

    def _parse_function(self) -> Function:
        tok = self._peek()
        if tok is not None and tok.value == "}":
            raise ParseError(f"unexpected '}}' on line {tok.line}")
        self._expect_int_type()
        name = self._expect_identifier()
        self._expect("(")

        params: List[str] = []
        if not self._check(")"):
            while True:
                self._expect_int_type()
                params.append(self._expect_identifier().value)
                if not self._check(","):
                    break
                self._advance()
        self._expect(")")

        return Function(name=name.value, params=params, body=self._parse_block(), line=name.line)

    def _parse_block(self) -> List[Stmt]:
        self._expect("{")
        body: List[Stmt] = []
        while not self._check("}"):
            if self._peek() is None:
                raise ParseError("expected '}' but reached end of input")
            body.append(self._parse_statement())
        self._expect("}")
        return body

    def _parse_statement(self) -> Stmt:
        tok = self._peek()

        if tok.type == "KEYWORD" and tok.value in ("int", "float", "char"):
            self._expect_int_type()
            name = self._expect_identifier()
            init = None
            if self._check("="):
                self._advance()
                init = self._parse_expr()
            self._expect(";")
            return VarDecl(name=name.value, init=init, line=name.line)

        if tok.value == "return":
            self._advance()
            value = self._parse_expr()
            self._expect(";")
            return Return(value)

        if tok.type == "KEYWORD":
            raise ParseError(f"unsupported statement '{tok.value}' on line {tok.line}")

        nxt = self._peek(1)
        if tok.type == "IDENTIFIER" and nxt is not None and nxt.value == "=":
            self._pos += 2
            value = self._parse_expr()
            self._expect(";")
            return Assign(name=tok.value, value=value, line=tok.line)

        expr = self._parse_expr()
        self._expect(";")
        return ExprStmt(expr)

    def _parse_expr(self) -> Expr:
        node = self._parse_term()
        while self._check("+") or self._check("-"):
            op = self._advance().value
            node = BinaryOp(op, node, self._parse_term())
        return node

    def _parse_term(self) -> Expr:
        node = self._parse_unary()
        while self._check("*") or self._check("/") or self._check("%"):
            op = self._advance().value
            node = BinaryOp(op, node, self._parse_unary())
        return node

    def _parse_unary(self) -> Expr:
        if self._check("-"):
            self._advance()
            operand = self._parse_unary()
            if isinstance(operand, IntLiteral):
                return IntLiteral(-operand.value)
            return UnaryOp("-", operand)
        return self._parse_primary()

    def _parse_primary(self) -> Expr:
        tok = self._peek()
        if tok is None:
            raise ParseError("expected expression but reached end of input")

        if tok.type == "INTEGER":
            self._advance()
            return IntLiteral(int(tok.value))

        if tok.type == "CHAR":
            self._advance()
            return IntLiteral(ord(tok.value[1]))

        if tok.type == "FLOAT":
            raise ParseError(f"unsupported float literal '{tok.value}' on line {tok.line}")

        if tok.type == "IDENTIFIER":
            self._advance()
            if self._check("("):
                self._advance()
                args: List[Expr] = []
                if not self._check(")"):
                    while True:
                        args.append(self._parse_expr())
                        if not self._check(","):
                            break
                        self._advance()
                self._expect(")")
                return Call(name=tok.value, args=args, line=tok.line)
            return VarRef(name=tok.value, line=tok.line)

        if tok.value == "(":
            self._advance()
            node = self._parse_expr()
            self._expect(")")
            return node

        raise ParseError(f"unexpected '{tok.value}' on line {tok.line}")


def parse_source(source: str) -> Program:
    return Parser(tokenize(source)).parse_program()


# ---------------------------------------------------------------------------
# Semantic analysis
# ---------------------------------------------------------------------------

def analyze(program: Program) -> List[str]:
    """
    Return the list of semantic errors (empty when the program is valid).
    """

    errors: List[str] = []
    arity: Dict[str, int] = {}

    for fn in program.functions:
        if fn.name in arity:
            errors.append(f"Function '{fn.name}' re-defined.")
            continue
        arity[fn.name] = len(fn.params)

    for fn in program.functions:
        scope = set()
        for param in fn.params:
            if param in scope:
                errors.append(f"Parameter '{param}' re-declared in '{fn.name}'.")
            scope.add(param)

        for stmt in fn.body:
            if isinstance(stmt, VarDecl):
                if stmt.init is not None:
                    _check_expr(stmt.init, scope, arity, errors)
                if stmt.name in scope:
                    errors.append(f"Variable '{stmt.name}' re-declared.")
                scope.add(stmt.name)
            elif isinstance(stmt, Assign):
                if stmt.name not in scope:
                    errors.append(f"Assignment to undeclared variable: {stmt.name}")
                _check_expr(stmt.value, scope, arity, errors)
            elif isinstance(stmt, Return):
                _check_expr(stmt.value, scope, arity, errors)
            else:
                _check_expr(stmt.expr, scope, arity, errors)

    return errors


def _check_expr(expr: Expr, scope: set, arity: Dict[str, int], errors: List[str]) -> None:
    if isinstance(expr, VarRef):
        if expr.name not in scope:
            errors.append(f"Undeclared variable: {expr.name}")
    elif isinstance(expr, UnaryOp):
        _check_expr(expr.operand, scope, arity, errors)
    elif isinstance(expr, BinaryOp):
        _check_expr(expr.left, scope, arity, errors)
        _check_expr(expr.right, scope, arity, errors)
    elif isinstance(expr, Call):
        if expr.name not in arity:
            errors.append(f"Function not defined: {expr.name}")
        elif arity[expr.name] != len(expr.args):
            errors.append(
                f"Function '{expr.name}' expects {arity[expr.name]} argument(s), got {len(expr.args)}"
            )
        for arg in expr.args:
            _check_expr(arg, scope, arity, errors)


# ---------------------------------------------------------------------------
# Listing
# ---------------------------------------------------------------------------

def format_tree(program: Program) -> str:
    lines = ["Program"]
    for fn in program.functions:
        lines.append(f"  Function {fn.name}({', '.join(fn.params)})")
        for stmt in fn.body:
            _format_stmt(stmt, 2, lines)
    return "\n".join(lines) + "\n"


def _format_stmt(stmt: Stmt, depth: int, lines: List[str]) -> None:
    pad = "  " * depth
    if isinstance(stmt, VarDecl):
        lines.append(f"{pad}VarDecl int {stmt.name}")
        if stmt.init is not None:
            _format_expr(stmt.init, depth + 1, lines)
    elif isinstance(stmt, Assign):
        lines.append(f"{pad}Assign {stmt.name}")
        _format_expr(stmt.value, depth + 1, lines)
    elif isinstance(stmt, Return):
        lines.append(f"{pad}Return")
        _format_expr(stmt.value, depth + 1, lines)
    else:
        lines.append(f"{pad}ExprStmt")
        _format_expr(stmt.expr, depth + 1, lines)


def _format_expr(expr: Expr, depth: int, lines: List[str]) -> None:
    pad = "  " * depth
    if isinstance(expr, IntLiteral):
        lines.append(f"{pad}Literal {expr.value}")
    elif isinstance(expr, VarRef):
        lines.append(f"{pad}Identifier {expr.name}")
    elif isinstance(expr, UnaryOp):
        lines.append(f"{pad}UnaryOp {expr.op}")
        _format_expr(expr.operand, depth + 1, lines)
    elif isinstance(expr, BinaryOp):
        lines.append(f"{pad}BinaryOp {expr.op}")
        _format_expr(expr.left, depth + 1, lines)
        _format_expr(expr.right, depth + 1, lines)
    else:
        lines.append(f"{pad}Call {expr.name}")
        for arg in expr.args:
            _format_expr(arg, depth + 1, lines)
