# sim/compiler.py
"""
Front end for the mailroom C subset: tokenizer, parser and checks.

The language is what fits the machine (one hand, 100 floor tiles, no
immediates):

    const int *ZeroPtr = 9;     // constant floor address, `*ZeroPtr` reads tile 9
    int n;                      // one floor tile, allocated by the code generator
    int *p = q;                 // pointer variable, `*p` reads the tile it holds

    while (cond) stmt           while (true) loops forever
    if (cond) stmt [else stmt]

    cond  := expr (== | != | < | <= | > | >=) expr  [&& / || ...] | true | false
    expr  := input() | NAME | *NAME | NAME = expr | ++NAME | NAME++ | --NAME
             | NAME-- | expr + expr | expr - expr | (expr)
    output(expr);  debug(N);    // debug() compiles to nothing

Integer literals only appear as constant pointer addresses, as one side
of a comparison with 0, or as the debug() argument.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Optional, Set, Union


class CompileError(ValueError):
    def __init__(self, errors: List[str]) -> None:
        super().__init__("\n".join(errors))
        self.errors = list(errors)


# =========================
# Tokenizer
# =========================

KEYWORDS = {"int", "const", "if", "else", "while", "true", "false"}

_TOKEN_RE = re.compile(
    r"""
    (?P<COMMENT>//[^\n]*|/\*.*?\*/)
  | (?P<NUMBER>\d+)
  | (?P<NAME>[A-Za-z_]\w*)
  | (?P<OP>\+\+|--|==|!=|<=|>=|&&|\|\||[-+*/%=<>(){};])
  | (?P<NEWLINE>\n)
  | (?P<SKIP>[ \t\r]+)
  | (?P<MISMATCH>.)
    """,
    re.VERBOSE | re.DOTALL,
)


class Token(NamedTuple):
    kind: str  # NUMBER | NAME | KEYWORD | OP | EOF
    value: str
    line: int
    col: int


def tokenize(text: str) -> List[Token]:
    toks: List[Token] = []
    line = 1
    line_start = 0
    for m in _TOKEN_RE.finditer(text):
        kind = m.lastgroup
        value = m.group()
        col = m.start() - line_start + 1
        if kind == "NEWLINE":
            line += 1
            line_start = m.end()
            continue
        if kind == "COMMENT":
            # Block comments may span lines
            nl = value.count("\n")
            if nl:
                line += nl
                line_start = m.start() + value.rfind("\n") + 1
            continue
        if kind == "SKIP":
            continue
        if kind == "MISMATCH":
            raise CompileError([f"line {line}:{col}: unexpected character {value!r}"])
        if kind == "NAME" and value in KEYWORDS:
            kind = "KEYWORD"
        toks.append(Token(kind, value, line, col))
    toks.append(Token("EOF", "", line, len(text) - line_start + 1))
    return toks


# =========================
# Syntax tree
# =========================

@dataclass
class Num:
    value: int
    line: int = 0


@dataclass
class Bool:
    value: bool
    line: int = 0


@dataclass
class Var:
    name: str
    deref: bool = False
    line: int = 0


@dataclass
class Call:
    name: str
    args: List["Expr"] = field(default_factory=list)
    line: int = 0


@dataclass
class Assign:
    target: Var
    value: "Expr"
    line: int = 0


@dataclass
class IncDec:
    target: Var
    delta: int  # +1 / -1
    post: bool = False
    line: int = 0


@dataclass
class BinOp:
    op: str  # + / -
    left: "Expr"
    right: "Expr"
    line: int = 0


@dataclass
class Compare:
    op: str  # == != < <= > >=
    left: "Expr"
    right: "Expr"
    line: int = 0


@dataclass
class Logical:
    op: str  # && / ||
    parts: List["Expr"]
    line: int = 0


Expr = Union[Num, Bool, Var, Call, Assign, IncDec, BinOp, Compare, Logical]


@dataclass
class Decl:
    name: str
    pointer: bool = False
    const: bool = False
    init: Optional[Expr] = None
    line: int = 0


@dataclass
class ExprStmt:
    expr: Expr
    line: int = 0


@dataclass
class If:
    cond: Expr
    then: "Stmt"
    orelse: Optional["Stmt"] = None
    line: int = 0


@dataclass
class While:
    cond: Expr
    body: "Stmt"
    line: int = 0


@dataclass
class Block:
    body: List["Stmt"] = field(default_factory=list)
    line: int = 0


Stmt = Union[Decl, ExprStmt, If, While, Block]

COMPARE_OPS = ("==", "!=", "<", "<=", ">", ">=")


# =========================
# Parser
# =========================

class Parser:
    def __init__(self, tokens: List[Token]) -> None:
        self.toks = tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Token:
        return self.toks[min(self.pos + offset, len(self.toks) - 1)]

    def _is(self, value: str, offset: int = 0) -> bool:
        t = self.peek(offset)
        return t.kind in ("OP", "KEYWORD") and t.value == value

    def _error(self, msg: str, tok: Optional[Token] = None) -> CompileError:
        t = tok or self.peek()
        found = t.value if t.kind != "EOF" else "end of file"
        return CompileError([f"line {t.line}:{t.col}: {msg}, found {found!r}"])

    def accept(self, value: str) -> bool:
        if self._is(value):
            self.pos += 1
            return True
        return False

    def expect(self, value: str) -> Token:
        if not self._is(value):
            raise self._error(f"expected {value!r}")
        tok = self.peek()
        self.pos += 1
        return tok

    def expect_name(self) -> Token:
        tok = self.peek()
        if tok.kind != "NAME":
            raise self._error("expected a name")
        self.pos += 1
        return tok

    # ---- Statements ----
    def parse_program(self) -> List[Stmt]:
        out: List[Stmt] = []
        while self.peek().kind != "EOF":
            stmt = self.statement()
            if stmt is not None:
                out.append(stmt)
        return out

    def statement(self) -> Optional[Stmt]:
        tok = self.peek()
        if self.accept(";"):
            return None
        if self._is("{"):
            return self.block()
        if self._is("int") or self._is("const"):
            return self.declaration()
        if self.accept("if"):
            self.expect("(")
            cond = self.expression()
            self.expect(")")
            then = self._body()
            orelse = self._body() if self.accept("else") else None
            return If(cond, then, orelse, line=tok.line)
        if self.accept("while"):
            self.expect("(")
            cond = self.expression()
            self.expect(")")
            return While(cond, self._body(), line=tok.line)
        expr = self.expression()
        self.expect(";")
        return ExprStmt(expr, line=tok.line)

    def _body(self) -> Stmt:
        stmt = self.statement()
        return stmt if stmt is not None else Block(line=self.peek().line)

    def block(self) -> Block:
        tok = self.expect("{")
        body: List[Stmt] = []
        while not self._is("}"):
            if self.peek().kind == "EOF":
                raise self._error("expected '}'")
            stmt = self.statement()
            if stmt is not None:
                body.append(stmt)
        self.expect("}")
        return Block(body, line=tok.line)

    def declaration(self) -> Decl:
        tok = self.peek()
        const = self.accept("const")
        self.expect("int")
        pointer = self.accept("*")
        const = self.accept("const") or const
        name = self.expect_name().value
        init = self.expression() if self.accept("=") else None
        self.expect(";")
        return Decl(name, pointer=pointer, const=const, init=init, line=tok.line)

    # ---- Expressions (lowest precedence first) ----
    def expression(self) -> Expr:
        return self._logical("||", self._and)

    def _and(self) -> Expr:
        return self._logical("&&", self._comparison)

    def _logical(self, op: str, sub) -> Expr:
        line = self.peek().line
        parts = [sub()]
        while self.accept(op):
            parts.append(sub())
        return parts[0] if len(parts) == 1 else Logical(op, parts, line=line)

    def _comparison(self) -> Expr:
        left = self._additive()
        tok = self.peek()
        if tok.kind == "OP" and tok.value in COMPARE_OPS:
            self.pos += 1
            return Compare(tok.value, left, self._additive(), line=tok.line)
        return left

    def _additive(self) -> Expr:
        left = self._unary()
        while True:
            tok = self.peek()
            if tok.kind == "OP" and tok.value in ("+", "-"):
                self.pos += 1
                left = BinOp(tok.value, left, self._unary(), line=tok.line)
            elif tok.kind == "OP" and tok.value in ("*", "/", "%"):
                raise self._error("multiplication and division are not supported")
            else:
                return left

    def _lvalue(self) -> Var:
        tok = self.peek()
        deref = self.accept("*")
        return Var(self.expect_name().value, deref=deref, line=tok.line)

    def _unary(self) -> Expr:
        tok = self.peek()
        if tok.kind == "NUMBER":
            self.pos += 1
            return Num(int(tok.value), line=tok.line)
        if self.accept("true"):
            return Bool(True, line=tok.line)
        if self.accept("false"):
            return Bool(False, line=tok.line)
        if self.accept("("):
            inner = self.expression()
            self.expect(")")
            return inner
        if self._is("++") or self._is("--"):
            self.pos += 1
            return IncDec(self._lvalue(), 1 if tok.value == "++" else -1, line=tok.line)
        if tok.kind == "NAME" and self._is("(", 1):
            self.pos += 2
            args: List[Expr] = []
            if not self._is(")"):
                args.append(self.expression())
            self.expect(")")
            return Call(tok.value, args, line=tok.line)
        if tok.kind == "NAME" or self._is("*"):
            target = self._lvalue()
            if self.accept("="):
                return Assign(target, self.expression(), line=tok.line)
            if self._is("++") or self._is("--"):
                delta = 1 if self.peek().value == "++" else -1
                self.pos += 1
                return IncDec(target, delta, post=True, line=tok.line)
            return target
        raise self._error("expected an expression")


def parse(text: str) -> List[Stmt]:
    return Parser(tokenize(text)).parse_program()


# =========================
# Checks
# =========================

@dataclass
class Symbol:
    name: str
    pointer: bool = False
    const: bool = False
    # Floor address of a constant pointer
    address: Optional[int] = None
    initialized: bool = False


class Analyzer:
    """Declaration, initialization and shape checks.

    Collects every problem instead of stopping at the first; `check()`
    raises one CompileError listing all of them.
    """

    def __init__(self, floor_size: int = 100) -> None:
        self.floor_size = int(floor_size)
        self.symbols: Dict[str, Symbol] = {}
        self.errors: List[str] = []

    def _err(self, line: int, msg: str) -> None:
        self.errors.append(f"line {line}: {msg}")

    def reserved(self) -> Set[int]:
        """Floor addresses named by constant pointers."""
        return {s.address for s in self.symbols.values() if s.address is not None}

    def check(self, program: List[Stmt]) -> Dict[str, Symbol]:
        for stmt in program:
            self._stmt(stmt)
        if self.errors:
            raise CompileError(self.errors)
        return self.symbols

    # ---- Statements ----
    def _stmt(self, stmt: Stmt) -> None:
        if isinstance(stmt, Decl):
            self._decl(stmt)
        elif isinstance(stmt, ExprStmt):
            self._expr(stmt.expr, statement=True)
        elif isinstance(stmt, If):
            self._cond(stmt.cond)
            self._stmt(stmt.then)
            if stmt.orelse is not None:
                self._stmt(stmt.orelse)
        elif isinstance(stmt, While):
            self._cond(stmt.cond)
            self._stmt(stmt.body)
        elif isinstance(stmt, Block):
            for s in stmt.body:
                self._stmt(s)

    def _decl(self, d: Decl) -> None:
        if d.name in self.symbols:
            self._err(d.line, f"variable {d.name} already declared")
            return
        sym = Symbol(d.name, pointer=d.pointer, const=d.const)
        if d.const:
            if not d.pointer or not isinstance(d.init, Num):
                self._err(d.line, f"constant {d.name} must be `const int *{d.name} = ADDRESS;`")
            elif not 0 <= d.init.value < self.floor_size:
                self._err(d.line, f"address {d.init.value} is off the floor (size {self.floor_size})")
            else:
                sym.address = d.init.value
                sym.initialized = True
        elif d.init is not None:
            self._expr(d.init)
            sym.initialized = True
        self.symbols[d.name] = sym

    def _cond(self, e: Expr) -> None:
        if isinstance(e, Bool):
            return
        if isinstance(e, Logical):
            for part in e.parts:
                self._cond(part)
            return
        if not isinstance(e, Compare):
            self._err(e.line, "condition must be a comparison")
            return
        left_zero = isinstance(e.left, Num)
        right_zero = isinstance(e.right, Num)
        for side in (e.left, e.right):
            if isinstance(side, Num):
                if side.value != 0:
                    self._err(e.line, "only comparisons with 0 may use a literal")
            else:
                self._expr(side)
        if left_zero and right_zero:
            self._err(e.line, "comparison of two literals")

    # ---- Expressions ----
    def _lookup(self, v: Var) -> Optional[Symbol]:
        sym = self.symbols.get(v.name)
        if sym is None:
            self._err(v.line, f"{v.name} not declared")
        elif v.deref and not sym.pointer:
            self._err(v.line, f"{v.name} is not a pointer")
        return sym

    def _read(self, v: Var) -> None:
        sym = self._lookup(v)
        if sym is None:
            return
        if not sym.initialized:
            self._err(v.line, f"using uninitialized variable {v.name}")
        elif sym.address is not None and not v.deref:
            self._err(v.line, f"constant {v.name} can only be used as *{v.name}")

    def _write(self, v: Var) -> None:
        sym = self._lookup(v)
        if sym is None:
            return
        if sym.const and not v.deref:
            self._err(v.line, f"cannot assign to constant {v.name}")
        elif v.deref and not sym.initialized:
            self._err(v.line, f"using uninitialized variable {v.name}")

    def _expr(self, e: Expr, statement: bool = False) -> None:
        if isinstance(e, Var):
            self._read(e)
        elif isinstance(e, Num):
            self._err(e.line, "integer literals are only allowed as pointer addresses and in comparisons with 0")
        elif isinstance(e, (Bool, Compare, Logical)):
            self._err(e.line, "boolean value used as a number")
        elif isinstance(e, Assign):
            self._expr(e.value)
            self._write(e.target)
            sym = self.symbols.get(e.target.name)
            if sym is not None and not e.target.deref:
                sym.initialized = True
        elif isinstance(e, IncDec):
            self._read(e.target)
            self._write(e.target)
        elif isinstance(e, BinOp):
            self._expr(e.left)
            self._expr(e.right)
        elif isinstance(e, Call):
            self._call(e, statement)

    def _call(self, c: Call, statement: bool) -> None:
        if c.name == "input":
            if c.args:
                self._err(c.line, "input() takes no argument")
            return
        if c.name == "output":
            if len(c.args) != 1:
                self._err(c.line, "output() takes one argument")
            else:
                self._expr(c.args[0])
        elif c.name == "debug":
            if len(c.args) != 1 or not isinstance(c.args[0], Num):
                self._err(c.line, "debug() takes one integer literal")
        else:
            self._err(c.line, f"unknown function {c.name}")
            return
        if not statement:
            self._err(c.line, f"{c.name}() has no value")


__all__ = [
    "CompileError", "Token", "tokenize", "parse", "Parser",
    "Analyzer", "Symbol", "COMPARE_OPS",
    "Num", "Bool", "Var", "Call", "Assign", "IncDec", "BinOp", "Compare", "Logical",
    "Decl", "ExprStmt", "If", "While", "Block",
]
