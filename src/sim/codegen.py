# sim/codegen.py
"""
Lowering of the mailroom C subset to machine listings.

Every value goes through the hand: an expression leaves its result in the
hand, a condition leaves `left - right` there and branches with JUMPZ /
JUMPN. Variables get the lowest free floor tiles, skipping the addresses
named by constant pointers; temporaries are taken and given back around
each use.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple, Union

import config
from sim.compiler import (
    Analyzer, Assign, BinOp, Block, Bool, Call, CompileError, Compare, Decl,
    Expr, ExprStmt, If, IncDec, Logical, Num, Stmt, Symbol, Var, While, parse,
)
from sim.parser import JUMP_OPS, Op, format_op

Place = Tuple[int, bool]  # (tile, indirect)

# Comparison that holds exactly when `op` does not
NEGATE = {"==": "!=", "!=": "==", "<": ">=", ">=": "<", ">": "<=", "<=": ">"}
# Same comparison with the operands swapped
MIRROR = {"==": "==", "!=": "!=", "<": ">", ">": "<", "<=": ">=", ">=": "<="}


class CodeGen:
    def __init__(self, symbols: Dict[str, Symbol], reserved: Set[int],
                 floor_size: int = 100, debug: bool = False) -> None:
        self.symbols = symbols
        self.reserved = set(reserved)
        self.floor_size = int(floor_size)
        self.debug = debug
        self.ops: List[Op] = []
        # Variable name -> floor tile
        self.tiles: Dict[str, int] = {}
        self._used: Set[int] = set()
        self._labels = 0

    # ---- Emission helpers ----
    def _emit(self, op: str, *args: Union[int, bool, str]) -> None:
        self.ops.append((op, tuple(args)))
        if self.debug:
            print(f"[CGEN] {format_op(op, tuple(args))}")

    def _tile_op(self, op: str, place: Place) -> None:
        self._emit(op, place[0], place[1])

    def _label(self, kind: str) -> str:
        self._labels += 1
        return f"{kind}{self._labels}"

    def _alloc(self, line: int) -> int:
        for addr in range(self.floor_size):
            if addr not in self._used and addr not in self.reserved:
                self._used.add(addr)
                return addr
        raise CompileError([f"line {line}: no free floor tile left"])

    def _free(self, addr: int) -> None:
        self._used.discard(addr)

    def _place(self, v: Var) -> Place:
        sym = self.symbols[v.name]
        if sym.address is not None:
            return (sym.address, False)
        return (self.tiles[v.name], v.deref)

    # ---- Statements ----
    def program(self, stmts: List[Stmt]) -> List[Op]:
        for s in stmts:
            self.statement(s)
        return self.ops

    def statement(self, s: Stmt) -> None:
        if isinstance(s, Decl):
            if s.const:
                return
            tile = self._alloc(s.line)
            self.tiles[s.name] = tile
            if s.init is not None:
                self.value(s.init)
                self._emit("COPYTO", tile, False)
        elif isinstance(s, ExprStmt):
            self.effect(s.expr)
        elif isinstance(s, If):
            self._if(s)
        elif isinstance(s, While):
            self._while(s)
        elif isinstance(s, Block):
            for inner in s.body:
                self.statement(inner)

    def _if(self, s: If) -> None:
        if isinstance(s.cond, Bool):
            taken = s.then if s.cond.value else s.orelse
            if taken is not None:
                self.statement(taken)
            return
        else_label = self._label("else")
        self.branch(s.cond, else_label, when=False)
        self.statement(s.then)
        if s.orelse is None:
            self._emit("LABEL", else_label)
            return
        end = self._label("endif")
        self._emit("JUMP", end)
        self._emit("LABEL", else_label)
        self.statement(s.orelse)
        self._emit("LABEL", end)

    def _while(self, s: While) -> None:
        if isinstance(s.cond, Bool) and not s.cond.value:
            return
        top = self._label("loop")
        self._emit("LABEL", top)
        end: Optional[str] = None
        if not isinstance(s.cond, Bool):
            end = self._label("end")
            self.branch(s.cond, end, when=False)
        self.statement(s.body)
        self._emit("JUMP", top)
        if end is not None:
            self._emit("LABEL", end)

    # ---- Expressions ----
    def effect(self, e: Expr) -> None:
        """Code for an expression whose value is thrown away."""
        if isinstance(e, Call):
            if e.name == "output":
                self.value(e.args[0])
                self._emit("OUTBOX")
            elif e.name == "input":
                self._emit("INBOX")
            # debug() only marks the source
            return
        if isinstance(e, IncDec):
            self._tile_op("BUMPUP" if e.delta > 0 else "BUMPDN", self._place(e.target))
            return
        self.value(e)

    def value(self, e: Expr) -> None:
        """Code that leaves the value of `e` in the hand."""
        if isinstance(e, Var):
            self._tile_op("COPYFROM", self._place(e))
        elif isinstance(e, Call):
            # Only input() has a value
            self._emit("INBOX")
        elif isinstance(e, Assign):
            self.value(e.value)
            self._tile_op("COPYTO", self._place(e.target))
        elif isinstance(e, IncDec):
            bump = "BUMPUP" if e.delta > 0 else "BUMPDN"
            place = self._place(e.target)
            if not e.post:
                self._tile_op(bump, place)
                return
            tmp = self._alloc(e.line)
            self._tile_op("COPYFROM", place)
            self._emit("COPYTO", tmp, False)
            self._tile_op(bump, place)
            self._emit("COPYFROM", tmp, False)
            self._free(tmp)
        elif isinstance(e, BinOp):
            self._combine("ADD" if e.op == "+" else "SUB", e.left, e.right, e.line)
        else:
            raise CompileError([f"line {e.line}: cannot compute {type(e).__name__} as a value"])

    def _combine(self, op: str, left: Expr, right: Expr, line: int) -> None:
        if isinstance(right, Var):
            self.value(left)
            self._tile_op(op, self._place(right))
            return
        tmp = self._alloc(line)
        self.value(right)
        self._emit("COPYTO", tmp, False)
        self.value(left)
        self._emit(op, tmp, False)
        self._free(tmp)

    # ---- Conditions ----
    def _difference(self, c: Compare) -> str:
        """Put left - right in the hand; returns the comparison against 0."""
        if isinstance(c.right, Num):
            self.value(c.left)
            return c.op
        if isinstance(c.left, Num):
            self.value(c.right)
            return MIRROR[c.op]
        self._combine("SUB", c.left, c.right, c.line)
        return c.op

    def _jump_if(self, c: Compare, target: str) -> None:
        op = self._difference(c)
        if op == "==":
            self._emit("JUMPZ", target)
        elif op == "<":
            self._emit("JUMPN", target)
        elif op == "<=":
            self._emit("JUMPN", target)
            self._emit("JUMPZ", target)
        else:
            skip = self._label("skip")
            if op in ("!=", ">"):
                self._emit("JUMPZ", skip)
            if op in (">=", ">"):
                self._emit("JUMPN", skip)
            self._emit("JUMP", target)
            self._emit("LABEL", skip)

    def branch(self, cond: Expr, target: str, when: bool) -> None:
        """Jump to `target` when `cond` evaluates to `when`, else fall through."""
        if isinstance(cond, Bool):
            if cond.value == when:
                self._emit("JUMP", target)
        elif isinstance(cond, Compare):
            op = cond.op if when else NEGATE[cond.op]
            self._jump_if(Compare(op, cond.left, cond.right, line=cond.line), target)
        elif isinstance(cond, Logical):
            if (cond.op == "||") == when:
                # Any part deciding the outcome jumps
                for part in cond.parts:
                    self.branch(part, target, when)
            else:
                # Every part has to agree; the first one that does not skips
                skip = self._label("skip")
                for part in cond.parts[:-1]:
                    self.branch(part, skip, not when)
                self.branch(cond.parts[-1], target, when)
                self._emit("LABEL", skip)
        else:
            raise CompileError([f"line {cond.line}: condition must be a comparison"])


# =========================
# Peephole passes
# =========================

def _drop_unreachable(ops: List[Op]) -> List[Op]:
    """Anything between an unconditional JUMP and the next label never runs."""
    out: List[Op] = []
    dead = False
    for op in ops:
        if op[0] == "LABEL":
            dead = False
        if not dead:
            out.append(op)
        if op[0] == "JUMP":
            dead = True
    return out


def _drop_jump_to_next(ops: List[Op]) -> List[Op]:
    """JUMP l directly followed by the label l."""
    out: List[Op] = []
    for i, op in enumerate(ops):
        if op[0] == "JUMP":
            j = i + 1
            following = set()
            while j < len(ops) and ops[j][0] == "LABEL":
                following.add(ops[j][1][0])
                j += 1
            if op[1][0] in following:
                continue
        out.append(op)
    return out


def _merge_labels(ops: List[Op]) -> List[Op]:
    """Keep the first of consecutive labels and point jumps at it."""
    rename: Dict[str, str] = {}
    out: List[Op] = []
    for op in ops:
        if op[0] == "LABEL" and out and out[-1][0] == "LABEL":
            rename[op[1][0]] = out[-1][1][0]
            continue
        out.append(op)
    if not rename:
        return out
    return [(o, (rename.get(a[0], a[0]),)) if o in JUMP_OPS else (o, a) for o, a in out]


def _drop_unused_labels(ops: List[Op]) -> List[Op]:
    used = {a[0] for o, a in ops if o in JUMP_OPS}
    return [(o, a) for o, a in ops if o != "LABEL" or a[0] in used]


def _drop_redundant_loads(ops: List[Op]) -> List[Op]:
    """COPYFROM of a tile whose value the hand already holds.

    `same` is the set of tiles known to equal the hand; labels and jumps
    forget everything because other paths join there.
    """
    out: List[Op] = []
    same: Set[int] = set()
    for op, args in ops:
        if op == "COPYFROM" and not args[1]:
            if args[0] in same:
                continue
            same = {args[0]}
        elif op == "COPYTO":
            # Writes the hand, so every tile in `same` still matches
            if not args[1]:
                same.add(args[0])
        elif op in ("BUMPUP", "BUMPDN"):
            same = set() if args[1] else {args[0]}
        elif op in ("JUMPZ", "JUMPN"):
            pass
        else:
            same = set()
        out.append((op, args))
    return out


PASSES = (
    _drop_unreachable,
    _drop_jump_to_next,
    _merge_labels,
    _drop_unused_labels,
    _drop_redundant_loads,
)


def peephole(ops: List[Op]) -> List[Op]:
    """Run every pass until the listing stops changing."""
    while True:
        before = list(ops)
        for p in PASSES:
            ops = p(ops)
        if ops == before:
            return ops


def render(ops: List[Op]) -> List[str]:
    return [format_op(o, a) if o == "LABEL" else f"    {format_op(o, a)}" for o, a in ops]


def compile_source(text: str, *, floor_size: Optional[int] = None,
                   optimize: bool = True, debug: bool = False) -> List[str]:
    """Compile C-subset source text into machine listing lines. Raises CompileError."""
    size = int(floor_size if floor_size is not None else config.FLOOR_SIZE)
    program = parse(text)
    checker = Analyzer(floor_size=size)
    symbols = checker.check(program)
    gen = CodeGen(symbols, checker.reserved(), floor_size=size, debug=debug)
    ops = gen.program(program)
    if optimize:
        ops = peephole(ops)
    return render(ops)


def compile_file(path: Union[str, Path], **kwargs) -> List[str]:
    with open(path, "r", encoding="utf-8") as f:
        return compile_source(f.read(), **kwargs)


__all__ = [
    "CodeGen", "peephole", "render", "compile_source", "compile_file",
    "NEGATE", "MIRROR",
]
