from typing import List, Optional, Tuple, Any

# Parser debug print toggle (default off)
PARSER_DEBUG = False

Op = Tuple[str, tuple[Any, ...]]

# Mnemonics without operand
NULLARY = ("INBOX", "OUTBOX")
# Mnemonics taking a floor address (direct `n` or indirect `[n]`)
TILE_OPS = ("COPYFROM", "COPYTO", "ADD", "SUB", "BUMPUP", "BUMPDN")
# Mnemonics taking a label
JUMP_OPS = ("JUMP", "JUMPZ", "JUMPN")
# Accepted spellings of the same instruction
ALIASES = {
    "JUMPLZ": "JUMPN",
    "JUMPNEG": "JUMPN",
    "BUMP+": "BUMPUP",
    "BUMP-": "BUMPDN",
}


class ParseError(ValueError):
    def __init__(self, msg: str, line_no: Optional[int] = None, text: str = "") -> None:
        where = f"line {line_no}: " if line_no is not None else ""
        super().__init__(f"{where}{msg}" + (f" ({text.strip()!r})" if text.strip() else ""))
        self.line_no = line_no
        self.text = text


def strip_comment(line: str) -> str:
    s = line
    for mark in ("--", "#", ";"):
        i = s.find(mark)
        if i >= 0:
            s = s[:i]
    return s.strip()


def label_name(line: str) -> Optional[str]:
    """Return the label of a label-only line ("name:"), else None."""
    s = strip_comment(line)
    if s.endswith(":") and (":" not in s[:-1]):
        name = s[:-1].strip()
        return name or None
    return None


def _parse_tile(tok: str) -> Tuple[int, bool]:
    t = tok.strip()
    indirect = t.startswith("[") and t.endswith("]")
    if indirect:
        t = t[1:-1].strip()
    addr = int(t, 0)
    if addr < 0:
        raise ValueError(f"negative tile address {addr}")
    return addr, indirect


def parse_line(line: str, line_no: Optional[int] = None) -> List[Op]:
    s = strip_comment(line)
    if not s:
        return [("NOP", ())]

    name = label_name(s)
    if name is not None:
        return [("LABEL", (name,))]
    if s.endswith(":"):
        raise ParseError("malformed label", line_no, line)

    parts = s.split()
    mnem = ALIASES.get(parts[0].upper(), parts[0].upper())
    args = parts[1:]

    if mnem in NULLARY:
        if args:
            raise ParseError(f"{mnem} takes no operand", line_no, line)
        ops: List[Op] = [(mnem, ())]
    elif mnem in TILE_OPS:
        if len(args) != 1:
            raise ParseError(f"{mnem} needs one tile operand", line_no, line)
        try:
            addr, indirect = _parse_tile(args[0])
        except ValueError as ex:
            raise ParseError(f"bad tile operand: {ex}", line_no, line) from None
        ops = [(mnem, (addr, indirect))]
    elif mnem in JUMP_OPS:
        if len(args) != 1:
            raise ParseError(f"{mnem} needs one label", line_no, line)
        ops = [(mnem, (args[0],))]
    else:
        raise ParseError(f"unknown instruction {parts[0]!r}", line_no, line)

    if PARSER_DEBUG:
        print(f"[PARSE] {s!r} -> {ops}")
    return ops


def parse_program(lines: List[str]) -> List[Op]:
    """Parse every line, raising on the first bad one. Empty lines become NOP."""
    out: List[Op] = []
    for i, raw in enumerate(lines, start=1):
        out.extend(parse_line(raw, i))
    return out


def format_op(op: str, args: tuple[Any, ...]) -> str:
    if op == "LABEL":
        return f"{args[0]}:"
    if op in TILE_OPS:
        addr, indirect = args
        return f"{op} [{addr}]" if indirect else f"{op} {addr}"
    if not args:
        return op
    return f"{op} {args[0]}"
