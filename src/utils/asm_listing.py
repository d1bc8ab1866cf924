from typing import List

from sim.program_memory import ProgramMemory
from sim.parser import format_op


def build_listing(lines: List[str]) -> List[str]:
    """
    Render a machine listing with addresses.

    Labels are printed on their own line (they take no address), every
    instruction gets its PC address and canonical spelling, and the
    source comment is kept on the right.

        loop1:
          00  COPYFROM 9
          01  COPYTO 1
    """
    prog = ProgramMemory()
    prog.load_program(lines)

    by_addr: dict[int, List[str]] = {}
    for name, addr in prog.labels.items():
        by_addr.setdefault(addr, []).append(name)

    out: List[str] = []
    for pc in range(prog.size()):
        for name in by_addr.get(pc, []):
            out.append(f"{name}:")
        op, args = prog.get_op(pc)
        raw = prog.exec_lines[pc]
        note = ""
        if "--" in raw:
            note = "-- " + raw.split("--", 1)[1].strip()
        asm = format_op(op, args)
        out.append(f"  {pc:02d}  {asm:<16} {note}".rstrip())
    # Labels pointing past the last instruction
    for name in by_addr.get(prog.size(), []):
        out.append(f"{name}:")
    return out


def print_listing(lines: List[str]) -> None:
    for row in build_listing(lines):
        print(row)


__all__ = [
    "build_listing",
    "print_listing",
]
