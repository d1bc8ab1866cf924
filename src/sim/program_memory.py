from typing import Optional, List, Dict, Tuple, Any
from sim.parser import parse_line, label_name, strip_comment

Op = Tuple[str, tuple[Any, ...]]


class ProgramMemory:
    """
    Program storage with label addressing that does not consume
    addresses for label-only lines. Labels map to the next executable
    line index. Blank and comment-only lines are dropped as well.
    """

    def __init__(self) -> None:
        # Raw source lines as loaded (may include labels)
        self.lines: List[str] = []
        # Executable lines with label-only and blank lines removed
        self.exec_lines: List[str] = []
        # Source line number (1-based) for each executable line
        self.line_numbers: List[int] = []
        # Label name -> executable address (index into exec_lines)
        self.labels: Dict[str, int] = {}
        # Parsed op per executable line index
        self._ops: List[Op] = []

    def load_program(self, lines: List[str]) -> None:
        """Load and parse a listing. Raises ParseError on the first bad line."""
        self.lines = [ln.rstrip("\n\r") for ln in lines]
        self._rebuild_compacted()

    def fetch(self, pc: int) -> Optional[str]:
        if 0 <= pc < len(self.exec_lines):
            return self.exec_lines[pc]
        return None

    def size(self) -> int:
        return len(self.exec_lines)

    def get_label_addr(self, name: str) -> Optional[int]:
        return self.labels.get(name)

    def get_op(self, pc: int) -> Op:
        return self._ops[pc]

    def _rebuild_compacted(self) -> None:
        """Build exec_lines, parsed ops and the label mapping.
        Label-only lines do not take an address; labels map to the next
        executable line index.
        """
        self.exec_lines = []
        self.line_numbers = []
        self.labels = {}
        self._ops = []
        for no, raw in enumerate(self.lines, start=1):
            name = label_name(raw)
            if name is not None:
                # First occurrence wins (simple rule)
                self.labels.setdefault(name, len(self.exec_lines))
                continue
            if not strip_comment(raw):
                continue
            ops = parse_line(raw, no)
            self.exec_lines.append(raw)
            self.line_numbers.append(no)
            self._ops.append(ops[0])
