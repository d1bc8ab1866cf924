# sim/machine.py
from typing import Dict, Any, List, Optional

import config
from exploder.channels import EndOfInput, Inbox, InputSource, Outbox, OutputSink
from sim.pc import PC
from sim.ir import IR
from sim.data_memory import DataMemory, FloorError
from sim.program_memory import ProgramMemory
from sim.parser import format_op


"""
# =========================
# Mailroom machine: instruction set
# =========================
#
# - One accumulator ("hand"), which may be empty (None).
# - Floor tiles 0..size-1, all start at 0 unless preset.
# - PC is "the next line to run". Label-only lines take no address.
# - Tile operands: `n` (direct) or `[n]` (the tile whose address is in tile n).
#
# - INBOX            ; hand <- next inbox value, empty inbox halts
# - OUTBOX           ; outbox <- hand, hand becomes empty
# - COPYFROM n       ; hand <- tile
# - COPYTO n         ; tile <- hand
# - ADD n / SUB n    ; hand <- hand +/- tile
# - BUMPUP n         ; tile <- tile + 1, hand <- tile
# - BUMPDN n         ; tile <- tile - 1, hand <- tile
# - JUMP l           ; unconditional
# - JUMPZ l          ; hand == 0
# - JUMPN l          ; hand < 0
#
# Using the empty hand, an unknown label, a tile off the floor or
# running more than max_steps instructions without an INBOX is a fault.
"""


class MachineFault(RuntimeError):
    def __init__(self, msg: str, pc: Optional[int] = None, line_no: Optional[int] = None) -> None:
        super().__init__(msg)
        self.pc = pc
        self.line_no = line_no


class Machine:
    def __init__(self, *, debug: bool = False, inbox: Optional[InputSource] = None,
                 outbox: Optional[OutputSink] = None, floor: Optional[DataMemory] = None,
                 max_steps: Optional[int] = None, led: bool = False) -> None:
        self.pc = PC()
        self.ir = IR()
        self.prog = ProgramMemory()
        self.mem = floor if floor is not None else DataMemory(size=config.FLOOR_SIZE)
        self.inbox: InputSource = inbox if inbox is not None else Inbox()
        self.outbox: OutputSink = outbox if outbox is not None else Outbox()
        self.hand: Optional[int] = None
        self.halted = False
        self.fault: Optional[MachineFault] = None
        self.steps = 0
        # Steps since the last value was read; bounded by max_steps
        self.idle_steps = 0
        self.max_steps = int(max_steps if max_steps is not None else config.MAX_STEPS)
        self.debug = debug
        self.led = led
        # Values sent to the outbox during the current run
        self.emitted: List[int] = []

    def load_program(self, lines: List[str]) -> None:
        self.prog.load_program(lines)
        self.pc.reset()
        self.ir.clear()
        self.hand = None
        self.halted = False
        self.fault = None
        self.steps = 0
        self.idle_steps = 0
        self.emitted = []
        self._println(f"[LOAD] {self.prog.size()} instructions, labels={sorted(self.prog.labels)}")

    def step(self) -> bool:
        """Fetch, decode and execute one instruction. Returns False once halted."""
        if self.halted:
            return False
        pc = self.pc.value
        text = self.prog.fetch(pc)
        if text is None:
            self._on_halt()
            return False
        if self.idle_steps >= self.max_steps:
            raise MachineFault(f"step limit {self.max_steps} exceeded without reading the inbox",
                               pc, self.prog.line_numbers[pc])
        self.steps += 1
        self.idle_steps += 1
        op, args = self.prog.get_op(pc)
        self.ir.load(text, (op, args), self.prog.line_numbers[pc])
        self._on_fetch(text)
        try:
            changes = self._exec_one(op, args)
        except FloorError as ex:
            raise MachineFault(str(ex), pc, self.ir.line_no) from ex
        if not self.halted:
            self._on_execute(format_op(op, args), changes)
        return not self.halted

    def run(self) -> List[int]:
        """Run until halt or fault. Faults are latched in `self.fault`."""
        self._println("\n[RUN] Starting execution...")
        if self.led:
            from utils.run_pause_indicator import run_on
            run_on()
        try:
            while True:
                try:
                    cont = self.step()
                except MachineFault as ex:
                    self._trap_fault(ex)
                    break
                if not cont:
                    break
        finally:
            if self.led:
                from utils.run_pause_indicator import run_off
                run_off()
        self._println("[RUN] Execution finished.\n")
        return list(self.emitted)

    # ---- Execution ----
    def _need_hand(self, op: str) -> int:
        if self.hand is None:
            raise MachineFault(f"{op} with empty hand", self.pc.value, self.ir.line_no)
        return self.hand

    def _jump(self, label: str) -> None:
        addr = self.prog.get_label_addr(label)
        if addr is None:
            raise MachineFault(f"unknown label {label!r}", self.pc.value, self.ir.line_no)
        self.pc.jump(addr)

    def _exec_one(self, op: str, args: tuple[Any, ...]) -> Dict[str, int]:
        changes: Dict[str, int] = {}
        m = self.mem

        if op == "INBOX":
            try:
                self.hand = int(self.inbox.read_next_integer())
            except EndOfInput:
                self._on_halt()
                return changes
            self.idle_steps = 0
            changes["hand"] = self.hand

        elif op == "OUTBOX":
            v = self._need_hand(op)
            self.outbox.write_integer(v)
            self.emitted.append(v)
            self.hand = None
            self._on_outbox(v)

        elif op == "COPYFROM":
            addr = m.resolve(*args)
            self.hand = m.get(addr)
            changes["hand"] = self.hand

        elif op == "COPYTO":
            v = self._need_hand(op)
            addr = m.resolve(*args)
            m.set(addr, v)
            changes[f"tile{addr}"] = v

        elif op in ("ADD", "SUB"):
            v = self._need_hand(op)
            addr = m.resolve(*args)
            t = m.get(addr)
            self.hand = v + t if op == "ADD" else v - t
            changes["hand"] = self.hand

        elif op in ("BUMPUP", "BUMPDN"):
            addr = m.resolve(*args)
            v = m.get(addr) + (1 if op == "BUMPUP" else -1)
            m.set(addr, v)
            self.hand = v
            changes[f"tile{addr}"] = v
            changes["hand"] = v

        elif op == "JUMP":
            self._jump(args[0])
            return changes

        elif op in ("JUMPZ", "JUMPN"):
            v = self._need_hand(op)
            taken = (v == 0) if op == "JUMPZ" else (v < 0)
            if taken:
                self._jump(args[0])
                return changes

        elif op in ("NOP", "LABEL"):
            pass

        else:
            raise MachineFault(f"unsupported op {op}", self.pc.value, self.ir.line_no)

        self.pc.advance()
        return changes

    # ---- Observer hooks ----
    def _on_fetch(self, text: str) -> None:
        self._println(f"[FETCH]  PC={self.pc.value:02d} | {text.strip()}")

    def _on_execute(self, desc: str, changes: Dict[str, int]) -> None:
        if changes:
            delta = ", ".join(f"{k}={v}" for k, v in changes.items())
            self._println(f"[EXEC]   {desc:<14} | {delta}")
        else:
            self._println(f"[EXEC]   {desc}")

    def _on_outbox(self, value: int) -> None:
        self._println(f"[OUTBOX] {value}")

    def _on_halt(self) -> None:
        self.halted = True
        self._println("[HALT]   Inbox empty or PC out of range.")

    # ---- Fault trap: convert machine faults into a latched HALT ----
    def _trap_fault(self, ex: MachineFault) -> None:
        self.halted = True
        self.fault = ex
        where = f"PC={ex.pc:02d}" if ex.pc is not None else "PC=?"
        if ex.line_no is not None:
            where += f" line={ex.line_no}"
        self._println(f"[FAULT] {where} | {ex}")

    def _println(self, s: str) -> None:
        if self.debug:
            print(s)


def run_program(lines: List[str], inbox: Any = (), *, floor: Optional[Dict[int, int]] = None,
                outbox: Optional[OutputSink] = None, debug: bool = False,
                max_steps: Optional[int] = None, led: bool = False) -> List[int]:
    """Load `lines`, run them against `inbox` and return the outbox values.
    `inbox` may be an iterable of ints or an InputSource. Raises MachineFault.
    """
    src = inbox if hasattr(inbox, "read_next_integer") else Inbox(inbox)
    mem = DataMemory(size=config.FLOOR_SIZE, preset=floor)
    m = Machine(debug=debug, inbox=src, outbox=outbox, floor=mem, max_steps=max_steps, led=led)
    m.load_program(lines)
    out = m.run()
    if m.fault is not None:
        raise m.fault
    return out
