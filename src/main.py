# -*- coding: utf-8 -*-
"""
Digit exploder entry point.

Reads integers (arguments, a file, or stdin), sends each one's digits to
stdout one per line, and optionally mirrors the outbox on an RGB keyboard.

- default:   run the decomposer directly
- --machine: run the bundled listing on the mailroom machine instead
- --listing: print the bundled listing with addresses and exit
- --source:  compile a C-subset file and use it instead of the bundled listing
- --led:     light the number key of every emitted digit (OpenRGB server
             must run with --server, or set RGB_BACKEND=noop)
- --export-map: dump the keyboard LED names to data/maps (see --led-map)
"""

import argparse
import io
import sys
from typing import List, Optional, TextIO, Tuple

import config
from exploder.channels import InboxFormatError, InputSource, TeeOutbox, TextInbox, TextOutbox
from exploder.decomposer import Decomposer
from sim.codegen import compile_file
from sim.compiler import CompileError
from sim.machine import Machine
from sim.data_memory import DataMemory
from sim.programs import PROGRAMS, FLOORS
from utils.asm_listing import print_listing


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="digit-exploder",
        description="Send the hundreds/tens/ones digits of each input value to the outbox.",
    )
    p.add_argument("values", nargs="*", help="input values (default: read stdin)")
    p.add_argument("-f", "--file", help="read input values from FILE")
    p.add_argument("--machine", action="store_true", help="run the bundled listing on the mailroom machine")
    p.add_argument("--program", default="digit_exploder", choices=sorted(PROGRAMS),
                   help="bundled listing used by --machine/--listing")
    p.add_argument("--listing", action="store_true", help="print the bundled listing and exit")
    p.add_argument("--source", metavar="FILE",
                   help="compile FILE (C subset) and use it for --machine/--listing")
    p.add_argument("--led", action="store_true", help="mirror the outbox on the keyboard number row")
    p.add_argument("--led-map", metavar="FILE", help="JSON LED map to use instead of the device LED names")
    p.add_argument("--export-map", action="store_true",
                   help="save the keyboard LED names under data/maps and exit")
    p.add_argument("--debug", action="store_true", default=config.DEBUG, help="trace every step")
    return p


def _open_source(args: argparse.Namespace) -> Tuple[InputSource, Optional[TextIO]]:
    """Inbox for the run, plus the file handle main() has to close (if any)."""
    if args.values:
        return TextInbox(io.StringIO(" ".join(args.values))), None
    if args.file:
        f = open(args.file, "r", encoding="utf-8")
        return TextInbox(f), f
    return TextInbox(sys.stdin), None


def _load_listing(args: argparse.Namespace) -> Optional[List[str]]:
    if not args.source:
        return PROGRAMS[args.program]
    try:
        return compile_file(args.source)
    except OSError as ex:
        print(f"[ERROR] cannot read {args.source}: {ex}", file=sys.stderr)
    except CompileError as ex:
        for msg in ex.errors:
            print(f"[ERROR] {args.source}: {msg}", file=sys.stderr)
    return None


def _export_map() -> int:
    import rgb_controller as rc
    try:
        rc.connect()
    except RuntimeError as ex:
        print(f"[ERROR] RGB backend unavailable: {ex}", file=sys.stderr)
        return 1
    try:
        rc.export_map()
    finally:
        rc.disconnect()
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.export_map:
        return _export_map()

    listing = _load_listing(args)
    if listing is None:
        return 3

    if args.listing:
        print_listing(listing)
        return 0

    sink = TextOutbox(sys.stdout)
    led = None
    if args.led:
        import rgb_controller as rc
        from exploder.led_sink import LedOutbox
        try:
            rc.connect(map_path=args.led_map)
        except (OSError, ValueError) as ex:
            rc.disconnect()
            print(f"[ERROR] cannot load LED map {args.led_map}: {ex}", file=sys.stderr)
            return 1
        except RuntimeError as ex:
            print(f"[ERROR] RGB backend unavailable: {ex}", file=sys.stderr)
            print("[HINT] Start OpenRGB with --server, or set RGB_BACKEND=noop.", file=sys.stderr)
            return 1
        rc.init_all_keys(debug=args.debug)
        led = LedOutbox()
        sink = TeeOutbox(sink, led)

    try:
        source, handle = _open_source(args)
    except OSError as ex:
        print(f"[ERROR] cannot read {args.file}: {ex}", file=sys.stderr)
        if led is not None:
            rc.disconnect()
        return 2

    try:
        if args.machine or args.source:
            floor = DataMemory(size=config.FLOOR_SIZE, preset=FLOORS.get(args.program))
            m = Machine(debug=args.debug, inbox=source, outbox=sink, floor=floor, led=led is not None)
            m.load_program(listing)
            m.run()
            if m.fault is not None:
                print(f"[FAULT] {m.fault}", file=sys.stderr)
                return 1
        else:
            d = Decomposer(source, sink, debug=args.debug,
                           on_stage=led.on_stage if led is not None else None)
            d.run()
    except InboxFormatError as ex:
        print(f"[ERROR] {ex}", file=sys.stderr)
        return 2
    finally:
        if handle is not None:
            handle.close()
        if led is not None:
            import rgb_controller as rc
            rc.disconnect()
    return 0


if __name__ == "__main__":
    sys.exit(main())
