# blockqsim/cli.py
import argparse
import logging
import sys

from . import document, presets
from .circuit import Circuit
from .errors import InvalidDocument
from .program import channel_name

def format_values(circuit: Circuit, values) -> list:
    """One line per channel: ``A: P(1) ≈ 0.500*`` (``*`` marks entanglement)."""
    lines = []
    for i in range(circuit.channels):
        if i < len(values):
            v = values[i]
            lines.append(f"{channel_name(i)}: P(1) ≈ {v.one:.3f}" + ("*" if v.entangled else ""))
        else:
            lines.append(f"{channel_name(i)}: Error?")
    return lines

def simulate(circuit: Circuit, backend: str) -> int:
    values = circuit.run(backend=backend)
    for line in format_values(circuit, values):
        print(line)
    return 0 if values else 1

def main(argv=None):
    p = argparse.ArgumentParser(description="Simulate block circuits and print P(1) per channel")
    p.add_argument("--verbose", "-v", action="store_true", help="debug logging (collapses, loop jumps)")
    sub = p.add_subparsers(dest="cmd", required=True)

    p_run = sub.add_parser("run", help="simulate a circuit document (JSON)")
    p_run.add_argument("path")
    p_run.add_argument("--backend", type=str, default="serial", choices=["serial", "numba"])

    p_preset = sub.add_parser("preset", help="simulate a built-in example circuit")
    p_preset.add_argument("name", choices=[pr.key for pr in presets.PRESETS])
    p_preset.add_argument("--backend", type=str, default="serial", choices=["serial", "numba"])
    p_preset.add_argument("--save", type=str, default=None, help="also write the circuit document here")

    sub.add_parser("presets", help="list built-in example circuits")

    args = p.parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    if args.cmd == "presets":
        for pr in presets.PRESETS:
            print(f"{pr.key:<14} {pr.name}")
        return 0

    if args.cmd == "preset":
        circuit = presets.get(args.name)
        if args.save:
            document.dump(circuit, args.save)
        return simulate(circuit, args.backend)

    try:
        circuit = document.load(args.path)
    except (OSError, InvalidDocument) as e:
        print(f"cannot load {args.path}: {e}", file=sys.stderr)
        return 2
    return simulate(circuit, args.backend)

if __name__ == "__main__":
    sys.exit(main())
