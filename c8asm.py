#!/usr/bin/env python3
"""
c8asm — CHIP-8 Assembler CLI

Usage:
    python c8asm.py <input.chip8> [-o output.c8] [--format bin|listing]
                                  [--target chip8|eti660] [--org 0x200]
                                  [-v] [-q] [--log-file PATH]

Output format is auto-detected from the output file extension:
    .lst        → listing with addresses and opcode bytes
    anything    → raw binary (default, written to a.c8)

Without -o a binary is written to a.c8; with --format listing and no -o
the listing is printed to stdout instead.

Examples:
    python c8asm.py pong.chip8 -o pong.c8
    python c8asm.py pong.chip8 --format listing
    python c8asm.py pong.chip8 -o pong.c8 --target eti660 -v
"""

import argparse
import sys
import os
from pathlib import Path

# Allow running from project root without installing
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from chip8asm import __version__
from chip8asm.assembler import Assembler, AssemblerError, TARGET_PROFILES
from chip8asm.log_setup import setup_logging, verbosity_to_level

DEFAULT_OUTPUT = "a.c8"


def parse_int_arg(value: str) -> int:
    """Parse an integer argument that may be hex (0x...), $ prefix, or decimal."""
    value = value.strip()
    if value.startswith("0x") or value.startswith("0X"):
        return int(value, 16)
    if value.startswith("$"):
        return int(value[1:], 16)
    return int(value)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="c8asm",
        description="CHIP-8 assembler",
        epilog="Targets: " + ", ".join(TARGET_PROFILES.keys()),
    )
    parser.add_argument("input", help="Input assembly source file")
    parser.add_argument("-o", "--output",
                        help=f"Output file (default: {DEFAULT_OUTPUT} for binary, "
                             "stdout for listing)")
    parser.add_argument("--format", choices=["bin", "listing"], default=None,
                        help="Output format (auto-detected from -o extension if not set)")
    parser.add_argument("--target", default="chip8",
                        choices=list(TARGET_PROFILES.keys()),
                        help="Interpreter profile selecting the load address (default: chip8)")
    parser.add_argument("--org", default=None,
                        help="Load address override (hex, e.g. 0x200)")
    parser.add_argument("--verbose", "-v", action="count", default=0,
                        help="Increase verbosity (-v, -vv)")
    parser.add_argument("--quiet", "-q", action="store_true",
                        help="Only report errors")
    parser.add_argument("--log-file", default=None,
                        help="Also write a debug log to this file")
    parser.add_argument("--version", action="version",
                        version=f"c8asm {__version__}")
    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(verbosity_to_level(args.verbose, args.quiet),
                  Path(args.log_file) if args.log_file else None)

    # Read input
    try:
        with open(args.input, "r", encoding="utf-8") as f:
            source = f.read()
    except FileNotFoundError:
        print(f"Error: File not found: {args.input}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error reading {args.input}: {e}", file=sys.stderr)
        sys.exit(1)

    profile = TARGET_PROFILES[args.target]
    try:
        org = parse_int_arg(args.org) if args.org else profile["org"]
    except ValueError:
        print(f"Error: invalid --org value: {args.org}", file=sys.stderr)
        sys.exit(1)

    # Determine output format from --format flag, file extension, or default to bin
    if args.format:
        out_format = args.format
    elif args.output and os.path.splitext(args.output)[1].lower() == '.lst':
        out_format = 'listing'
    else:
        out_format = 'bin'

    if args.verbose:
        print(f"[c8asm] Input:  {args.input}", file=sys.stderr)
        print(f"[c8asm] Target: {args.target} - {profile['description']}", file=sys.stderr)
        print(f"[c8asm] ORG:    0x{org:03X}", file=sys.stderr)

    try:
        asm = Assembler(base_address=org)
        binary = asm.assemble(source)

        if out_format == 'listing':
            result = asm.get_listing()
            if args.output:
                with open(args.output, "w", encoding="utf-8") as f:
                    f.write(result + "\n")
            else:
                print(result)
        else:
            out_path = args.output or DEFAULT_OUTPUT
            with open(out_path, "wb") as f:
                f.write(binary)
            if args.verbose:
                print(f"[c8asm] Output: {out_path} ({len(binary)} bytes, "
                      f"{len(binary) // 2} instructions)", file=sys.stderr)

    except AssemblerError as e:
        print(f"Assembler error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        print(f"Internal assembler error: {e}", file=sys.stderr)
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(2)


if __name__ == "__main__":
    main()
