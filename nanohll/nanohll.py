#!/usr/bin/env python
from __future__ import annotations
import sys
import argparse
from typing import List, Optional
from nanohll.lib.commands import Commands
from nanohll.lib.errors import NanoHLLError
from nanohll.lib.hyperloglog import DEFAULT_PRECISION
from nanohll.lib.storage import FileStorage

DEFAULT_DATA_DIR = "./hll_data"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    arg_parser = argparse.ArgumentParser(
        prog="nanohll",
        description="""Approximate distinct counting with HyperLogLog sketches stored on disk.

        Commands follow Redis naming:
        - pfadd: add elements to a key, creating it if needed
        - pfcount: estimate distinct elements across one or more keys
        - pfmerge: merge keys into a destination key
        """,
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    arg_parser.add_argument("--data-dir", "-d", default=DEFAULT_DATA_DIR,
                            help=f"Directory holding .hll sketch files (default: {DEFAULT_DATA_DIR})")
    arg_parser.add_argument("--verbose", action="store_true", help="Print verbose output")
    arg_parser.add_argument("--debug", action="store_true", help="Enable debug mode")

    subparsers = arg_parser.add_subparsers(dest="command", required=True)

    pfadd = subparsers.add_parser("pfadd", help="Add elements to a key")
    pfadd.add_argument("key")
    pfadd.add_argument("elements", nargs="+")
    pfadd.add_argument("--precision", "-p", type=int, default=None,
                       help=f"Precision when creating the key (4-16, default: {DEFAULT_PRECISION})")

    pfcount = subparsers.add_parser("pfcount", help="Estimate distinct elements across keys")
    pfcount.add_argument("keys", nargs="+")

    pfmerge = subparsers.add_parser("pfmerge", help="Merge source keys into a destination key")
    pfmerge.add_argument("dest_key")
    pfmerge.add_argument("source_keys", nargs="+")

    delete = subparsers.add_parser("delete", help="Delete a key")
    delete.add_argument("key")

    exists = subparsers.add_parser("exists", help="Check whether a key exists")
    exists.add_argument("key")

    subparsers.add_parser("keys", help="List all keys")

    info = subparsers.add_parser("info", help="Show sketch parameters and estimate for a key")
    info.add_argument("key")

    return arg_parser.parse_args(argv)


def run_command(args: argparse.Namespace, commands: Commands) -> None:
    """Execute one parsed command and print its result."""
    if args.command == "pfadd":
        added = commands.pfadd(args.key, args.elements, precision=args.precision)
        print(f"Added {added} elements")
    elif args.command == "pfcount":
        print(commands.pfcount(args.keys))
    elif args.command == "pfmerge":
        merged = commands.pfmerge(args.dest_key, args.source_keys)
        print(f"Merged {merged} keys into {args.dest_key}")
    elif args.command == "delete":
        commands.delete(args.key)
        print(f"Deleted key: {args.key}")
    elif args.command == "exists":
        print("true" if commands.exists(args.key) else "false")
    elif args.command == "keys":
        for key in commands.keys():
            print(key)
    elif args.command == "info":
        hll = commands.storage.load(args.key)
        print(f"key: {args.key}")
        print(f"precision: {hll.precision}")
        print(f"registers: {hll.num_registers}")
        print(f"memory_bytes: {hll.memory_bytes()}")
        print(f"standard_error: {hll.standard_error():.4%}")
        print(f"estimate: {hll.count()}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for nanohll."""
    args = parse_args(argv)

    if args.verbose:
        print(f"Using data directory {args.data_dir}")

    try:
        storage = FileStorage(args.data_dir, debug=args.debug)
        commands = Commands(storage, debug=args.debug)
        run_command(args, commands)
    except NanoHLLError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
