#!/usr/bin/env python3
"""
Persisting sketches with FileStorage and the command layer.

Stores one sketch per day, then answers "unique visitors this week" by
counting across the daily keys.
"""

import argparse
import tempfile
from nanohll import Commands, FileStorage


def main():
    parser = argparse.ArgumentParser(description=__doc__,
                                     formatter_class=argparse.RawDescriptionHelpFormatter)
    parser.add_argument("--data-dir", default=None,
                        help="Directory for sketch files (default: a temporary directory)")
    parser.add_argument("--debug", action="store_true", help="Print storage debug output")
    args = parser.parse_args()

    with tempfile.TemporaryDirectory() as tmp:
        data_dir = args.data_dir or tmp
        commands = Commands(FileStorage(data_dir, debug=args.debug))

        days = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
        for n, day in enumerate(days):
            # Each day sees 3000 visitors, 1000 of them new
            visitors = [f"user_{i}" for i in range(n * 1000, n * 1000 + 3000)]
            commands.pfadd(f"visitors_{day}", visitors)
            print(f"{day}: {commands.pfcount([f'visitors_{day}'])} unique visitors")

        week_keys = [f"visitors_{day}" for day in days]
        commands.pfmerge("visitors_week", week_keys)
        print(f"\nStored keys in {data_dir}: {', '.join(commands.keys())}")
        print(f"Week unique visitors (actual 9000): {commands.pfcount(['visitors_week'])}")


if __name__ == "__main__":
    main()
