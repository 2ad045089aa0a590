#!/usr/bin/env python3
"""
Merging sketches from several sources.

Simulates three web servers tracking overlapping visitors and merges their
sketches to estimate the total number of unique visitors.
"""

from nanohll import HyperLogLog


def main():
    print("Simulating three web servers tracking unique visitors...\n")

    ranges = [(0, 5000), (2500, 7500), (5000, 10000)]
    servers = []
    for n, (start, stop) in enumerate(ranges, 1):
        server = HyperLogLog(precision=14)
        server.add_batch(f"user_{i}" for i in range(start, stop))
        servers.append(server)
        print(f"Server {n} unique visitors: {server.count()}")

    total = servers[0].copy()
    for server in servers[1:]:
        total.merge(server)

    actual_total = 10000
    estimated_total = total.count()
    print("\n--- Merged Results ---")
    print(f"Actual total unique visitors: {actual_total}")
    print(f"Estimated total: {estimated_total}")
    print(f"Sum of per-server counts: {sum(s.count() for s in servers)}")
    print(f"Error: {abs(estimated_total - actual_total) / actual_total:.2%}")


if __name__ == "__main__":
    main()
