#!/usr/bin/env python3
"""
Basic cardinality estimation with nanohll.

Counts unique visitors from a stream that repeats each visitor several
times, and compares the estimate with the exact answer.
"""

import random
from nanohll import HyperLogLog


def main():
    hll = HyperLogLog(precision=14)
    print(f"Created {hll} using {hll.memory_bytes()} bytes "
          f"(standard error ~{hll.standard_error():.2%})")

    actual_unique = 50000
    stream = [f"visitor_{random.randrange(actual_unique)}" for _ in range(200000)]
    for visitor in stream:
        hll.add_string(visitor)

    exact = len(set(stream))
    estimate = hll.count()
    print(f"Events seen:       {len(stream)}")
    print(f"Exact unique:      {exact}")
    print(f"Estimated unique:  {estimate}")
    print(f"Error:             {abs(estimate - exact) / exact:.2%}")


if __name__ == "__main__":
    main()
