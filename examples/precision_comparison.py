#!/usr/bin/env python3
"""
Compare precision values and their accuracy/memory tradeoffs.

Optionally plots observed error against the theoretical standard error.
"""

import argparse
import numpy as np
from nanohll import HyperLogLog


def measure(precision, n_items, runs):
    """Mean absolute relative error over independent runs."""
    errors = []
    for run in range(runs):
        hll = HyperLogLog(precision=precision)
        hll.add_batch(range(run * n_items, (run + 1) * n_items))
        errors.append(abs(hll.count() - n_items) / n_items)
    return float(np.mean(errors))


def plot_results(precisions, observed, theoretical, output):
    import matplotlib
    matplotlib.use("Agg")
    import matplotlib.pyplot as plt

    plt.figure(figsize=(8, 5))
    plt.plot(precisions, observed, 'bo-', linewidth=2, markersize=8, label='Observed mean error')
    plt.plot(precisions, theoretical, 'r--', linewidth=1, label='1.04 / sqrt(m)')
    plt.xlabel('Precision')
    plt.ylabel('Relative error')
    plt.yscale('log')
    plt.title('HyperLogLog error by precision')
    plt.grid(True, alpha=0.3)
    plt.legend()
    plt.tight_layout()
    plt.savefig(output)
    print(f"\nSaved plot to {output}")


def main():
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--items", type=int, default=100000, help="Distinct items per run")
    parser.add_argument("--runs", type=int, default=3, help="Runs per precision")
    parser.add_argument("--plot", type=str, default=None, help="Write a plot to this file")
    args = parser.parse_args()

    precisions = list(range(4, 17, 2))
    observed = []
    theoretical = []

    print(f"Testing with {args.items} unique items, {args.runs} runs per precision\n")
    for precision in precisions:
        hll = HyperLogLog(precision=precision)
        error = measure(precision, args.items, args.runs)
        observed.append(error)
        theoretical.append(hll.standard_error())
        print(f"Precision {precision:2d} | Memory: {hll.memory_bytes():6d} bytes | "
              f"Theoretical: {hll.standard_error():6.2%} | Observed: {error:6.2%}")

    print("\nHigher precision = better accuracy but more memory")
    print("Precision 14 is a good default (16KB, ~0.8% error)")

    if args.plot:
        plot_results(precisions, observed, theoretical, args.plot)


if __name__ == "__main__":
    main()
