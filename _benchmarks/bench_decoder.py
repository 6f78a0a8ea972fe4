#!/usr/bin/env python3
"""
Benchmark: CRDSA SIC versus Marsala correlation over a load sweep.

Generates random CRDSA frames at increasing normalized load, decodes every
frame with both decode policies and reports throughput, packet loss, the share
of packets recovered by correlation and the decoding time per frame.

Usage
-----
    python _benchmarks/bench_decoder.py
"""

import time

import matplotlib.pyplot as plt
import numpy as np

from crdsatools import DecoderConfig, RandomAccessReceiver, TraceCollector, metrics
from crdsatools.plotting import apply_default_theme, sinr_histogram, throughput_curve
from crdsatools.traffic import random_crdsa_frame

# ── Configuration ──────────────────────────────────────────────────────────
NUM_SLOTS = 100
REPLICAS = 3
SNR_DB = 10.0
POWER_SPREAD_DB = 6.0  # uniform replica power spread around SNR_DB
THRESHOLD_DB = 3.0  # decoding threshold of the link oracle
LOADS = np.arange(0.1, 1.01, 0.1)  # packets per slot

N_FRAMES = 20  # frames per load point
POLICIES = ("crdsa", "marsala")


def _run_policy(policy, load, sink):
    """Decode N_FRAMES random frames at one load; return (results, times)."""
    config = DecoderConfig(
        num_slots=NUM_SLOTS,
        max_replicas=REPLICAS,
        decode_policy=policy,
        sinr_threshold_db=THRESHOLD_DB,
    )
    rx = RandomAccessReceiver(config, sink=sink)
    num_packets = int(round(load * NUM_SLOTS))

    results, times = [], []
    for seed in range(N_FRAMES):
        records = random_crdsa_frame(
            num_packets=num_packets,
            num_slots=NUM_SLOTS,
            replicas=REPLICAS,
            snr_db=SNR_DB,
            power_spread_db=POWER_SPREAD_DB,
            seed=seed,
        )
        t0 = time.perf_counter()
        results.append(rx.decode_frame(records))
        times.append(time.perf_counter() - t0)
    return results, times


def _print_summary(policy, rows):
    """Print throughput + timing table of one policy."""
    print(f"\n{'=' * 65}")
    print(f"  {policy.upper()}")
    print(f"{'=' * 65}")
    print(
        f"  {'Load G':>8s} {'S':>8s} {'PLR':>8s} {'Corr.':>8s} "
        f"{'Mean (ms)':>10s} {'Max (ms)':>10s}"
    )
    print(f"  {'-' * 58}")
    for load, s, plr, corr, times in rows:
        t = np.array(times) * 1e3
        print(
            f"  {load:8.2f} {s:8.3f} {plr:8.3f} {corr:8.2%} "
            f"{t.mean():10.2f} {t.max():10.2f}"
        )


def main():
    apply_default_theme()
    throughputs = {}
    sinks = {}

    for policy in POLICIES:
        sink = TraceCollector()
        rows = []
        for load in LOADS:
            results, times = _run_policy(policy, load, sink)
            rows.append(
                (
                    load,
                    metrics.throughput(results, NUM_SLOTS),
                    metrics.packet_loss_ratio(results),
                    metrics.decode_breakdown(results)["correlation"],
                    times,
                )
            )
        _print_summary(policy, rows)
        throughputs[policy] = [row[1] for row in rows]
        sinks[policy] = sink

    marsala = sinks["marsala"]
    print(
        f"\nCorrelation attempts: {len(marsala.correlation_trace)}, "
        f"success ratio {marsala.correlation_success_ratio():.2%}"
    )

    fig, axes = plt.subplots(1, 2, figsize=(10, 3.5))
    throughput_curve(
        LOADS,
        [throughputs[p] for p in POLICIES],
        labels=[p.upper() for p in POLICIES],
        ax=axes[0],
    )
    sinr_histogram(marsala, threshold_db=THRESHOLD_DB, ax=axes[1])
    plt.show()


if __name__ == "__main__":
    main()
