# Jacob Mitchell, Kyle Axtell
# CS 456 - Data Compression
# experiments.py
# 10/19/26

"""
Huffman codec experiments

Runs every stage of the codec (count, build, derive, encode, decode) over
synthetic datasets with repeated runs and reports how close the codes get to
the entropy bound, and what the container framing (header + stored tree) costs

Outputs (in --outdir):
  - metrics.csv     (raw row per run)
  - summary.csv     (grouped mean/stdev)
  - *.png           (charts)

How to run:
  python experiments.py --outdir results --runs 5
  python experiments.py --outdir results --runs 3 --exp1_size_kb 256 --exp2_max_mb 4
  python experiments.py --outdir results --exp1_generators uniform256,zipf128,english_like --no_exp3
"""

from __future__ import annotations

import argparse
import csv
import math
import random
import statistics
import time
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Callable, Dict, List, Sequence, Tuple

import matplotlib.pyplot as plt

import container
import huffman as huff
from bitio import BitReader


# Utilities

def now_ns() -> int:
    return time.perf_counter_ns()

def ns_to_ms(ns: int) -> float:
    return ns / 1_000_000.0

def safe_mkdir(p: Path) -> None:
    p.mkdir(parents=True, exist_ok=True)

def shannon_entropy(frequencies: Dict[int, int]) -> float:
    """Bits per symbol of an ideal coder for this frequency table."""
    total = sum(frequencies.values())
    if total == 0:
        return 0.0
    return -sum((f / total) * math.log2(f / total) for f in frequencies.values())

def average_code_length(code_map: Dict[int, str], frequencies: Dict[int, int]) -> float:
    total = sum(frequencies.values())
    if total == 0:
        return 0.0
    return sum(len(code_map[s]) * f for s, f in frequencies.items()) / total


# Synthetic dataset generators

def gen_weighted(size: int, symbols: Sequence[int], weights: Sequence[float], seed: int) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.choices(symbols, weights=weights, k=size))

def gen_uniform(size: int, alphabet: int = 256, seed: int = 0) -> bytes:
    return gen_weighted(size, range(alphabet), [1.0] * alphabet, seed)

def gen_repetitive(size: int, dominant: int = ord('A'), dom_frac: float = 0.90, seed: int = 0) -> bytes:
    others = [i for i in range(256) if i != dominant]
    weights = [dom_frac] + [(1.0 - dom_frac) / len(others)] * len(others)
    return gen_weighted(size, [dominant] + others, weights, seed)

def gen_zipf_like(size: int, alphabet: int = 128, s: float = 1.2, seed: int = 0) -> bytes:
    return gen_weighted(size, range(alphabet), [1.0 / ((i + 1) ** s) for i in range(alphabet)], seed)

def gen_fibonacci(size: int, alphabet: int = 24, seed: int = 0) -> bytes:
    # Fibonacci weights give the most skewed (deepest) Huffman tree
    weights = [1, 1]
    while len(weights) < alphabet:
        weights.append(weights[-1] + weights[-2])
    return gen_weighted(size, range(alphabet), weights, seed)

def gen_english_like(size: int, seed: int = 0) -> bytes:
    chars = " etaoinshrdlcumwfgypbvkjxqETAOINSHRDLCUMWFGYPBVKJXQ\n"
    weights = []
    for ch in chars:
        if ch == ' ':
            weights.append(13.0)
        elif ch == '\n':
            weights.append(1.5)
        elif ch.lower() in "etaoinshrdlu":
            weights.append(6.0)
        elif ch.lower() in "cmfwgypbvk":
            weights.append(2.5)
        else:
            weights.append(1.2)
    return gen_weighted(size, [ord(ch) for ch in chars], weights, seed)

GENERATOR_REGISTRY: Dict[str, Callable[[int, int], bytes]] = {
    "uniform256": lambda size, seed: gen_uniform(size, alphabet=256, seed=seed),
    "uniform128": lambda size, seed: gen_uniform(size, alphabet=128, seed=seed),
    "zipf128": lambda size, seed: gen_zipf_like(size, alphabet=128, s=1.2, seed=seed),
    "zipf64": lambda size, seed: gen_zipf_like(size, alphabet=64, s=1.2, seed=seed),
    "repetitive90": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.90, seed=seed),
    "repetitive99": lambda size, seed: gen_repetitive(size, dominant=ord('A'), dom_frac=0.99, seed=seed),
    "fibonacci24": lambda size, seed: gen_fibonacci(size, alphabet=24, seed=seed),
    "english_like": lambda size, seed: gen_english_like(size, seed=seed),
}

def generate_dataset(name: str, size_bytes: int, seed: int) -> bytes:
    fn = GENERATOR_REGISTRY.get(name)
    if fn is None:
        raise ValueError(f"unknown generator {name!r}, choose from {', '.join(sorted(GENERATOR_REGISTRY))}")
    return fn(size_bytes, seed)


# Experiment runner

@dataclass
class MetricRow:
    exp_name: str
    dataset_name: str
    file_size_bytes: int
    run_id: int
    unique_symbols: int

    count_ms: float
    build_tree_ms: float
    derive_codes_ms: float
    encode_ms: float
    decode_ms: float
    total_ms: float

    payload_bytes: int   # packed codes only
    framed_bytes: int    # full container: header + tree + codes
    pad_bits: int
    payload_ratio: float
    framed_ratio: float

    entropy_bits: float
    avg_code_bits: float
    correctness_ok: int  # 1 or 0


def run_one(data: bytes, exp_name: str = "", dataset_name: str = "", run_id: int = 0) -> MetricRow:
    t0 = now_ns()
    ft, symbols = huff.count_frequencies(data)
    t1 = now_ns()
    root = huff.build_huffman_tree(ft, symbols)
    t2 = now_ns()
    code_map = huff.generate_huffman_codes(root)
    t3 = now_ns()
    writer = huff.huffman_encode(data, code_map)
    packed = writer.finish()
    t4 = now_ns()
    decoded = bytes(huff.huffman_decode(BitReader(packed, writer.bit_length), root))
    t5 = now_ns()

    framed = container.analyze(data)
    size = max(1, len(data))

    return MetricRow(
        exp_name=exp_name,
        dataset_name=dataset_name,
        file_size_bytes=len(data),
        run_id=run_id,
        unique_symbols=len(ft),
        count_ms=ns_to_ms(t1 - t0),
        build_tree_ms=ns_to_ms(t2 - t1),
        derive_codes_ms=ns_to_ms(t3 - t2),
        encode_ms=ns_to_ms(t4 - t3),
        decode_ms=ns_to_ms(t5 - t4),
        total_ms=ns_to_ms(t5 - t0),
        payload_bytes=len(packed),
        framed_bytes=framed.output_bytes,
        pad_bits=writer.pad_bits,
        payload_ratio=len(packed) / size,
        framed_ratio=framed.output_bytes / size,
        entropy_bits=shannon_entropy(ft),
        avg_code_bits=average_code_length(code_map, ft),
        correctness_ok=1 if decoded == data else 0,
    )


def write_csv(path: Path, rows: List[MetricRow]) -> None:
    names = [f.name for f in fields(MetricRow)]
    with path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=names)
        w.writeheader()
        for r in rows:
            w.writerow({k: getattr(r, k) for k in names})


SUMMARY_METRICS = [
    "payload_ratio", "framed_ratio", "entropy_bits", "avg_code_bits",
    "build_tree_ms", "encode_ms", "decode_ms", "total_ms",
]

def mean_stdev(vals: List[float]) -> Tuple[float, float]:
    if len(vals) == 1:
        return vals[0], 0.0
    return statistics.mean(vals), statistics.stdev(vals)

def group_summary(rows: List[MetricRow], out_path: Path) -> None:
    """
    Group by exp_name, dataset_name, file_size_bytes and compute mean/stdev
    """
    key_to: Dict[Tuple[str, str, int], List[MetricRow]] = {}
    for r in rows:
        key_to.setdefault((r.exp_name, r.dataset_name, r.file_size_bytes), []).append(r)

    summary_fields = ["exp_name", "dataset_name", "file_size_bytes", "n_runs"]
    for m in SUMMARY_METRICS:
        summary_fields += [f"{m}_mean", f"{m}_stdev"]
    summary_fields.append("correctness_ok_rate")

    with out_path.open("w", newline="", encoding="utf-8") as f:
        w = csv.DictWriter(f, fieldnames=summary_fields)
        w.writeheader()
        for (exp_name, dataset_name, size_b), items in sorted(key_to.items()):
            out = {
                "exp_name": exp_name,
                "dataset_name": dataset_name,
                "file_size_bytes": size_b,
                "n_runs": len(items),
                "correctness_ok_rate": sum(x.correctness_ok for x in items) / len(items),
            }
            for m in SUMMARY_METRICS:
                out[f"{m}_mean"], out[f"{m}_stdev"] = mean_stdev([getattr(x, m) for x in items])
            w.writerow(out)


# Plotting

def _mean_of(rows: List[MetricRow], field: str) -> float:
    vals = [getattr(r, field) for r in rows]
    return statistics.mean(vals) if vals else float("nan")


def plot_experiment_1(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp1_distribution"]
    if not exp_rows:
        return

    datasets = sorted(set(r.dataset_name for r in exp_rows))
    by_dataset = {d: [r for r in exp_rows if r.dataset_name == d] for d in datasets}
    x = list(range(len(datasets)))

    plt.figure()
    plt.plot(x, [_mean_of(by_dataset[d], "entropy_bits") for d in datasets], marker="o", label="entropy bound")
    plt.plot(x, [_mean_of(by_dataset[d], "avg_code_bits") for d in datasets], marker="o", label="huffman")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Bits per Symbol")
    plt.title("Experiment 1: Code Length vs Entropy by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_bits_per_symbol.png", dpi=200)
    plt.close()

    plt.figure()
    plt.plot(x, [_mean_of(by_dataset[d], "payload_ratio") for d in datasets], marker="o", label="payload")
    plt.plot(x, [_mean_of(by_dataset[d], "framed_ratio") for d in datasets], marker="o", label="container")
    plt.xticks(x, datasets, rotation=20, ha="right")
    plt.ylabel("Compressed Bytes / Original Bytes")
    plt.title("Experiment 1: Compression Ratio by Distribution")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp1_compression_ratio.png", dpi=200)
    plt.close()


def plot_experiment_2(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp2_size_scaling"]
    if not exp_rows:
        return

    for dist in sorted(set(r.dataset_name for r in exp_rows)):
        dist_rows = [r for r in exp_rows if r.dataset_name == dist]
        sizes = sorted(set(r.file_size_bytes for r in dist_rows))
        by_size = {s: [r for r in dist_rows if r.file_size_bytes == s] for s in sizes}

        plt.figure()
        for stage in ("build_tree_ms", "encode_ms", "decode_ms"):
            plt.plot(sizes, [_mean_of(by_size[s], stage) for s in sizes], marker="o", label=stage[:-3])
        plt.xscale("log", base=2)
        plt.xlabel("File Size (bytes)")
        plt.ylabel("Time (ms)")
        plt.title(f"Experiment 2: Stage Time vs Size ({dist})")
        plt.legend()
        plt.tight_layout()
        plt.savefig(outdir / f"exp2_stage_time_{dist}.png", dpi=200)
        plt.close()


def plot_experiment_3(rows: List[MetricRow], outdir: Path) -> None:
    exp_rows = [r for r in rows if r.exp_name == "exp3_framing_overhead"]
    if not exp_rows:
        return

    sizes = sorted(set(r.file_size_bytes for r in exp_rows))
    by_size = {s: [r for r in exp_rows if r.file_size_bytes == s] for s in sizes}

    plt.figure()
    plt.plot(sizes, [_mean_of(by_size[s], "payload_ratio") for s in sizes], marker="o", label="payload")
    plt.plot(sizes, [_mean_of(by_size[s], "framed_ratio") for s in sizes], marker="o", label="container")
    plt.axhline(1.0, color="gray", linestyle="--", linewidth=1)
    plt.xscale("log", base=2)
    plt.xlabel("File Size (bytes)")
    plt.ylabel("Compressed Bytes / Original Bytes")
    plt.title("Experiment 3: Framing Overhead on Small Inputs (english_like)")
    plt.legend()
    plt.tight_layout()
    plt.savefig(outdir / "exp3_framing_overhead.png", dpi=200)
    plt.close()


# Main

def parse_csv_list(s: str) -> List[str]:
    return [x.strip() for x in s.split(",") if x.strip()]

def power_of_two_sizes(min_bytes: int, max_bytes: int) -> List[int]:
    sizes: List[int] = []
    s = max(1, min_bytes)
    while s <= max_bytes:
        sizes.append(s)
        s *= 2
    return sizes

def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser()
    ap.add_argument("--outdir", type=str, default="results", help="Output directory for CSV and plots")
    ap.add_argument("--runs", type=int, default=5, help="Repetitions per configuration (>=3 recommended for timing)")
    ap.add_argument("--seed", type=int, default=123, help="Base random seed")

    # Experiment toggles
    ap.add_argument("--no_exp1", action="store_true", help="Disable experiment 1 (distribution)")
    ap.add_argument("--no_exp2", action="store_true", help="Disable experiment 2 (size scaling)")
    ap.add_argument("--no_exp3", action="store_true", help="Disable experiment 3 (framing overhead)")
    ap.add_argument("--no_plots", action="store_true", help="Write CSV files only")

    # Experiment 1 controls
    ap.add_argument("--exp1_size_kb", type=int, default=512, help="Experiment 1 fixed file size in KB")
    ap.add_argument("--exp1_generators", type=str,
                    default="uniform256,zipf128,repetitive90,fibonacci24,english_like",
                    help="Comma-separated dataset generator names for experiment 1")

    # Experiment 2 controls
    ap.add_argument("--exp2_min_kb", type=int, default=4, help="Experiment 2 min size in KB (power-of-two growth)")
    ap.add_argument("--exp2_max_mb", type=int, default=8, help="Experiment 2 max size in MB (power-of-two growth)")
    ap.add_argument("--exp2_generators", type=str, default="uniform256,zipf128,repetitive90",
                    help="Comma-separated dataset generator names for experiment 2")

    # Experiment 3 controls
    ap.add_argument("--exp3_max_bytes", type=int, default=64 * 1024, help="Experiment 3 max size in bytes (from 16)")

    args = ap.parse_args(argv)

    outdir = Path(args.outdir)
    safe_mkdir(outdir)

    rows: List[MetricRow] = []

    # Experiment 1: distributions (fixed size)
    if not args.no_exp1:
        fixed_size = max(1, args.exp1_size_kb) * 1024
        for gen_name in parse_csv_list(args.exp1_generators):
            for run_id in range(1, args.runs + 1):
                data = generate_dataset(gen_name, fixed_size, args.seed + run_id)
                rows.append(run_one(data, "exp1_distribution", gen_name, run_id))

    # Experiment 2: size scaling (multiple sizes, powers of 2)
    if not args.no_exp2:
        sizes = power_of_two_sizes(args.exp2_min_kb * 1024, max(1, args.exp2_max_mb) * 1024 * 1024)
        for gen_name in parse_csv_list(args.exp2_generators):
            for size_b in sizes:
                for run_id in range(1, args.runs + 1):
                    data = generate_dataset(gen_name, size_b, args.seed + 10_000 + size_b + run_id)
                    rows.append(run_one(data, "exp2_size_scaling", gen_name, run_id))

    # Experiment 3: header + stored tree against tiny inputs
    if not args.no_exp3:
        for size_b in power_of_two_sizes(16, args.exp3_max_bytes):
            for run_id in range(1, args.runs + 1):
                data = generate_dataset("english_like", size_b, args.seed + 200_000 + size_b + run_id)
                rows.append(run_one(data, "exp3_framing_overhead", "english_like", run_id))

    # Write raw and summary
    metrics_csv = outdir / "metrics.csv"
    summary_csv = outdir / "summary.csv"
    write_csv(metrics_csv, rows)
    group_summary(rows, summary_csv)

    if not args.no_plots:
        plot_experiment_1(rows, outdir)
        plot_experiment_2(rows, outdir)
        plot_experiment_3(rows, outdir)

    ok_rate = sum(r.correctness_ok for r in rows) / max(1, len(rows))
    print(f"Wrote {len(rows)} rows to {metrics_csv}")
    print(f"Wrote grouped summary to {summary_csv}")
    print(f"Correctness rate across all runs: {ok_rate:.3f}")
    if not args.no_plots:
        print("Charts saved in:", outdir.resolve())
    return 0 if all(r.correctness_ok for r in rows) else 2


if __name__ == "__main__":
    raise SystemExit(main())
