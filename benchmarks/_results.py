"""Result records shared by the s3-iam-policy benchmarks."""
from __future__ import annotations

import json
from pathlib import Path

RESULTS_DIR = Path(__file__).parent / "results"


def summarize(
    operation: str,
    iterations: int,
    total_seconds: float,
    latencies_ms: list[float] | None = None,
    memory_peak_mb: float = 0.0,
) -> dict[str, object]:
    """Build the common result record.

    ``p99_latency_ms`` is only computed when per-call latencies were
    recorded; throughput runs time the whole loop and report 0.0.
    """
    p99 = 0.0
    if latencies_ms:
        ordered = sorted(latencies_ms)
        p99 = ordered[min(int(len(ordered) * 0.99), len(ordered) - 1)]
    per_second = iterations / total_seconds if total_seconds > 0 else 0.0
    return {
        "operation": operation,
        "iterations": iterations,
        "total_seconds": round(total_seconds, 4),
        "ops_per_second": round(per_second, 1),
        "avg_latency_ms": round(total_seconds / iterations * 1000, 4) if iterations else 0.0,
        "p99_latency_ms": round(p99, 4),
        "memory_peak_mb": memory_peak_mb,
    }


def save(result: dict[str, object], filename: str) -> Path:
    """Write ``result`` as JSON under ``benchmarks/results/``."""
    RESULTS_DIR.mkdir(exist_ok=True)
    target = RESULTS_DIR / filename
    target.write_text(json.dumps(result, indent=2), encoding="utf-8")
    print(f"Saved {result['operation']} -> {target}")
    return target
