"""Benchmark: Memory usage of repeated policy evaluation.

Uses tracemalloc to measure memory allocated while parsing the canned
policies and evaluating a batch of requests against their merge.
"""
from __future__ import annotations

import sys
import time
import tracemalloc
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from _results import save, summarize
from s3_iam_policy.policies.policy import Policy
from s3_iam_policy.policies.request import AuthorizationRequest
from s3_iam_policy.templates.canned_policies import get_policy, list_templates

_ITERATIONS: int = 500


def bench_evaluation_memory_usage() -> dict[str, object]:
    """Measure allocations retained by merging the canned policies and evaluating against them.

    Returns
    -------
    dict with the common result keys plus ``peak_memory_kb``.
    """
    tracemalloc.start()
    before = tracemalloc.take_snapshot()
    started = time.perf_counter()

    merged = Policy()
    for name in list_templates():
        merged = merged.merge(get_policy(name))
    requests = [
        AuthorizationRequest("s3:GetObject", "photos", "2024/cat.jpg"),
        AuthorizationRequest("s3:ListBucket", "photos", attrs={"prefix": ["2024/"]}),
        AuthorizationRequest("admin:ServerInfo", attrs={"SourceIp": ["10.0.0.1"]}),
    ]
    for i in range(_ITERATIONS):
        merged.evaluate(requests[i % len(requests)])

    elapsed = time.perf_counter() - started
    after = tracemalloc.take_snapshot()
    tracemalloc.stop()

    grown = sum(stat.size_diff for stat in after.compare_to(before, "lineno") if stat.size_diff > 0)
    peak_kb = round(grown / 1024, 2)
    result = summarize(
        "evaluation_memory_usage", _ITERATIONS, elapsed, memory_peak_mb=round(peak_kb / 1024, 4)
    )
    result["peak_memory_kb"] = peak_kb
    print(f"[bench_memory_usage] {peak_kb:.2f} KB retained over {_ITERATIONS} evaluations")
    return result


def run_benchmark() -> dict[str, object]:
    return bench_evaluation_memory_usage()


if __name__ == "__main__":
    save(run_benchmark(), "memory_baseline.json")
