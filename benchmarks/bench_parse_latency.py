"""Benchmark: Policy parse-and-validate latency, p99 per document.

Measures the per-call latency of Policy.parse() followed by validate() for
the consoleAdmin canned policy and a condition-heavy document.
"""
from __future__ import annotations

import json
import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from _results import save, summarize
from s3_iam_policy.policies.policy import Policy
from s3_iam_policy.templates.canned_policies import get_template

_WARMUP: int = 50
_ITERATIONS: int = 2_000

_CONDITION_HEAVY = json.dumps(
    {
        "Version": "2012-10-17",
        "Statement": [
            {
                "Effect": "Allow",
                "Action": ["s3:PutObject"],
                "Resource": ["arn:aws:s3:::uploads/*"],
                "Condition": {
                    "Bool": {"aws:SecureTransport": "true"},
                    "StringEquals": {"s3:x-amz-server-side-encryption": "AES256"},
                    "StringLike": {"aws:UserAgent": ["aws-cli/*", "boto3/*"]},
                    "DateLessThan": {"aws:CurrentTime": "2030-01-01T00:00:00Z"},
                    "IpAddress": {"aws:SourceIp": "10.0.0.0/8"},
                },
            }
        ],
    }
)


def bench_policy_parse_latency() -> dict[str, object]:
    """Time Policy.parse() plus validate() call by call."""
    documents = [get_template("consoleAdmin"), _CONDITION_HEAVY]
    for i in range(_WARMUP):
        Policy.parse(documents[i % len(documents)]).validate()

    samples: list[float] = []
    for i in range(_ITERATIONS):
        started = time.perf_counter()
        Policy.parse(documents[i % len(documents)]).validate()
        samples.append((time.perf_counter() - started) * 1000)

    result = summarize("policy_parse_latency", _ITERATIONS, sum(samples) / 1000, samples)
    print(
        f"[bench_parse_latency] p99 {result['p99_latency_ms']:.4f} ms, "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    return bench_policy_parse_latency()


if __name__ == "__main__":
    save(run_benchmark(), "latency_baseline.json")
