"""Benchmark: Policy evaluation throughput, decisions per second.

Measures how many Policy.is_allowed() calls complete per second against a
policy mixing wildcard resources, a policy variable, an IP condition and an
explicit deny.
"""
from __future__ import annotations

import sys
import time
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from _results import save, summarize
from s3_iam_policy.policies.policy import Policy
from s3_iam_policy.policies.request import AuthorizationRequest

_ITERATIONS: int = 10_000

_POLICY_DOCUMENT: dict[str, object] = {
    "Version": "2012-10-17",
    "Statement": [
        {
            "Sid": "HomeDirectories",
            "Effect": "Allow",
            "Action": ["s3:GetObject", "s3:PutObject", "s3:DeleteObject"],
            "Resource": ["arn:aws:s3:::home/${aws:username}/*"],
        },
        {
            "Sid": "OfficeReads",
            "Effect": "Allow",
            "Action": ["s3:GetObject"],
            "Resource": ["arn:aws:s3:::shared/*"],
            "Condition": {"IpAddress": {"aws:SourceIp": ["10.0.0.0/8", "192.168.0.0/16"]}},
        },
        {
            "Sid": "NoAuditDeletes",
            "Effect": "Deny",
            "Action": ["s3:DeleteObject"],
            "Resource": ["arn:aws:s3:::*/audit/*"],
        },
    ],
}


def _make_requests() -> list[AuthorizationRequest]:
    """Build a fixed mix of allowed and denied requests."""
    attrs = {"username": ["alice"], "SourceIp": ["192.168.4.20"]}
    return [
        AuthorizationRequest("s3:GetObject", "home", "alice/notes.txt", attrs=attrs),
        AuthorizationRequest("s3:GetObject", "home", "bob/notes.txt", attrs=attrs),
        AuthorizationRequest("s3:GetObject", "shared", "report.pdf", attrs=attrs),
        AuthorizationRequest("s3:DeleteObject", "home", "alice/audit/log", attrs=attrs),
    ]


def bench_policy_evaluation_throughput() -> dict[str, object]:
    """Count Policy.is_allowed() decisions per second over a fixed request mix."""
    policy = Policy.parse(_POLICY_DOCUMENT)
    policy.validate()
    requests = _make_requests()

    start = time.perf_counter()
    for i in range(_ITERATIONS):
        policy.is_allowed(requests[i % len(requests)])
    result = summarize("policy_evaluation_throughput", _ITERATIONS, time.perf_counter() - start)
    print(
        f"[bench_policy_throughput] {result['ops_per_second']:,.0f} decisions/sec, "
        f"avg {result['avg_latency_ms']:.4f} ms"
    )
    return result


def run_benchmark() -> dict[str, object]:
    return bench_policy_evaluation_throughput()


if __name__ == "__main__":
    save(run_benchmark(), "throughput_baseline.json")
