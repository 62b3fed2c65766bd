#!/usr/bin/env python3
"""Example: Quickstart for s3-iam-policy

Minimal working example: parse a policy, validate it and decide a few
requests.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install s3-iam-policy
"""
from __future__ import annotations

import s3_iam_policy as iam


def main() -> None:
    print(f"s3-iam-policy version: {iam.__version__}")

    # Step 1: Parse and validate a policy document
    policy = iam.Policy.parse("""
    {
      "Version": "2012-10-17",
      "Statement": [
        {"Sid": "ReadWrite", "Effect": "Allow", "Action": ["s3:*"],
         "Resource": ["arn:aws:s3:::mybucket/*"]},
        {"Sid": "KeepSecrets", "Effect": "Deny", "Action": ["s3:DeleteObject"],
         "Resource": ["arn:aws:s3:::mybucket/secret/*"]}
      ]
    }
    """)
    policy.validate()
    print(f"Policy ready: {len(policy.statements)} statements")

    # Step 2: Decide requests
    requests = [
        iam.AuthorizationRequest("s3:GetObject", "mybucket", "secret/plans.txt"),
        iam.AuthorizationRequest("s3:DeleteObject", "mybucket", "secret/plans.txt"),
        iam.AuthorizationRequest("s3:DeleteObject", "mybucket", "tmp/scratch.txt"),
        iam.AuthorizationRequest("s3:GetObject", "otherbucket", "a.txt"),
    ]

    print("\nDecisions:")
    for request in requests:
        result = policy.evaluate(request)
        print(f"  [{result.decision.value}] {request.action} {request.resource_path}")
        for statement in result.deciding_statements:
            print(f"    decided by: {statement.sid}")


if __name__ == "__main__":
    main()
