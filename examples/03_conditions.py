#!/usr/bin/env python3
"""Example: Condition operators

Builds a policy whose statements are gated by IpAddress, Bool, Null,
NumericLessThanEquals and StringLike conditions and shows how the request
attribute map drives each one.

Usage:
    python examples/03_conditions.py

Requirements:
    pip install s3-iam-policy
"""
from __future__ import annotations

import s3_iam_policy as iam
from s3_iam_policy import AuthorizationRequest, Policy


def main() -> None:
    print(f"s3-iam-policy version: {iam.__version__}")

    policy = Policy.parse(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Sid": "OfficeOverTls",
                    "Effect": "Allow",
                    "Action": "s3:GetObject",
                    "Resource": "arn:aws:s3:::reports/*",
                    "Condition": {
                        "IpAddress": {"aws:SourceIp": "192.168.1.0/24"},
                        "Bool": {"aws:SecureTransport": "true"},
                    },
                },
                {
                    "Sid": "SmallListingsOfPublic",
                    "Effect": "Allow",
                    "Action": "s3:ListBucket",
                    "Resource": "arn:aws:s3:::reports",
                    "Condition": {
                        "StringLike": {"s3:prefix": "public/*"},
                        "NumericLessThanEquals": {"s3:max-keys": 100},
                    },
                },
                {
                    "Sid": "NoUnprefixedListings",
                    "Effect": "Deny",
                    "Action": "s3:ListBucket",
                    "Resource": "arn:aws:s3:::reports",
                    "Condition": {"Null": {"s3:prefix": True}},
                },
            ],
        }
    )
    policy.validate()
    print("Conditions:")
    print(policy.to_json(indent=2))

    cases = {
        "office, TLS": AuthorizationRequest(
            "s3:GetObject", "reports", "q3.pdf",
            attrs={"SourceIp": ["192.168.1.20"], "SecureTransport": ["true"]},
        ),
        "office, plain HTTP": AuthorizationRequest(
            "s3:GetObject", "reports", "q3.pdf",
            attrs={"SourceIp": ["192.168.1.20"], "SecureTransport": ["false"]},
        ),
        "list public/, 50 keys": AuthorizationRequest(
            "s3:ListBucket", "reports",
            attrs={"prefix": ["public/2024"], "max-keys": ["50"]},
        ),
        "list public/, 1000 keys": AuthorizationRequest(
            "s3:ListBucket", "reports",
            attrs={"prefix": ["public/2024"], "max-keys": ["1000"]},
        ),
        "list without prefix, owner": AuthorizationRequest(
            "s3:ListBucket", "reports", is_owner=True,
        ),
    }

    print("\nDecisions:")
    for label, request in cases.items():
        result = policy.evaluate(request)
        print(f"  {label:<28} {result.decision.value}")


if __name__ == "__main__":
    main()
