#!/usr/bin/env python3
"""Example: Policy documents, canned policies and loading errors

Demonstrates the canned policy library, loading YAML documents through
PolicyParser, merging policies and reporting invalid documents.

Usage:
    python examples/02_policy_documents.py

Requirements:
    pip install s3-iam-policy
"""
from __future__ import annotations

import s3_iam_policy as iam
from s3_iam_policy import (
    AuthorizationRequest,
    EngineConfig,
    PolicyLoadError,
    PolicyParser,
    get_policy,
    list_templates,
    policies_from_claims,
)

_YAML_POLICY = """\
Version: "2012-10-17"
Statement:
  - Sid: HomeDirectory
    Effect: Allow
    Action: [s3:GetObject, s3:PutObject]
    Resource: "arn:aws:s3:::home/${aws:username}/*"
"""


def main() -> None:
    print(f"s3-iam-policy version: {iam.__version__}")

    # Step 1: Canned policies
    print(f"Canned policies: {', '.join(list_templates())}")

    # Step 2: Policies named in an identity token
    claims = {"policy": "readonly,diagnostics"}
    names = sorted(policies_from_claims(claims, "policy") or set())
    print(f"Policies from claims: {names}")
    effective = iam.Policy()
    for name in names:
        effective = effective.merge(get_policy(name))

    # Step 3: A YAML policy with a policy variable
    parser = PolicyParser()
    home = parser.parse_string(_YAML_POLICY, fmt="yaml", source="home.yaml")
    effective = effective.merge(home)
    print(f"Effective policy: {len(effective.statements)} statements")

    attrs = {"username": ["alice"]}
    for request in [
        AuthorizationRequest("s3:PutObject", "home", "alice/todo.txt", attrs=attrs),
        AuthorizationRequest("s3:PutObject", "home", "bob/todo.txt", attrs=attrs),
        AuthorizationRequest("admin:ServerTrace"),
    ]:
        verdict = "ALLOW" if effective.is_allowed(request) else "DENY"
        print(f"  [{verdict}] {request.action} {request.bucket}/{request.object}")

    # Step 4: Invalid documents raise PolicyLoadError naming the source
    broken = '{"Version": "2012-10-17", "Statement": [{"Effect": "Allow", "Action": "s3:Teleport"}]}'
    try:
        parser.parse_string(broken, source="broken.json")
    except PolicyLoadError as exc:
        print(f"\nRejected: {exc}")

    # Step 5: A relaxed parser drops unknown fields instead
    relaxed = PolicyParser(config=EngineConfig(strict_fields=False))
    policy = relaxed.parse_dict(
        {
            "Comment": "generated by a template tool",
            "Statement": [{"Effect": "Allow", "Action": "s3:GetObject", "Resource": "b1b/*"}],
        },
        source="generated.json",
    )
    print(f"Relaxed load: version={policy.version!r}, statements={len(policy.statements)}")


if __name__ == "__main__":
    main()
