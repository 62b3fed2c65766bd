"""Condition key catalog.

A condition key names one request attribute a policy can test, such as
``aws:SourceIp`` or ``s3:prefix``.  The request layer supplies attribute
values keyed by the key's *bare name* (namespace prefix stripped), e.g.
``SourceIp`` or ``prefix``.

The catalog is a fixed vocabulary: keys outside :data:`ALL_SUPPORTED_KEYS`
are rejected when a policy is parsed.

See https://docs.aws.amazon.com/IAM/latest/UserGuide/list_amazons3.html for
the meaning of the individual keys.

Example
-------
>>> AWS_SOURCE_IP.bare_name
'SourceIp'
>>> AWS_SOURCE_IP.variable_token
'${aws:SourceIp}'
>>> is_valid_key("s3:prefix")
True
"""
from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

_NAMESPACE_PREFIXES: tuple[str, ...] = ("aws:", "jwt:", "ldap:", "s3:")

# RFC 7230 token characters; header names containing anything else are left
# untouched by canonicalisation.
_TOKEN_RE = re.compile(r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+")


@dataclass(frozen=True, order=True)
class ConditionKey:
    """A named request attribute usable in a ``Condition`` block.

    Attributes
    ----------
    name:
        The full key name including its namespace, e.g. ``"aws:SourceIp"``.
    """

    name: str

    @property
    def namespace(self) -> str:
        """Return the namespace prefix without the colon (``"aws"``, ``"s3"`` ...)."""
        head, sep, _ = self.name.partition(":")
        return head if sep else ""

    @property
    def bare_name(self) -> str:
        """Return the key name with its namespace prefix stripped."""
        return bare_name(self.name)

    @property
    def variable_token(self) -> str:
        """Return the policy-variable form of this key, ``${<name>}``."""
        return variable_token(self.name)

    def is_valid(self) -> bool:
        """Return True if the key belongs to the supported catalog."""
        return is_valid_key(self.name)

    def __str__(self) -> str:
        return self.name


def bare_name(name: str) -> str:
    """Strip one namespace prefix (``aws:``, ``jwt:``, ``ldap:``, ``s3:``) from *name*."""
    for prefix in _NAMESPACE_PREFIXES:
        if name.startswith(prefix):
            return name[len(prefix):]
    return name


def variable_token(name: str) -> str:
    """Return the ``${name}`` substitution token for a key name."""
    return "${" + name + "}"


def canonical_header_key(name: str) -> str:
    """Return the MIME-canonical form of a header name.

    The first letter and every letter following a hyphen are upper-cased,
    all other letters lower-cased (``x-amz-copy-source`` becomes
    ``X-Amz-Copy-Source``).  Names that are not valid header tokens are
    returned unchanged.
    """
    if not _TOKEN_RE.fullmatch(name):
        return name
    chars: list[str] = []
    upper = True
    for char in name:
        chars.append(char.upper() if upper else char.lower())
        upper = char == "-"
    return "".join(chars)


def lookup_values(
    key: ConditionKey,
    attrs: Mapping[str, Sequence[str]],
) -> Sequence[str] | None:
    """Return the attribute values supplied for *key*, or ``None`` when absent.

    The canonical header form of the bare name is tried first, then the
    bare name as-is.
    """
    name = key.bare_name
    values = attrs.get(canonical_header_key(name))
    if values is None:
        values = attrs.get(name)
    return values


# ---------------------------------------------------------------------------
# S3 keys
# ---------------------------------------------------------------------------

# x-amz-copy-source header, PutObject only.
S3X_AMZ_COPY_SOURCE = ConditionKey("s3:x-amz-copy-source")
# x-amz-server-side-encryption header, PutObject only.
S3X_AMZ_SERVER_SIDE_ENCRYPTION = ConditionKey("s3:x-amz-server-side-encryption")
S3X_AMZ_SERVER_SIDE_ENCRYPTION_CUSTOMER_ALGORITHM = ConditionKey(
    "s3:x-amz-server-side-encryption-customer-algorithm"
)
# x-amz-metadata-directive header, PutObject only.
S3X_AMZ_METADATA_DIRECTIVE = ConditionKey("s3:x-amz-metadata-directive")
# Static content-sha256 for all calls of an action.
S3X_AMZ_CONTENT_SHA256 = ConditionKey("s3:x-amz-content-sha256")
# x-amz-storage-class header, PutObject only.
S3X_AMZ_STORAGE_CLASS = ConditionKey("s3:x-amz-storage-class")
# LocationConstraint element of CreateBucket.
S3_LOCATION_CONSTRAINT = ConditionKey("s3:LocationConstraint")
# ListBucket query parameters.
S3_PREFIX = ConditionKey("s3:prefix")
S3_DELIMITER = ConditionKey("s3:delimiter")
S3_MAX_KEYS = ConditionKey("s3:max-keys")
# Limits object-version scoped actions to a specific version.
S3_VERSION_ID = ConditionKey("s3:versionid")
# Object lock keys.
S3_OBJECT_LOCK_REMAINING_RETENTION_DAYS = ConditionKey("s3:object-lock-remaining-retention-days")
S3_OBJECT_LOCK_MODE = ConditionKey("s3:object-lock-mode")
S3_OBJECT_LOCK_RETAIN_UNTIL_DATE = ConditionKey("s3:object-lock-retain-until-date")
S3_OBJECT_LOCK_LEGAL_HOLD = ConditionKey("s3:object-lock-legal-hold")
# Signature version and authentication method of the request.
S3_SIGNATURE_VERSION = ConditionKey("s3:signatureversion")
S3_AUTH_TYPE = ConditionKey("s3:authType")

# ---------------------------------------------------------------------------
# AWS global keys
# ---------------------------------------------------------------------------

AWS_REFERER = ConditionKey("aws:Referer")
# Client address, not that of intermediate proxies.
AWS_SOURCE_IP = ConditionKey("aws:SourceIp")
AWS_USER_AGENT = ConditionKey("aws:UserAgent")
AWS_SECURE_TRANSPORT = ConditionKey("aws:SecureTransport")
AWS_CURRENT_TIME = ConditionKey("aws:CurrentTime")
AWS_EPOCH_TIME = ConditionKey("aws:EpochTime")
# "User" or "Anonymous".
AWS_PRINCIPAL_TYPE = ConditionKey("aws:principaltype")
AWS_USER_ID = ConditionKey("aws:userid")
AWS_USERNAME = ConditionKey("aws:username")

# ---------------------------------------------------------------------------
# LDAP keys
# ---------------------------------------------------------------------------

LDAP_USER = ConditionKey("ldap:user")
LDAP_USERNAME = ConditionKey("ldap:username")

# ---------------------------------------------------------------------------
# JWT claim keys (https://www.iana.org/assignments/jwt/jwt.xhtml#claims)
# ---------------------------------------------------------------------------

JWT_SUB = ConditionKey("jwt:sub")
JWT_ISS = ConditionKey("jwt:iss")
JWT_AUD = ConditionKey("jwt:aud")
JWT_JTI = ConditionKey("jwt:jti")
JWT_UPN = ConditionKey("jwt:upn")
JWT_NAME = ConditionKey("jwt:name")
JWT_GROUPS = ConditionKey("jwt:groups")
JWT_GIVEN_NAME = ConditionKey("jwt:given_name")
JWT_FAMILY_NAME = ConditionKey("jwt:family_name")
JWT_MIDDLE_NAME = ConditionKey("jwt:middle_name")
JWT_NICK_NAME = ConditionKey("jwt:nickname")
JWT_PREF_USERNAME = ConditionKey("jwt:preferred_username")
JWT_PROFILE = ConditionKey("jwt:profile")
JWT_PICTURE = ConditionKey("jwt:picture")
JWT_WEBSITE = ConditionKey("jwt:website")
JWT_EMAIL = ConditionKey("jwt:email")
JWT_GENDER = ConditionKey("jwt:gender")
JWT_BIRTHDATE = ConditionKey("jwt:birthdate")
JWT_PHONE_NUMBER = ConditionKey("jwt:phone_number")
JWT_ADDRESS = ConditionKey("jwt:address")
JWT_SCOPE = ConditionKey("jwt:scope")
JWT_CLIENT_ID = ConditionKey("jwt:client_id")

JWT_KEYS: tuple[ConditionKey, ...] = (
    JWT_SUB,
    JWT_ISS,
    JWT_AUD,
    JWT_JTI,
    JWT_UPN,
    JWT_NAME,
    JWT_GROUPS,
    JWT_GIVEN_NAME,
    JWT_FAMILY_NAME,
    JWT_MIDDLE_NAME,
    JWT_NICK_NAME,
    JWT_PREF_USERNAME,
    JWT_PROFILE,
    JWT_PICTURE,
    JWT_WEBSITE,
    JWT_EMAIL,
    JWT_GENDER,
    JWT_BIRTHDATE,
    JWT_PHONE_NUMBER,
    JWT_ADDRESS,
    JWT_SCOPE,
    JWT_CLIENT_ID,
)

# ---------------------------------------------------------------------------
# Catalogs
# ---------------------------------------------------------------------------

# Keys valid for every action; also the keys available as ${...} policy
# variables in resources and string operands.
COMMON_KEYS: tuple[ConditionKey, ...] = (
    AWS_REFERER,
    AWS_SOURCE_IP,
    AWS_USER_AGENT,
    AWS_SECURE_TRANSPORT,
    AWS_CURRENT_TIME,
    AWS_EPOCH_TIME,
    AWS_PRINCIPAL_TYPE,
    AWS_USER_ID,
    AWS_USERNAME,
    S3X_AMZ_CONTENT_SHA256,
    S3_SIGNATURE_VERSION,
    S3_AUTH_TYPE,
    LDAP_USER,
    LDAP_USERNAME,
    *JWT_KEYS,
)

ALL_SUPPORTED_KEYS: frozenset[ConditionKey] = frozenset(
    (
        S3X_AMZ_COPY_SOURCE,
        S3X_AMZ_SERVER_SIDE_ENCRYPTION,
        S3X_AMZ_SERVER_SIDE_ENCRYPTION_CUSTOMER_ALGORITHM,
        S3X_AMZ_METADATA_DIRECTIVE,
        S3X_AMZ_STORAGE_CLASS,
        S3_LOCATION_CONSTRAINT,
        S3_PREFIX,
        S3_DELIMITER,
        S3_VERSION_ID,
        S3_MAX_KEYS,
        S3_OBJECT_LOCK_REMAINING_RETENTION_DAYS,
        S3_OBJECT_LOCK_MODE,
        S3_OBJECT_LOCK_RETAIN_UNTIL_DATE,
        S3_OBJECT_LOCK_LEGAL_HOLD,
        *COMMON_KEYS,
    )
)

# Admin (control-plane) statements may only test these.
ALL_SUPPORTED_ADMIN_KEYS: frozenset[ConditionKey] = frozenset(
    (
        AWS_REFERER,
        AWS_SOURCE_IP,
        AWS_USER_AGENT,
        AWS_SECURE_TRANSPORT,
        AWS_CURRENT_TIME,
        AWS_EPOCH_TIME,
        AWS_PRINCIPAL_TYPE,
        AWS_USER_ID,
        AWS_USERNAME,
    )
)

_KEYS_BY_NAME: dict[str, ConditionKey] = {k.name: k for k in ALL_SUPPORTED_KEYS}


def substitute(
    text: str,
    attrs: Mapping[str, Sequence[str]],
    variables: Sequence[ConditionKey] = COMMON_KEYS,
) -> str:
    """Replace ``${key}`` policy variables in *text* with request values.

    Each token is replaced by the first non-empty value the request carries
    for that key.  Tokens for keys the request does not carry are left as-is.

    Example
    -------
    >>> substitute("home/${aws:username}/*", {"username": ["alice"]})
    'home/alice/*'
    """
    if "${" not in text:
        return text
    for key in variables:
        token = key.variable_token
        if token not in text:
            continue
        values = lookup_values(key, attrs)
        if not values:
            continue
        replacement = next((v for v in values if v), None)
        if replacement is not None:
            text = text.replace(token, replacement)
    return text


def is_valid_key(name: str) -> bool:
    """Return True if *name* is a supported condition key name."""
    return name in _KEYS_BY_NAME


def key_by_name(name: str) -> ConditionKey | None:
    """Return the catalog key called *name*, or ``None`` if unknown."""
    return _KEYS_BY_NAME.get(name)
