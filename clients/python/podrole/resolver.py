"""
Role resolution.

Policies never compare raw role strings. A resolver turns whatever the pod
annotated or requested (a bare name, a path, or a full ARN) into an
:class:`~podrole.types.Identity` so that equivalent forms compare equal.
"""

from typing import Protocol

import re2

from podrole.errors import ResolutionError
from podrole.types import Identity

ARN_PREFIX = "arn:"
ROLE_RESOURCE_PREFIX = "role/"

# Characters IAM allows in role names and paths.
ROLE_NAME_PATTERN = re2.compile(r"[A-Za-z0-9_+=,.@/-]+")


class ARNResolver(Protocol):
    """Converts a role string into a canonical identity.

    Implementations must be pure functions of the role string and raise
    :class:`~podrole.errors.ResolutionError` for input they cannot resolve.
    """

    def resolve(self, role: str) -> Identity: ...


def _role_path_from_arn(role: str) -> str:
    # arn:partition:service:region:account-id:role/path/name
    parts = role.split(":", 5)
    if len(parts) != 6:
        raise ResolutionError(role, "arn must have 6 colon-separated sections")
    _, partition, service, _, account, resource = parts
    if not partition:
        raise ResolutionError(role, "arn has no partition")
    if service != "iam":
        raise ResolutionError(role, f"expected an iam arn, got service '{service}'")
    if not account:
        raise ResolutionError(role, "arn has no account id")
    if not resource.startswith(ROLE_RESOURCE_PREFIX):
        raise ResolutionError(role, "arn resource is not a role")
    return resource[len(ROLE_RESOURCE_PREFIX):]


def _check_role_name(role: str, name: str) -> None:
    if ROLE_NAME_PATTERN.fullmatch(name) is None:
        raise ResolutionError(role, "role name contains characters IAM does not allow")


class PrefixResolver:
    """Resolves role names against a base role ARN.

    Full ARNs are validated and used as-is; anything else is treated as a
    role name (optionally with a path) under ``base_arn``.

    Example:
        >>> resolver = PrefixResolver("arn:aws:iam::111:role/")
        >>> resolver.resolve("readonly").arn
        'arn:aws:iam::111:role/readonly'
        >>> resolver.resolve("arn:aws:iam::111:role/readonly").name
        'readonly'
    """

    def __init__(self, base_arn: str) -> None:
        if not base_arn.endswith("/"):
            base_arn = base_arn + "/"
        if not base_arn.startswith(ARN_PREFIX):
            raise ResolutionError(base_arn, "base arn must start with 'arn:'")
        # The base is a role ARN with an empty name.
        _role_path_from_arn(base_arn)
        self.base_arn = base_arn

    def resolve(self, role: str) -> Identity:
        if not role:
            raise ResolutionError(role, "role is empty")

        if role.startswith(ARN_PREFIX):
            name = _role_path_from_arn(role)
            if not name or name.endswith("/"):
                raise ResolutionError(role, "arn has no role name")
            _check_role_name(role, name)
            return Identity(name=name, arn=role)

        name = role.lstrip("/")
        if not name:
            raise ResolutionError(role, "role name is empty")
        _check_role_name(role, name)
        return Identity(name=name, arn=self.base_arn + name)

    def __repr__(self) -> str:
        return f"PrefixResolver({self.base_arn!r})"
