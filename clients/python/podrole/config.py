"""Configuration for building the assume-role policy and checker from the environment."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import List, Optional

from podrole.checker import Checker
from podrole.policy import (
    AssumeRolePolicy,
    CompositePolicy,
    NamespaceFinder,
    NamespacePermittedRolePolicy,
    RequestingAnnotatedRolePolicy,
    policies,
)
from podrole.resolver import ARNResolver, PrefixResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PolicyConfig:
    """Settings that select and tune the assume-role policies.

    Attributes:
        role_base_arn: Base ARN used to resolve bare role names, e.g.
            ``arn:aws:iam::111122223333:role/``.
        strict_namespace_regexp: Match namespace expressions against the whole
            role ARN. Disabling it falls back to substring matching.
        require_annotated_role: Only allow pods to request the role they are
            annotated with.
        require_namespace_permission: Only allow roles permitted by the pod's
            namespace.
        evaluation_timeout: Seconds allowed for a single check, or ``None``
            for no limit.
    """

    role_base_arn: Optional[str] = None
    strict_namespace_regexp: bool = True
    require_annotated_role: bool = True
    require_namespace_permission: bool = True
    evaluation_timeout: Optional[float] = None


def _coerce_bool(value: Optional[str], default: bool) -> bool:
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    return default


def _coerce_timeout(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return None
    try:
        timeout = float(value)
    except ValueError:
        logger.warning("ignoring invalid PODROLE_EVALUATION_TIMEOUT %r", value)
        return None
    return timeout if timeout > 0 else None


def load_policy_config() -> PolicyConfig:
    """Load policy configuration from ``PODROLE_*`` environment variables."""

    base_arn = os.environ.get("PODROLE_ROLE_BASE_ARN") or None
    return PolicyConfig(
        role_base_arn=base_arn,
        strict_namespace_regexp=_coerce_bool(
            os.environ.get("PODROLE_STRICT_NAMESPACE_REGEXP"), True
        ),
        require_annotated_role=_coerce_bool(
            os.environ.get("PODROLE_REQUIRE_ANNOTATED_ROLE"), True
        ),
        require_namespace_permission=_coerce_bool(
            os.environ.get("PODROLE_REQUIRE_NAMESPACE_PERMISSION"), True
        ),
        evaluation_timeout=_coerce_timeout(os.environ.get("PODROLE_EVALUATION_TIMEOUT")),
    )


def build_policy(
    config: PolicyConfig,
    namespaces: NamespaceFinder,
    resolver: Optional[ARNResolver] = None,
) -> CompositePolicy:
    """Compose the policies enabled by ``config``.

    Args:
        config: The loaded configuration.
        namespaces: Finder used by the namespace permission policy.
        resolver: Role resolver. Defaults to a :class:`PrefixResolver` over
            ``config.role_base_arn``.

    Raises:
        ValueError: When no resolver is given and ``role_base_arn`` is not
            configured.
    """
    if resolver is None:
        if not config.role_base_arn:
            raise ValueError("role_base_arn is required when no resolver is supplied")
        resolver = PrefixResolver(config.role_base_arn)

    members: List[AssumeRolePolicy] = []
    if config.require_annotated_role:
        members.append(RequestingAnnotatedRolePolicy(resolver))
    if config.require_namespace_permission:
        if not config.strict_namespace_regexp:
            logger.warning(
                "namespace policy expressions use substring matching; "
                "enable strict matching to require a full role ARN match"
            )
        members.append(
            NamespacePermittedRolePolicy(
                namespaces, resolver, strict=config.strict_namespace_regexp
            )
        )

    return policies(*members)


def build_checker(
    config: PolicyConfig,
    namespaces: NamespaceFinder,
    resolver: Optional[ARNResolver] = None,
) -> Checker:
    """Create a Checker for the policy enabled by ``config``.

    The checker applies ``config.evaluation_timeout`` to every check.

    Args:
        config: The loaded configuration.
        namespaces: Finder used by the namespace permission policy.
        resolver: Role resolver, as for :func:`build_policy`.
    """
    policy = build_policy(config, namespaces, resolver)
    return Checker(policy, timeout=config.evaluation_timeout)
