"""
podrole - decides whether a pod may assume an AWS IAM role.

A credential broker that hands out temporary AWS credentials to pods asks
podrole first. Policies compare the requested role with the role the pod is
annotated with and with the roles its namespace permits, and answer with a
Decision that explains any denial.

Example:
    >>> from podrole import Pod, PolicyConfig, build_checker
    >>> checker = build_checker(PolicyConfig(role_base_arn=base), finder)
    >>> decision = await checker.check(
    ...     role="readonly",
    ...     pod=Pod(name="web-0", namespace="web", annotations=annotations),
    ... )

Note:
    Fetching pods and namespaces and issuing credentials are left to the
    broker. podrole only consumes them through the NamespaceFinder and
    ARNResolver protocols.
"""

from podrole.types import (
    ANNOTATION_PERMITTED_KEY,
    ANNOTATION_ROLE_KEY,
    Decision,
    Identity,
    Namespace,
    Pod,
    pod_role,
)
from podrole.errors import (
    ExpressionError,
    NamespaceLookupError,
    PolicyError,
    ResolutionError,
)
from podrole.resolver import ARNResolver, PrefixResolver
from podrole.policy import (
    AssumeRolePolicy,
    CompositePolicy,
    NamespaceFinder,
    NamespacePermittedRolePolicy,
    RequestingAnnotatedRolePolicy,
    policies,
)
from podrole.config import PolicyConfig, build_checker, build_policy, load_policy_config
from podrole.checker import Checker

__all__ = [
    "ANNOTATION_PERMITTED_KEY",
    "ANNOTATION_ROLE_KEY",
    "ARNResolver",
    "AssumeRolePolicy",
    "Checker",
    "CompositePolicy",
    "Decision",
    "ExpressionError",
    "Identity",
    "Namespace",
    "NamespaceFinder",
    "NamespaceLookupError",
    "NamespacePermittedRolePolicy",
    "Pod",
    "PolicyConfig",
    "PolicyError",
    "PrefixResolver",
    "RequestingAnnotatedRolePolicy",
    "ResolutionError",
    "build_checker",
    "build_policy",
    "load_policy_config",
    "pod_role",
    "policies",
]

__version__ = "0.1.0"
