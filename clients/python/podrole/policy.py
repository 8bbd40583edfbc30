"""
Assume-role policies.

Every policy implements :class:`AssumeRolePolicy`: given the role a pod
requested, decide whether the pod may assume it. Policies are combined with
:func:`policies`, which requires all of them to allow.

Evaluation is a coroutine. Lookups performed by a policy run in the
caller's task, so cancelling that task (or bounding it with
``asyncio.timeout``) aborts the evaluation with ``CancelledError`` or
``TimeoutError`` rather than a denial.

Example:
    >>> policy = policies(
    ...     RequestingAnnotatedRolePolicy(resolver),
    ...     NamespacePermittedRolePolicy(finder, resolver, strict=True),
    ... )
    >>> decision = await policy.evaluate("readonly", pod)
"""

import logging
from typing import Protocol, Sequence

import re2

from podrole.errors import ExpressionError
from podrole.resolver import ARNResolver
from podrole.types import Decision, Namespace, Pod, pod_role

logger = logging.getLogger(__name__)

EMPTY_EXPRESSION = "(empty)"


class AssumeRolePolicy(Protocol):
    """Checks whether a pod may assume the role it requested.

    Implementations return a :class:`~podrole.types.Decision` once they have
    evaluated the rule, and raise when they cannot evaluate it.
    """

    async def evaluate(self, role: str, pod: Pod) -> Decision: ...


class NamespaceFinder(Protocol):
    """Fetches namespaces from the cluster."""

    async def find_namespace(self, name: str) -> Namespace: ...


class CompositePolicy:
    """Requires every member policy to allow the role.

    Members are evaluated in order and evaluation stops at the first denial
    or the first exception; later members are not invoked. A composite with
    no members allows every request: it is a conjunction over nothing.
    """

    def __init__(self, members: Sequence[AssumeRolePolicy]) -> None:
        self._members = tuple(members)
        if not self._members:
            logger.warning("composite policy has no members and will allow every role")

    @property
    def members(self) -> tuple[AssumeRolePolicy, ...]:
        return self._members

    async def evaluate(self, role: str, pod: Pod) -> Decision:
        for member in self._members:
            decision = await member.evaluate(role, pod)
            if not decision.allowed:
                logger.debug(
                    "%s denied role %r for pod %s/%s",
                    type(member).__name__,
                    role,
                    pod.namespace,
                    pod.name,
                )
                return decision
        return Decision.allow()

    def __repr__(self) -> str:
        return f"CompositePolicy({list(self._members)!r})"


def policies(*members: AssumeRolePolicy) -> CompositePolicy:
    """Create a policy that allows a role only when all ``members`` allow it."""
    return CompositePolicy(members)


class RequestingAnnotatedRolePolicy:
    """Allows a pod to request only the role it is annotated with.

    Both the annotated and the requested role are resolved before
    comparison, so ``readonly`` and ``arn:aws:iam::111:role/readonly`` are the
    same role under a matching resolver.
    """

    def __init__(self, resolver: ARNResolver) -> None:
        self._resolver = resolver

    async def evaluate(self, role: str, pod: Pod) -> Decision:
        annotated = self._resolver.resolve(pod_role(pod))
        requested = self._resolver.resolve(role)

        if annotated.equals(requested):
            return Decision.allow()

        return Decision.deny(
            f"requested '{role}' but annotated with '{annotated.name}', forbidden"
        )


class NamespacePermittedRolePolicy:
    """Allows a role only when the pod's namespace permits it.

    The namespace's ``iam.amazonaws.com/permitted`` annotation holds a regular
    expression matched against the requested role's ARN. A namespace without
    the annotation permits nothing. Expressions use RE2 syntax and match in
    linear time, so a namespace cannot stall evaluation with a backtracking
    expression.

    Args:
        namespaces: Finder used to fetch the pod's namespace.
        resolver: Resolver for the requested role.
        strict: Match the expression against the whole ARN. When false the
            expression may match anywhere in the ARN, so ``myrole`` also
            permits ``myrole-admin``; only use it for namespaces whose
            expressions already carry their own anchors.
    """

    def __init__(
        self,
        namespaces: NamespaceFinder,
        resolver: ARNResolver,
        *,
        strict: bool = True,
    ) -> None:
        self._namespaces = namespaces
        self._resolver = resolver
        self._strict = strict

    @property
    def strict(self) -> bool:
        return self._strict

    async def evaluate(self, role: str, pod: Pod) -> Decision:
        requested = self._resolver.resolve(role)
        namespace = await self._namespaces.find_namespace(pod.namespace)

        expression = namespace.permitted_expression
        if not expression:
            return Decision.deny(
                f"namespace policy expression '{EMPTY_EXPRESSION}' forbids role '{role}'"
            )

        try:
            pattern = re2.compile(expression)
        except re2.error as exc:
            raise ExpressionError(namespace.name, expression, str(exc)) from exc

        if self._strict:
            match = pattern.fullmatch(requested.arn)
        else:
            logger.debug(
                "unanchored match of namespace %s expression %r", namespace.name, expression
            )
            match = pattern.search(requested.arn)

        if match is None:
            return Decision.deny(
                f"namespace policy expression '{expression}' forbids role '{requested.arn}'"
            )
        return Decision.allow()
