"""
podrole type definitions.

This module provides the values passed through a policy evaluation: the
canonical role identity, the decision, and the cluster objects read by the
policies. All of them are immutable and built fresh for every request.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping, NewType

# Type aliases for clarity
AnnotationKey = NewType("AnnotationKey", str)
"""A Kubernetes annotation key (e.g., 'iam.amazonaws.com/role')."""

ANNOTATION_ROLE_KEY = AnnotationKey("iam.amazonaws.com/role")
"""Pod annotation naming the single role the pod may request."""

ANNOTATION_PERMITTED_KEY = AnnotationKey("iam.amazonaws.com/permitted")
"""Namespace annotation holding the permitted role expression."""


def _frozen_annotations(annotations: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(annotations))


@dataclass(frozen=True, slots=True, eq=False)
class Identity:
    """A canonical IAM role identity.

    Attributes:
        name: The role name, including any path (e.g., 'team/readonly').
        arn: The fully-qualified role ARN.

    Two identities are equal when their ARNs are equal, whatever form the
    role was requested in.

    Example:
        >>> a = Identity(name="readonly", arn="arn:aws:iam::111:role/readonly")
        >>> b = Identity(name="/readonly", arn="arn:aws:iam::111:role/readonly")
        >>> a.equals(b)
        True
    """

    name: str
    arn: str

    def equals(self, other: "Identity") -> bool:
        return self.arn == other.arn

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Identity):
            return NotImplemented
        return self.equals(other)

    def __hash__(self) -> int:
        return hash(self.arn)


@dataclass(frozen=True, slots=True)
class Decision:
    """The result of an assume-role check.

    Attributes:
        allowed: Whether the pod may assume the role.
        explanation: Why the role was forbidden. Always empty when allowed
            and never empty when denied.

    Example:
        >>> decision = Decision.deny("requested 'admin' but annotated with 'readonly', forbidden")
        >>> if not decision.allowed:
        ...     print(decision.explanation)
        requested 'admin' but annotated with 'readonly', forbidden
    """

    allowed: bool
    explanation: str = ""

    def __post_init__(self) -> None:
        if self.allowed and self.explanation:
            raise ValueError("an allowed decision carries no explanation")
        if not self.allowed and not self.explanation:
            raise ValueError("a denied decision requires an explanation")

    @classmethod
    def allow(cls) -> "Decision":
        return cls(allowed=True)

    @classmethod
    def deny(cls, reason: str) -> "Decision":
        return cls(allowed=False, explanation=reason)

    def __bool__(self) -> bool:
        return self.allowed


@dataclass(frozen=True, slots=True)
class Pod:
    """The requesting workload.

    Attributes:
        name: The pod name.
        namespace: The namespace the pod runs in.
        annotations: The pod's annotations.
    """

    name: str
    namespace: str
    annotations: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "annotations", _frozen_annotations(self.annotations))


@dataclass(frozen=True, slots=True)
class Namespace:
    """A namespace and its annotations."""

    name: str
    annotations: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "annotations", _frozen_annotations(self.annotations))

    @property
    def permitted_expression(self) -> str:
        return self.annotations.get(ANNOTATION_PERMITTED_KEY, "")


def pod_role(pod: Pod) -> str:
    """Return the role the pod is annotated with, or '' when it has none."""
    return pod.annotations.get(ANNOTATION_ROLE_KEY, "")
