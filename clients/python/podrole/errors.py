"""Exceptions raised when a policy cannot be evaluated.

A forbidden role is never reported through these; it is a normal
:class:`~podrole.types.Decision` with ``allowed=False``.
"""

from typing import Optional


class PolicyError(Exception):
    """Base class for failures that prevent a policy from reaching a decision."""


class ResolutionError(PolicyError, ValueError):
    """Raised when a role string cannot be resolved to a canonical identity."""

    def __init__(self, role: str, reason: str) -> None:
        super().__init__(f"unable to resolve role '{role}': {reason}")
        self.role = role
        self.reason = reason


class NamespaceLookupError(PolicyError, LookupError):
    """Raised by namespace finders when a namespace cannot be fetched."""

    def __init__(self, namespace: str, reason: Optional[str] = None) -> None:
        message = f"unable to find namespace '{namespace}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.namespace = namespace


class ExpressionError(PolicyError):
    """Raised when a namespace's permitted expression is not a valid regular expression."""

    def __init__(self, namespace: str, expression: str, reason: str) -> None:
        super().__init__(
            f"namespace '{namespace}' has invalid policy expression '{expression}': {reason}"
        )
        self.namespace = namespace
        self.expression = expression
