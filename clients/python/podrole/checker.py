"""
podrole Checker implementation.

This module provides the Checker class the credential broker calls before
issuing credentials to a pod.
"""

import asyncio
import logging
from typing import Optional

from podrole.policy import AssumeRolePolicy
from podrole.types import Decision, Pod

logger = logging.getLogger(__name__)


class Checker:
    """Evaluates an assume-role policy on behalf of the broker.

    The checker adds logging and an optional time limit around
    :meth:`AssumeRolePolicy.evaluate`. Failures are logged and re-raised;
    the broker decides how to fail closed.

    Example:
        >>> from podrole import Pod, build_checker, load_policy_config
        >>>
        >>> checker = build_checker(load_policy_config(), finder)
        >>>
        >>> decision = await checker.check(
        ...     role="readonly",
        ...     pod=Pod(name="web-0", namespace="web", annotations={...}),
        ... )
    """

    def __init__(self, policy: AssumeRolePolicy, timeout: Optional[float] = None) -> None:
        """Create a new Checker instance.

        Args:
            policy: The policy to evaluate, usually a composite.
            timeout: Default time limit in seconds for each check.
        """
        self.policy = policy
        self.timeout = timeout

    async def check(
        self,
        role: str,
        pod: Pod,
        timeout: Optional[float] = None,
    ) -> Decision:
        """Check whether ``pod`` may assume ``role``.

        Args:
            role: The role as requested by the pod.
            pod: The pod requesting credentials.
            timeout: Time limit in seconds, overriding the checker default.

        Returns:
            The policy's Decision.

        Raises:
            TimeoutError: If the evaluation exceeds the time limit.
            Exception: Whatever the policy raised when it could not reach a
                decision.
        """
        limit = timeout if timeout is not None else self.timeout
        fields = {"pod": pod.name, "namespace": pod.namespace, "role": role}

        try:
            if limit is None:
                decision = await self.policy.evaluate(role, pod)
            else:
                decision = await asyncio.wait_for(self.policy.evaluate(role, pod), limit)
        except Exception as exc:
            logger.warning("unable to evaluate assume role policy: %s", exc, extra=fields)
            raise

        if decision.allowed:
            logger.debug("pod permitted to assume role", extra=fields)
        else:
            logger.info(
                "pod forbidden to assume role: %s", decision.explanation, extra=fields
            )
        return decision
