import asyncio
import logging

import pytest

from podrole import (
    Checker,
    NamespacePermittedRolePolicy,
    PolicyConfig,
    PrefixResolver,
    RequestingAnnotatedRolePolicy,
    build_checker,
    build_policy,
    load_policy_config,
)

from tests.fakes import BASE_ARN, make_pod

ENV_VARS = (
    "PODROLE_ROLE_BASE_ARN",
    "PODROLE_STRICT_NAMESPACE_REGEXP",
    "PODROLE_REQUIRE_ANNOTATED_ROLE",
    "PODROLE_REQUIRE_NAMESPACE_PERMISSION",
    "PODROLE_EVALUATION_TIMEOUT",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def test_defaults():
    config = load_policy_config()

    assert config == PolicyConfig()
    assert config.strict_namespace_regexp is True


def test_reads_environment(monkeypatch):
    monkeypatch.setenv("PODROLE_ROLE_BASE_ARN", BASE_ARN)
    monkeypatch.setenv("PODROLE_STRICT_NAMESPACE_REGEXP", "off")
    monkeypatch.setenv("PODROLE_REQUIRE_ANNOTATED_ROLE", "no")
    monkeypatch.setenv("PODROLE_EVALUATION_TIMEOUT", "2.5")

    config = load_policy_config()

    assert config.role_base_arn == BASE_ARN
    assert config.strict_namespace_regexp is False
    assert config.require_annotated_role is False
    assert config.require_namespace_permission is True
    assert config.evaluation_timeout == 2.5


@pytest.mark.parametrize("value", ["soon", "0", "-1", ""])
def test_unusable_timeout_means_no_limit(monkeypatch, value):
    monkeypatch.setenv("PODROLE_EVALUATION_TIMEOUT", value)

    assert load_policy_config().evaluation_timeout is None


def test_unrecognised_bool_keeps_default(monkeypatch):
    monkeypatch.setenv("PODROLE_STRICT_NAMESPACE_REGEXP", "maybe")

    assert load_policy_config().strict_namespace_regexp is True


def test_build_policy_orders_members(finder):
    policy = build_policy(PolicyConfig(role_base_arn=BASE_ARN), finder)

    annotated, namespaced = policy.members
    assert isinstance(annotated, RequestingAnnotatedRolePolicy)
    assert isinstance(namespaced, NamespacePermittedRolePolicy)
    assert namespaced.strict is True


def test_build_policy_requires_a_resolver(finder):
    with pytest.raises(ValueError):
        build_policy(PolicyConfig(), finder)


def test_build_policy_accepts_resolver(finder):
    policy = build_policy(PolicyConfig(), finder, resolver=PrefixResolver(BASE_ARN))

    assert len(policy.members) == 2


def test_build_policy_warns_about_substring_matching(finder, caplog):
    config = PolicyConfig(role_base_arn=BASE_ARN, strict_namespace_regexp=False)

    with caplog.at_level(logging.WARNING, logger="podrole"):
        policy = build_policy(config, finder)

    assert policy.members[1].strict is False
    assert "substring matching" in caplog.text


@pytest.mark.asyncio
async def test_build_policy_with_nothing_enabled_allows(finder, caplog):
    config = PolicyConfig(
        role_base_arn=BASE_ARN,
        require_annotated_role=False,
        require_namespace_permission=False,
    )

    with caplog.at_level(logging.WARNING, logger="podrole"):
        policy = build_policy(config, finder)

    assert policy.members == ()
    assert "allow every role" in caplog.text
    assert (await policy.evaluate("admin", make_pod("readonly"))).allowed


def test_build_checker_uses_configured_timeout(finder, monkeypatch):
    monkeypatch.setenv("PODROLE_ROLE_BASE_ARN", BASE_ARN)
    monkeypatch.setenv("PODROLE_EVALUATION_TIMEOUT", "0.5")

    checker = build_checker(load_policy_config(), finder)

    assert isinstance(checker, Checker)
    assert checker.timeout == 0.5
    assert len(checker.policy.members) == 2


@pytest.mark.asyncio
async def test_build_checker_times_out_slow_lookups(resolver):
    class SlowFinder:
        async def find_namespace(self, name):
            await asyncio.sleep(60)

    config = PolicyConfig(require_annotated_role=False, evaluation_timeout=0.01)
    checker = build_checker(config, SlowFinder(), resolver=resolver)

    with pytest.raises(TimeoutError):
        await checker.check("readonly", make_pod("readonly"))
