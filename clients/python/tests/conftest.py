import pytest

from podrole import PrefixResolver
from tests.fakes import BASE_ARN, FakeNamespaceFinder


@pytest.fixture
def resolver() -> PrefixResolver:
    return PrefixResolver(BASE_ARN)


@pytest.fixture
def finder() -> FakeNamespaceFinder:
    return FakeNamespaceFinder()
