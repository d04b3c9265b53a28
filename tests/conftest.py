from __future__ import annotations

import pytest

from fakes import CountingPolicy, FakeSessionFactory


@pytest.fixture()
def counting_policy() -> CountingPolicy:
    return CountingPolicy()


@pytest.fixture()
def session_factory() -> FakeSessionFactory:
    return FakeSessionFactory()
