"""Shared fixtures: fake browser sessions and scanner settings."""

import pytest

from a11y_scanner.checks.axe import reset_axe_cache
from a11y_scanner.core.config import Settings

from fakes import FakeRuleEngine, FakeSession, FakeSessionFactory


@pytest.fixture(autouse=True)
def clear_axe_cache():
    reset_axe_cache()
    yield
    reset_axe_cache()


@pytest.fixture
def settings() -> Settings:
    return Settings(json_logs=False, nav_timeout_ms=45_000)


@pytest.fixture
def session() -> FakeSession:
    return FakeSession(final_url="https://example.test/home")


@pytest.fixture
def session_factory(session: FakeSession) -> FakeSessionFactory:
    return FakeSessionFactory(session, console=["Uncaught TypeError: x is undefined"])


@pytest.fixture
def rule_engine() -> FakeRuleEngine:
    return FakeRuleEngine()
