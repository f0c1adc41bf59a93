"""Global test fixtures for the maskvault test suite."""

from __future__ import annotations

import pytest

from maskvault.consent import StaticConsent
from maskvault.core.config import CoreSettings, clear_config_cache
from maskvault.core.state_manager import StateManager
from maskvault.identity.keys import SeedEntropySource
from maskvault.protocols.context import RequestContext
from maskvault.storage.backend import InMemoryStateStore

TEST_SEED = bytes(range(32))

_ENV_VARS = [
    "MASKVAULT_SITE_ORIGIN",
    "MASKVAULT_STATE_PATH",
    "MASKVAULT_STATE_KEY",
    "MASKVAULT_SEED",
    "MASKVAULT_LOG_LEVEL",
    "MASKVAULT_LOG_FORMAT",
    "MASKVAULT_LOG_FILE",
]


@pytest.fixture()
def clean_env(monkeypatch, tmp_path):
    """Remove maskvault environment variables and any .env in the cwd."""
    for var in _ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    clear_config_cache()
    yield monkeypatch
    clear_config_cache()


@pytest.fixture()
def entropy() -> SeedEntropySource:
    return SeedEntropySource(TEST_SEED)


@pytest.fixture()
def store() -> InMemoryStateStore:
    return InMemoryStateStore()


@pytest.fixture()
def manager(store, entropy) -> StateManager:
    return StateManager.make(store, entropy)


@pytest.fixture()
def settings(clean_env) -> CoreSettings:
    return CoreSettings()


@pytest.fixture()
def consent() -> StaticConsent:
    return StaticConsent(answer=True)


@pytest.fixture()
def ctx(store, entropy, consent, settings) -> RequestContext:
    return RequestContext(store=store, entropy=entropy, consent=consent, settings=settings)
