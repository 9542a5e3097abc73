# -*- coding: utf-8 -*-
"""
grok_token.tests.conftest
=========================

Fixtures for the ledger test-suite.

- Stable, well-known accounts derived from SHA3 tags ("deployer", "alice",
  "bob", "carol"), matching grok_token.address.derive_address.
- A freshly deployed ledger per test: SUPPLY units held by `owner`, who is
  also the only minter and burner.
- Hypothesis profiles (dev/ci/fast) selected via HYPOTHESIS_PROFILE, or "ci"
  when a CI env var is present.

Usage (inside a test file):
    def test_something(ledger, owner, addr1):
        ledger.transfer(owner, addr1, 1)
        assert ledger.balance_of(addr1) == 1
"""
from __future__ import annotations

import os
from typing import Dict

import pytest
from hypothesis import HealthCheck, settings

from grok_token.address import ZERO_ADDRESS, derive_address
from grok_token.config import TokenConfig, load_config
from grok_token.ledger import Ledger

# --- stable env for tests -----------------------------------------------------

os.environ.setdefault("PYTHONHASHSEED", "0")

SUPPLY = 1_000_000

# --- hypothesis profiles --------------------------------------------------------

settings.register_profile(
    "dev",
    max_examples=100,
    deadline=None,
    suppress_health_check=(HealthCheck.too_slow,),
)
settings.register_profile(
    "ci",
    max_examples=300,
    deadline=None,
    derandomize=True,
    suppress_health_check=(HealthCheck.too_slow,),
)
settings.register_profile("fast", max_examples=25, deadline=None)
settings.load_profile(
    os.environ.get("HYPOTHESIS_PROFILE") or ("ci" if os.environ.get("CI") else "dev")
)


# --- accounts --------------------------------------------------------------------


@pytest.fixture(scope="session")
def accounts() -> Dict[str, bytes]:
    return {tag: derive_address(tag) for tag in ("deployer", "alice", "bob", "carol")}


@pytest.fixture(scope="session")
def owner(accounts: Dict[str, bytes]) -> bytes:
    return accounts["deployer"]


@pytest.fixture(scope="session")
def addr1(accounts: Dict[str, bytes]) -> bytes:
    return accounts["alice"]


@pytest.fixture(scope="session")
def addr2(accounts: Dict[str, bytes]) -> bytes:
    return accounts["bob"]


@pytest.fixture(scope="session")
def zero() -> bytes:
    return ZERO_ADDRESS


# --- ledger ----------------------------------------------------------------------


@pytest.fixture
def token_config(owner: bytes) -> TokenConfig:
    return load_config(
        env={},
        overrides={"initial_supply": SUPPLY, "initial_holder": owner},
    )


@pytest.fixture
def ledger(token_config: TokenConfig) -> Ledger:
    return Ledger.from_config(token_config)
