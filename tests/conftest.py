"""Shared fixtures for the factory tests."""

import pytest
from web3 import Web3

from eth_xerc20.factory import XERC20Factory, deploy_factory
from eth_xerc20.simulated import SimulatedChain
from eth_xerc20.testing import make_test_account


@pytest.fixture()
def chain() -> SimulatedChain:
    """Fresh Ethereum mainnet lookalike."""
    return SimulatedChain(chain_id=1)


@pytest.fixture()
def deployer() -> str:
    """Account deploying the factory."""
    return Web3.to_checksum_address("0x" + "de" * 20)


@pytest.fixture()
def user_1() -> str:
    """User account."""
    return make_test_account(0x11)


@pytest.fixture()
def user_2() -> str:
    """User account."""
    return make_test_account(0x22)


@pytest.fixture()
def factory(chain, deployer) -> XERC20Factory:
    return deploy_factory(chain, deployer)
