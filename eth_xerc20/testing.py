"""Test helpers.

Fixed accounts for unit tests and local experiments.
"""

from web3 import Web3

#: Bridge accounts used in limit tests
BRIDGE_1 = Web3.to_checksum_address("0x" + "b1" * 20)
BRIDGE_2 = Web3.to_checksum_address("0x" + "b2" * 20)

#: Some ERC-20 used as a lockbox base asset
BASE_ASSET = Web3.to_checksum_address("0x" + "ba5e" * 10)


def make_test_account(n: int) -> str:
    """Deterministic dummy account ``0x1111...``, ``0x2222...``, etc."""
    assert 0 < n < 256
    return Web3.to_checksum_address("0x" + f"{n:02x}" * 20)
