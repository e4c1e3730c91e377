"""xERC20 token, as seen by the factory.

Only the administrative surface the factory drives is modelled:
ownership, per-bridge limits and the lockbox slot.
Minting, burning and the rate limit accounting are out of scope.
"""

import logging
from dataclasses import dataclass

from eth_typing import HexAddress
from web3 import Web3

from eth_xerc20.abi import ZERO_ADDRESS
from eth_xerc20.revert import OwnableInvalidOwner, OwnableUnauthorizedAccount

logger = logging.getLogger(__name__)

#: Largest limit a bridge can be given
MAX_UINT256 = 2**256 - 1


@dataclass
class BridgeParameters:
    """Limits of one bridge.

    A single record per bridge, every ``set_limits`` call overwrites it.
    """

    #: Maximum outstanding amount the bridge may mint
    minter_limit: int = 0

    #: Maximum burn allowance. The factory always sets this to zero.
    burner_limit: int = 0


class XERC20:
    """Bridgeable token with per-bridge mint limits.

    The contract is ``Ownable``: the deployer (the factory) passes its address
    as the constructor argument and owns the token until it hands the ownership over.
    """

    def __init__(self, address: HexAddress, name: str, symbol: str, factory: HexAddress):
        self.address = address
        self.name = name
        self.symbol = symbol
        self.factory = Web3.to_checksum_address(factory)
        self.owner = self.factory
        self.lockbox = ZERO_ADDRESS
        self.bridges: dict[HexAddress, BridgeParameters] = {}

    def __repr__(self):
        return f"<XERC20 {self.symbol} at {self.address}, owner {self.owner}>"

    def _check_owner(self, sender: HexAddress | str):
        if Web3.to_checksum_address(sender) != self.owner:
            raise OwnableUnauthorizedAccount(sender)

    def transfer_ownership(self, new_owner: HexAddress | str, sender: HexAddress | str):
        self._check_owner(sender)
        new_owner = Web3.to_checksum_address(new_owner)
        if new_owner == ZERO_ADDRESS:
            raise OwnableInvalidOwner(f"Cannot transfer ownership of {self.symbol} to the zero address")
        logger.info("Ownership of %s transferred %s -> %s", self.symbol, self.owner, new_owner)
        self.owner = new_owner

    def set_limits(self, bridge: HexAddress | str, minting_limit: int, burning_limit: int, sender: HexAddress | str):
        """Set the limits of a bridge, replacing any previous ones."""
        self._check_owner(sender)
        for limit in (minting_limit, burning_limit):
            assert type(limit) == int and 0 <= limit <= MAX_UINT256, f"Not an uint256: {limit}"
        bridge = Web3.to_checksum_address(bridge)
        self.bridges[bridge] = BridgeParameters(minter_limit=minting_limit, burner_limit=burning_limit)

    def set_lockbox(self, lockbox: HexAddress | str, sender: HexAddress | str):
        self._check_owner(sender)
        self.lockbox = Web3.to_checksum_address(lockbox)

    def minting_max_limit_of(self, bridge: HexAddress | str) -> int:
        params = self.bridges.get(Web3.to_checksum_address(bridge))
        return params.minter_limit if params else 0

    def burning_max_limit_of(self, bridge: HexAddress | str) -> int:
        params = self.bridges.get(Web3.to_checksum_address(bridge))
        return params.burner_limit if params else 0
