"""Bridge mint limit provisioning.

Limits come as two parallel lists, ``bridges`` and ``minter_limits``.
Each pair is written as a full overwrite of the bridge limits, with the burn limit
fixed at zero: burns are unlimited and reduce the minted exposure instead.
"""

import logging
from dataclasses import dataclass
from typing import Sequence

from eth_typing import HexAddress
from web3 import Web3

from eth_xerc20.revert import InvalidLength
from eth_xerc20.token import MAX_UINT256, XERC20

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class BridgeLimitEntry:
    """One bridge and the mint limit it gets."""

    bridge: HexAddress

    mint_limit: int


def create_bridge_limit_entries(minter_limits: Sequence[int], bridges: Sequence[HexAddress | str]) -> list[BridgeLimitEntry]:
    """Pair up the parallel lists.

    :raise InvalidLength:
        If the lists are different length

    :raise ValueError:
        If a limit does not fit uint256
    """
    if len(minter_limits) != len(bridges):
        raise InvalidLength(f"Got {len(minter_limits)} minter limits for {len(bridges)} bridges")

    entries = []
    for bridge, limit in zip(bridges, minter_limits):
        if type(limit) != int or not (0 <= limit <= MAX_UINT256):
            raise ValueError(f"Mint limit for {bridge} is not an uint256: {limit}")
        entries.append(BridgeLimitEntry(bridge=Web3.to_checksum_address(bridge), mint_limit=limit))
    return entries


def provision_bridge_limits(
    token: XERC20,
    minter_limits: Sequence[int],
    bridges: Sequence[HexAddress | str],
    sender: HexAddress | str,
) -> list[BridgeLimitEntry]:
    """Set mint limits for bridges on a freshly created token.

    - Nothing is written if the input is invalid

    - Duplicate bridges are fine, the last one wins

    :param sender:
        Must be the current token owner

    :return:
        Entries written, in order
    """
    entries = create_bridge_limit_entries(minter_limits, bridges)
    apply_bridge_limits(token, entries, sender=sender)
    return entries


def apply_bridge_limits(token: XERC20, entries: Sequence[BridgeLimitEntry], sender: HexAddress | str):
    """Write already validated limit entries to a token, in order.

    See :py:func:`create_bridge_limit_entries`.
    """
    for entry in entries:
        logger.debug("Setting %s mint limit for bridge %s to %d", token.symbol, entry.bridge, entry.mint_limit)
        token.set_limits(entry.bridge, entry.mint_limit, 0, sender=sender)
