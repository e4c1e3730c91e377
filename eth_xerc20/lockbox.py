"""Lockbox custody contract and linking it to a token.

A lockbox holds the base asset 1:1 against the xERC20 supply it wraps.
The base asset is either an ERC-20 token or the native gas token, never both.
"""

import logging
from dataclasses import dataclass

from eth_typing import HexAddress
from web3 import Web3

from eth_xerc20.abi import ZERO_ADDRESS
from eth_xerc20.revert import BadTokenAddress
from eth_xerc20.token import XERC20

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class XERC20Lockbox:
    """Lockbox contract.

    All fields are immutables set in the constructor.
    """

    address: HexAddress

    #: The xERC20 this lockbox mints and burns
    token: HexAddress

    #: ERC-20 base asset, or the zero address in native mode
    base_asset: HexAddress

    #: Holds the native gas token
    is_native: bool


def validate_lockbox_config(base_asset: HexAddress | str, is_native: bool):
    """Check that native and ERC-20 modes are not mixed.

    :raise BadTokenAddress:
        Zero base asset without native mode, or a base asset with native mode
    """
    is_zero = Web3.to_checksum_address(base_asset) == ZERO_ADDRESS
    if is_zero != is_native:
        raise BadTokenAddress(f"Bad lockbox configuration: base asset {base_asset}, native {is_native}")


def link_lockbox(token: XERC20, lockbox: HexAddress | str, sender: HexAddress | str):
    """Make the lockbox the active lockbox of the token.

    Overwrites any previously linked lockbox.
    It is up to the caller to pass a lockbox that was created for this token.

    :param sender:
        Must be the token owner
    """
    previous = token.lockbox
    token.set_lockbox(lockbox, sender=sender)
    if previous != ZERO_ADDRESS:
        logger.info("Lockbox of %s relinked %s -> %s", token.symbol, previous, token.lockbox)
    else:
        logger.info("Lockbox of %s linked to %s", token.symbol, token.lockbox)
