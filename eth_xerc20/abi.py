"""Compiled contract artifact loading.

The factory derives addresses from the creation bytecode of the token and the lockbox.
When you want to predict addresses of a real on-chain factory, load the bytecode
from the same Solidity compiler artifacts the factory was built with.

Artifacts can be

- Foundry output (``out/XERC20.sol/XERC20.json``), bytecode under ``bytecode.object``

- Hardhat or legacy solc output, bytecode directly under ``bytecode``
"""

import json
from functools import lru_cache
from pathlib import Path

from eth_utils import keccak
from hexbytes import HexBytes

# How big is our artifact cache
_CACHE_SIZE = 64


#: Ethereum 0x0000000000000000000000000000000000000000 address as a string.
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

#: Used when the caller does not pick their own salt discriminator
ZERO_DISCRIMINATOR = b"\x00" * 12


@lru_cache(maxsize=_CACHE_SIZE)
def get_abi_by_filename(fname: str | Path) -> dict:
    """Reads a compiled contract artifact and returns it.

    Example::

        artifact = get_abi_by_filename("/home/user/xerc20/out/XERC20.sol/XERC20.json")

    Any results are cached.

    :param fname:
        Path to the artifact JSON file.

    :return:
        Full contract interface, including `bytecode`.
    """
    with open(Path(fname), "rt", encoding="utf-8") as f:
        return json.load(f)


def get_creation_code(fname: str | Path) -> HexBytes:
    """Get the contract creation bytecode from a compiler artifact.

    :param fname:
        See :py:func:`get_abi_by_filename`

    :raise ValueError:
        If the artifact carries no bytecode, e.g. it is a copy-pasted Etherscan ABI,
        or the bytecode still has unlinked library placeholders.

    :return:
        Creation bytecode, without constructor arguments
    """
    contract_interface = get_abi_by_filename(fname)

    if type(contract_interface) == list:
        # Etherscan
        raise ValueError(f"{fname} is a plain ABI file and does not contain bytecode")

    bytecode = contract_interface.get("bytecode")
    if type(bytecode) == dict:
        # Sol 0.8 / Forge
        # Contains keys object, sourceMap, linkReferences
        bytecode = bytecode.get("object")

    if not bytecode or bytecode == "0x":
        raise ValueError(f"{fname} does not contain creation bytecode")

    if "__" in bytecode:
        raise ValueError(f"{fname} bytecode needs library linking")

    return HexBytes(bytecode)


def get_placeholder_creation_code(contract_name: str) -> HexBytes:
    """Stand-in creation code for contracts simulated in Python.

    Simulated contracts have no EVM bytecode. We still need a stable
    code fingerprint to feed to CREATE2, so we use the hash of the contract name.
    """
    return HexBytes(keccak(text=contract_name))
