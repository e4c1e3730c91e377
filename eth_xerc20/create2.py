"""Deterministic CREATE2 address derivation.

Pure functions. Nothing here depends on the chain state, so the same inputs
give the same address on every EVM chain, given the deployer (the factory)
lives at the same address on each of them.

- Token salt is the owner address in the high 20 bytes and a 12 byte
  caller picked discriminator in the low bytes

- Lockbox salt is the hash of ``(token, base asset, is native)``, packed

See `EIP-1014 <https://eips.ethereum.org/EIPS/eip-1014>`__.
"""

from typing import Sequence

from eth_abi import encode
from eth_abi.packed import encode_packed
from eth_typing import HexAddress
from eth_utils import is_address, keccak, to_bytes
from hexbytes import HexBytes
from web3 import Web3

from eth_xerc20.abi import ZERO_DISCRIMINATOR

#: Constructor argument types of the xERC20 token: name, symbol, factory
TOKEN_CONSTRUCTOR_TYPES = ("string", "string", "address")

#: Constructor argument types of the lockbox: token, base asset, is native
LOCKBOX_CONSTRUCTOR_TYPES = ("address", "address", "bool")


def _address_bytes(address: HexAddress | str) -> bytes:
    if not is_address(address):
        raise ValueError(f"Not an Ethereum address: {address}")
    return to_bytes(hexstr=address)


def normalise_discriminator(discriminator: bytes | int | str | None) -> bytes:
    """Convert the user given salt discriminator to ``bytes12``.

    - ``None`` is the zero discriminator

    - Integers are big-endian, right aligned

    - Hex strings and bytes must be exactly 12 bytes
    """
    if discriminator is None:
        return ZERO_DISCRIMINATOR

    if isinstance(discriminator, bool):
        raise ValueError(f"Discriminator must be bytes12 or an integer, got {discriminator}")

    if isinstance(discriminator, int):
        if discriminator < 0 or discriminator >= 2**96:
            raise ValueError(f"Discriminator out of bytes12 range: {discriminator}")
        return discriminator.to_bytes(12, "big")

    value = bytes(HexBytes(discriminator))
    if len(value) != 12:
        raise ValueError(f"Discriminator must be 12 bytes, got {len(value)}: {value.hex()}")
    return value


def pack_salt(owner: HexAddress | str, discriminator: bytes | int | str | None = None) -> HexBytes:
    """Build the 32 bytes CREATE2 salt for a token.

    ``bytes32(uint256(uint160(owner)) << 96 | uint96(discriminator))``

    :param owner:
        Owner address, high order 20 bytes

    :param discriminator:
        Caller picked ``bytes12``, low order bytes.
        Defaults to zero.
    """
    return HexBytes(_address_bytes(owner) + normalise_discriminator(discriminator))


def compute_lockbox_salt(token: HexAddress | str, base_asset: HexAddress | str, is_native: bool) -> HexBytes:
    """Lockbox salt.

    ``keccak256(abi.encodePacked(token, baseAsset, isNative))``
    """
    packed = encode_packed(
        ["address", "address", "bool"],
        [Web3.to_checksum_address(token), Web3.to_checksum_address(base_asset), is_native],
    )
    return HexBytes(keccak(packed))


def encode_init_code(creation_code: bytes, types: Sequence[str], args: Sequence) -> HexBytes:
    """Creation bytecode followed by ABI encoded constructor arguments."""
    return HexBytes(bytes(creation_code) + encode(list(types), list(args)))


def get_create2_address(deployer: HexAddress | str, salt: bytes, init_code: bytes) -> HexAddress:
    """Compute a CREATE2 address.

    ``keccak256(0xff ++ deployer ++ salt ++ keccak256(init_code))[12:]``

    :param deployer:
        The contract executing CREATE2

    :param salt:
        32 bytes salt

    :param init_code:
        Creation bytecode and constructor arguments

    :return:
        Checksummed address
    """
    salt = bytes(salt)
    assert len(salt) == 32, f"Salt must be 32 bytes, got {len(salt)}"
    payload = b"\xff" + _address_bytes(deployer) + salt + keccak(bytes(init_code))
    return Web3.to_checksum_address(keccak(payload)[12:])


def compute_token_address(
    factory: HexAddress | str,
    token_creation_code: bytes,
    name: str,
    symbol: str,
    owner: HexAddress | str,
    discriminator: bytes | int | str | None = None,
) -> HexAddress:
    """Predict where the factory deploys a token.

    The token constructor receives the factory itself as the initial controller,
    so the factory address appears both as the deployer and in the init code.
    """
    init_code = encode_init_code(
        token_creation_code,
        TOKEN_CONSTRUCTOR_TYPES,
        [name, symbol, Web3.to_checksum_address(factory)],
    )
    return get_create2_address(factory, pack_salt(owner, discriminator), init_code)


def compute_lockbox_address(
    factory: HexAddress | str,
    lockbox_creation_code: bytes,
    token: HexAddress | str,
    base_asset: HexAddress | str,
    is_native: bool,
) -> HexAddress:
    """Predict where the factory deploys a lockbox."""
    init_code = encode_init_code(
        lockbox_creation_code,
        LOCKBOX_CONSTRUCTOR_TYPES,
        [Web3.to_checksum_address(token), Web3.to_checksum_address(base_asset), is_native],
    )
    return get_create2_address(factory, compute_lockbox_salt(token, base_asset, is_native), init_code)
