"""xERC20 factory: deterministic token and lockbox deployments.

The factory creates tokens and lockboxes with CREATE2, so their addresses
only depend on the factory address, the salt and the creation code.
Deploy the factory itself at the same address on every chain
(see :py:func:`deploy_factory`) and a token deployed with the same
owner, salt, name and symbol lands at the same address everywhere.

While a workflow runs, the factory owns the token. It applies bridge limits
and links the lockbox, and only then hands the ownership to the end owner
as the last step.

Example:

.. code-block:: python

    chain = SimulatedChain(chain_id=1)
    factory = deploy_factory(chain, deployer)

    token_address, lockbox_address = chain.transact(
        factory.deploy_token_with_lockbox,
        "Cat",
        "CAT",
        [100, 200],
        [bridge_1, bridge_2],
        ZERO_ADDRESS,
        True,
        sender=user,
    )

"""

import logging
from typing import Sequence

from eth_typing import HexAddress
from hexbytes import HexBytes
from web3 import Web3

from eth_xerc20.abi import get_placeholder_creation_code
from eth_xerc20.config import FactoryConfig
from eth_xerc20.create2 import (
    LOCKBOX_CONSTRUCTOR_TYPES,
    TOKEN_CONSTRUCTOR_TYPES,
    compute_lockbox_address,
    compute_lockbox_salt,
    compute_token_address,
    encode_init_code,
    pack_salt,
)
from eth_xerc20.limits import apply_bridge_limits, create_bridge_limit_entries
from eth_xerc20.lockbox import XERC20Lockbox, link_lockbox, validate_lockbox_config
from eth_xerc20.simulated import SimulatedChain, Transaction
from eth_xerc20.token import XERC20

logger = logging.getLogger(__name__)

#: Arachnid's deterministic deployment proxy.
#:
#: Present at the same address on virtually every EVM chain.
#: See https://github.com/Arachnid/deterministic-deployment-proxy
DETERMINISTIC_DEPLOYER = "0x4e59b44847b379578588920cA78FbF26c0B4956C"


class XERC20Factory:
    """Stateless factory contract.

    Public workflow functions take the running :py:class:`Transaction` as the first argument.
    Call them through :py:meth:`SimulatedChain.transact`.
    """

    def __init__(self, address: HexAddress, token_creation_code: bytes, lockbox_creation_code: bytes):
        self.address = address
        self.token_creation_code = HexBytes(token_creation_code)
        self.lockbox_creation_code = HexBytes(lockbox_creation_code)

    def __repr__(self):
        return f"<XERC20Factory at {self.address}>"

    def compute_token_address(
        self,
        name: str,
        symbol: str,
        owner: HexAddress | str,
        salt: bytes | int | str | None = None,
    ) -> HexAddress:
        """Dry-run the token address derivation.

        :param salt:
            12 bytes discriminator. ``None`` is the same as the zero discriminator.
        """
        return compute_token_address(self.address, self.token_creation_code, name, symbol, owner, salt)

    def compute_lockbox_address(self, token: HexAddress | str, base_asset: HexAddress | str, is_native: bool) -> HexAddress:
        """Dry-run the lockbox address derivation."""
        return compute_lockbox_address(self.address, self.lockbox_creation_code, token, base_asset, is_native)

    def deploy_token(
        self,
        tx: Transaction,
        name: str,
        symbol: str,
        owner: HexAddress | str,
        salt: bytes | int | str | None,
    ) -> HexAddress:
        """Deploy a token for an owner with an explicit salt.

        :raise DeploymentCollision:
            The same owner and salt was already used for this name and symbol
        """
        token = self._create_token(tx, name, symbol, owner, salt)
        self._transfer_ownership(token, owner)
        tx.emit(self.address, "XERC20Deployed", _xerc20=token.address)
        return token.address

    def deploy_token_with_limits(
        self,
        tx: Transaction,
        name: str,
        symbol: str,
        minter_limits: Sequence[int],
        bridges: Sequence[HexAddress | str],
    ) -> HexAddress:
        """Deploy a token for the caller and set bridge limits.

        The caller is the salt owner and the final token owner,
        the salt discriminator is zero.

        :raise InvalidLength:
            ``minter_limits`` and ``bridges`` differ in length
        """
        entries = create_bridge_limit_entries(minter_limits, bridges)
        token = self._create_token(tx, name, symbol, tx.sender, None)
        apply_bridge_limits(token, entries, sender=self.address)
        self._transfer_ownership(token, tx.sender)
        tx.emit(self.address, "XERC20Deployed", _xerc20=token.address)
        return token.address

    def deploy_lockbox(
        self,
        tx: Transaction,
        token: HexAddress | str,
        base_asset: HexAddress | str,
        is_native: bool,
    ) -> HexAddress:
        """Deploy a lockbox for a token, without linking it.

        :raise BadTokenAddress:
            Native mode and ERC-20 base asset are mixed
        """
        validate_lockbox_config(base_asset, is_native)
        lockbox = self._create_lockbox(tx, token, base_asset, is_native)
        tx.emit(self.address, "LockboxDeployed", _lockbox=lockbox.address)
        return lockbox.address

    def deploy_token_with_lockbox(
        self,
        tx: Transaction,
        name: str,
        symbol: str,
        minter_limits: Sequence[int],
        bridges: Sequence[HexAddress | str],
        base_asset: HexAddress | str,
        is_native: bool,
    ) -> tuple[HexAddress, HexAddress]:
        """Deploy a token for the caller with bridge limits and a linked lockbox.

        Ownership goes to the caller only after the lockbox is linked.

        :return:
            Tuple (token address, lockbox address)
        """
        validate_lockbox_config(base_asset, is_native)
        entries = create_bridge_limit_entries(minter_limits, bridges)
        token = self._create_token(tx, name, symbol, tx.sender, None)
        apply_bridge_limits(token, entries, sender=self.address)
        tx.emit(self.address, "XERC20Deployed", _xerc20=token.address)

        lockbox = self._create_lockbox(tx, token.address, base_asset, is_native)
        tx.emit(self.address, "LockboxDeployed", _lockbox=lockbox.address)

        link_lockbox(token, lockbox.address, sender=self.address)
        self._transfer_ownership(token, tx.sender)
        return token.address, lockbox.address

    def _create_token(
        self,
        tx: Transaction,
        name: str,
        symbol: str,
        owner: HexAddress | str,
        salt: bytes | int | str | None,
    ) -> XERC20:
        init_code = encode_init_code(self.token_creation_code, TOKEN_CONSTRUCTOR_TYPES, [name, symbol, self.address])
        return tx.chain.create2(
            tx,
            self.address,
            pack_salt(owner, salt),
            init_code,
            lambda address: XERC20(address, name, symbol, factory=self.address),
        )

    def _create_lockbox(self, tx: Transaction, token: HexAddress | str, base_asset: HexAddress | str, is_native: bool) -> XERC20Lockbox:
        token = Web3.to_checksum_address(token)
        base_asset = Web3.to_checksum_address(base_asset)
        init_code = encode_init_code(self.lockbox_creation_code, LOCKBOX_CONSTRUCTOR_TYPES, [token, base_asset, is_native])
        return tx.chain.create2(
            tx,
            self.address,
            compute_lockbox_salt(token, base_asset, is_native),
            init_code,
            lambda address: XERC20Lockbox(address, token, base_asset, is_native),
        )

    def _transfer_ownership(self, token: XERC20, owner: HexAddress | str):
        token.transfer_ownership(owner, sender=self.address)


def get_factory_init_code(config: FactoryConfig) -> HexBytes:
    """Factory creation code.

    The token and lockbox creation code is embedded in the factory bytecode,
    so changing either moves the factory address too.
    """
    return HexBytes(get_placeholder_creation_code("XERC20Factory") + config.get_token_creation_code() + config.get_lockbox_creation_code())


def deploy_factory(chain: SimulatedChain, deployer: HexAddress | str, config: FactoryConfig | None = None) -> XERC20Factory:
    """Deploy the factory through the deterministic deployment proxy.

    With the same ``config`` the factory gets the same address on every chain,
    which is what makes the token and lockbox addresses chain independent.

    :param deployer:
        Any account, does not affect the address

    :raise DeploymentCollision:
        Factory already deployed with this config
    """
    if config is None:
        config = FactoryConfig()

    token_creation_code = config.get_token_creation_code()
    lockbox_creation_code = config.get_lockbox_creation_code()

    def _deploy(tx: Transaction) -> XERC20Factory:
        return chain.create2(
            tx,
            DETERMINISTIC_DEPLOYER,
            config.factory_salt,
            get_factory_init_code(config),
            lambda address: XERC20Factory(address, token_creation_code, lockbox_creation_code),
        )

    factory = chain.transact(_deploy, sender=deployer)
    logger.info("XERC20Factory deployed at %s, chain %d", factory.address, chain.chain_id)
    return factory
