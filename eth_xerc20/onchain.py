"""Preflight xERC20 deployments against live chains.

Before broadcasting the factory transactions to several chains,
predict the token and lockbox addresses and check none of them is taken.
A taken address would revert the deployment on that chain, and retrying
with the same salt cannot help.

Example:

.. code-block:: python

    config = FactoryConfig.from_env()
    web3s = [Web3(Web3.HTTPProvider(url)) for url in rpc_urls]
    plan = plan_token_deployment(web3s, factory_address, "Cat", "CAT", owner, salt=1, config=config)
    plan.assert_deployable()
    print(f"Token will be at {plan.get_token_address()}")

"""

import logging
from dataclasses import dataclass, field
from typing import Iterable

from eth_typing import HexAddress
from web3 import Web3

from eth_xerc20.chain import get_chain_name
from eth_xerc20.config import FactoryConfig
from eth_xerc20.create2 import compute_lockbox_address, compute_token_address, normalise_discriminator
from eth_xerc20.lockbox import validate_lockbox_config
from eth_xerc20.revert import DeploymentCollision

logger = logging.getLogger(__name__)


class FactoryNotDeployed(Exception):
    """The factory is missing on a chain in the plan."""


def is_address_occupied(web3: Web3, address: HexAddress | str) -> bool:
    """Check if an address has code on a chain."""
    code = web3.eth.get_code(Web3.to_checksum_address(address))
    return len(code) > 0


@dataclass(slots=True, frozen=True)
class ChainDeploymentTarget:
    """Predicted deployment on one chain."""

    chain_id: int

    factory_deployed: bool

    token_address: HexAddress

    token_occupied: bool

    lockbox_address: HexAddress | None = None

    lockbox_occupied: bool = False


@dataclass(slots=True)
class DeploymentPlan:
    """Token deployment predicted across chains."""

    factory_address: HexAddress

    name: str

    symbol: str

    owner: HexAddress

    discriminator: bytes

    #: Chain id -> target
    targets: dict[int, ChainDeploymentTarget] = field(default_factory=dict)

    def get_token_address(self) -> HexAddress:
        """The token address, same on all chains."""
        addresses = {t.token_address for t in self.targets.values()}
        assert len(addresses) == 1, f"Token address differs across chains: {addresses}"
        return next(iter(addresses))

    def get_lockbox_address(self) -> HexAddress | None:
        addresses = {t.lockbox_address for t in self.targets.values()}
        assert len(addresses) == 1, f"Lockbox address differs across chains: {addresses}"
        return next(iter(addresses))

    def assert_deployable(self):
        """Check every chain can take the deployment.

        :raise FactoryNotDeployed:
            Factory code missing on a chain

        :raise DeploymentCollision:
            Token or lockbox address already taken on a chain
        """
        for chain_id, target in self.targets.items():
            chain_name = get_chain_name(chain_id)
            if not target.factory_deployed:
                raise FactoryNotDeployed(f"No factory at {self.factory_address} on {chain_name}")
            if target.token_occupied:
                raise DeploymentCollision(target.token_address, f"Token address {target.token_address} already taken on {chain_name}")
            if target.lockbox_occupied:
                raise DeploymentCollision(target.lockbox_address, f"Lockbox address {target.lockbox_address} already taken on {chain_name}")


def plan_token_deployment(
    web3s: Iterable[Web3],
    factory_address: HexAddress | str,
    name: str,
    symbol: str,
    owner: HexAddress | str,
    salt: bytes | int | str | None = None,
    base_asset: HexAddress | str | None = None,
    is_native: bool = False,
    config: FactoryConfig | None = None,
) -> DeploymentPlan:
    """Predict a token deployment on several chains.

    :param web3s:
        One connection per chain

    :param owner:
        Salt owner. For the deploy-with-limits and deploy-with-lockbox workflows this is the caller.

    :param salt:
        12 bytes discriminator, ``None`` for the zero discriminator

    :param base_asset:
        Plan a lockbox as well. Pass the zero address with ``is_native=True`` for a native lockbox.

    :param config:
        Where to read the creation code from.
        Must point to the artifacts the on-chain factory was compiled with.

    :raise BadTokenAddress:
        Invalid lockbox configuration
    """
    web3s = list(web3s)
    assert len(web3s) > 0, "Need at least one chain connection to plan a deployment"

    if config is None:
        config = FactoryConfig()

    factory_address = Web3.to_checksum_address(factory_address)
    token_address = compute_token_address(factory_address, config.get_token_creation_code(), name, symbol, owner, salt)

    lockbox_address = None
    if base_asset is not None:
        validate_lockbox_config(base_asset, is_native)
        lockbox_address = compute_lockbox_address(factory_address, config.get_lockbox_creation_code(), token_address, base_asset, is_native)

    plan = DeploymentPlan(
        factory_address=factory_address,
        name=name,
        symbol=symbol,
        owner=Web3.to_checksum_address(owner),
        discriminator=normalise_discriminator(salt),
    )

    for web3 in web3s:
        chain_id = web3.eth.chain_id
        target = ChainDeploymentTarget(
            chain_id=chain_id,
            factory_deployed=is_address_occupied(web3, factory_address),
            token_address=token_address,
            token_occupied=is_address_occupied(web3, token_address),
            lockbox_address=lockbox_address,
            lockbox_occupied=is_address_occupied(web3, lockbox_address) if lockbox_address else False,
        )
        logger.info(
            "Planned %s on %s: token %s (taken: %s), lockbox %s (taken: %s)",
            symbol,
            get_chain_name(chain_id),
            token_address,
            target.token_occupied,
            lockbox_address,
            target.lockbox_occupied,
        )
        plan.targets[chain_id] = target

    return plan
