"""Factory deployment workflows on a simulated chain."""

import pytest

from eth_xerc20.abi import ZERO_ADDRESS
from eth_xerc20.lockbox import XERC20Lockbox
from eth_xerc20.revert import BadTokenAddress, DeploymentCollision, InvalidLength, OwnableUnauthorizedAccount
from eth_xerc20.simulated import SimulatedChain
from eth_xerc20.testing import BASE_ASSET, BRIDGE_1, BRIDGE_2
from eth_xerc20.token import XERC20


def test_deploy_token(chain: SimulatedChain, factory, user_1, user_2):
    """Deploy a token for someone else with an explicit salt."""
    predicted = factory.compute_token_address("Cat", "CAT", user_2, 1)
    token_address = chain.transact(factory.deploy_token, "Cat", "CAT", user_2, 1, sender=user_1)
    assert token_address == predicted

    token = chain.get_contract(token_address)
    assert isinstance(token, XERC20)
    assert token.name == "Cat"
    assert token.symbol == "CAT"
    assert token.owner == user_2
    assert token.factory == factory.address
    assert token.lockbox == ZERO_ADDRESS

    logs = chain.get_logs()
    assert len(logs) == 1
    assert logs[0].event == "XERC20Deployed"
    assert logs[0].address == factory.address
    assert logs[0].args == {"_xerc20": token_address}


def test_deploy_token_collision(chain: SimulatedChain, factory, user_1):
    """Same owner and salt twice fails the second time."""
    token_address = chain.transact(factory.deploy_token, "A", "A", user_1, 1, sender=user_1)

    with pytest.raises(DeploymentCollision) as exc_info:
        chain.transact(factory.deploy_token, "A", "A", user_1, 1, sender=user_1)

    assert exc_info.value.address == token_address
    assert exc_info.value.get_solidity_reason_message() == "DEPLOYMENT_FAILED"
    assert len(chain.get_logs(event="XERC20Deployed")) == 1

    # A new discriminator works
    chain.transact(factory.deploy_token, "A", "A", user_1, 2, sender=user_1)
    assert len(chain.get_logs(event="XERC20Deployed")) == 2


def test_dry_run_does_not_deploy(chain: SimulatedChain, factory, user_1):
    """Calling without a transaction gives the address but leaves no trace."""
    address = chain.call(factory.deploy_token, "A", "A", user_1, 1, sender=user_1)
    assert address == factory.compute_token_address("A", "A", user_1, 1)
    assert not chain.is_occupied(address)
    assert chain.get_logs() == []


def test_deploy_token_with_limits(chain: SimulatedChain, factory, user_1):
    """Caller gets the token, limits applied, burn limits zero."""
    token_address = chain.transact(factory.deploy_token_with_limits, "Cat", "CAT", [100, 200], [BRIDGE_1, BRIDGE_2], sender=user_1)

    # Caller is the salt owner, zero discriminator
    assert token_address == factory.compute_token_address("Cat", "CAT", user_1)

    token = chain.get_contract(token_address)
    assert token.owner == user_1
    assert token.minting_max_limit_of(BRIDGE_1) == 100
    assert token.minting_max_limit_of(BRIDGE_2) == 200
    assert token.burning_max_limit_of(BRIDGE_1) == 0
    assert token.burning_max_limit_of(BRIDGE_2) == 0


def test_deploy_token_with_limits_canonical_per_caller(chain: SimulatedChain, factory, user_1, user_2):
    """Without a salt, there is one token per caller, name and symbol."""
    chain.transact(factory.deploy_token_with_limits, "Cat", "CAT", [], [], sender=user_1)

    with pytest.raises(DeploymentCollision):
        chain.transact(factory.deploy_token_with_limits, "Cat", "CAT", [], [], sender=user_1)

    # Another caller gets their own
    chain.transact(factory.deploy_token_with_limits, "Cat", "CAT", [], [], sender=user_2)


def test_deploy_token_length_mismatch(chain: SimulatedChain, factory, user_1):
    """Limits and bridges must be the same length."""
    predicted = factory.compute_token_address("A", "A", user_1)

    with pytest.raises(InvalidLength):
        chain.transact(factory.deploy_token_with_limits, "A", "A", [1, 2], [BRIDGE_1], sender=user_1)

    assert not chain.is_occupied(predicted)
    assert chain.get_logs() == []


def test_duplicate_bridge_last_write_wins(chain: SimulatedChain, factory, user_1):
    token_address = chain.transact(factory.deploy_token_with_limits, "A", "A", [100, 200], [BRIDGE_1, BRIDGE_1], sender=user_1)
    token = chain.get_contract(token_address)
    assert token.minting_max_limit_of(BRIDGE_1) == 200
    assert len(token.bridges) == 1


@pytest.mark.parametrize(
    "base_asset,is_native,ok",
    [
        (ZERO_ADDRESS, False, False),
        (BASE_ASSET, True, False),
        (ZERO_ADDRESS, True, True),
        (BASE_ASSET, False, True),
    ],
)
def test_deploy_lockbox_modes(chain: SimulatedChain, factory, user_1, base_asset, is_native, ok):
    """Native and ERC-20 lockbox modes are mutually exclusive."""
    token_address = chain.transact(factory.deploy_token, "A", "A", user_1, 1, sender=user_1)

    if ok:
        lockbox_address = chain.transact(factory.deploy_lockbox, token_address, base_asset, is_native, sender=user_1)
        lockbox = chain.get_contract(lockbox_address)
        assert lockbox == XERC20Lockbox(lockbox_address, token_address, base_asset, is_native)
        assert lockbox_address == factory.compute_lockbox_address(token_address, base_asset, is_native)
        assert chain.get_logs(event="LockboxDeployed")[0].args == {"_lockbox": lockbox_address}
    else:
        with pytest.raises(BadTokenAddress) as exc_info:
            chain.transact(factory.deploy_lockbox, token_address, base_asset, is_native, sender=user_1)
        assert exc_info.value.get_solidity_reason_message() == "IXERC20Factory_BadTokenAddress"
        assert chain.get_logs(event="LockboxDeployed") == []


def test_deploy_lockbox_does_not_link(chain: SimulatedChain, factory, user_1):
    """Standalone lockboxes are not linked, and several can exist per token."""
    token_address = chain.transact(factory.deploy_token, "A", "A", user_1, 1, sender=user_1)
    native = chain.transact(factory.deploy_lockbox, token_address, ZERO_ADDRESS, True, sender=user_1)
    erc20 = chain.transact(factory.deploy_lockbox, token_address, BASE_ASSET, False, sender=user_1)
    assert native != erc20
    assert chain.get_contract(token_address).lockbox == ZERO_ADDRESS

    with pytest.raises(DeploymentCollision):
        chain.transact(factory.deploy_lockbox, token_address, ZERO_ADDRESS, True, sender=user_1)


def test_deploy_token_with_lockbox(chain: SimulatedChain, factory, user_1):
    """Token, limits, native lockbox, linked, owned by the caller."""
    token_address, lockbox_address = chain.transact(
        factory.deploy_token_with_lockbox,
        "Cat",
        "CAT",
        [100, 200],
        [BRIDGE_1, BRIDGE_2],
        ZERO_ADDRESS,
        True,
        sender=user_1,
    )

    token = chain.get_contract(token_address)
    assert token.owner == user_1
    assert token.minting_max_limit_of(BRIDGE_1) == 100
    assert token.minting_max_limit_of(BRIDGE_2) == 200
    assert token.burning_max_limit_of(BRIDGE_1) == 0
    assert token.burning_max_limit_of(BRIDGE_2) == 0
    assert token.lockbox == lockbox_address

    lockbox = chain.get_contract(lockbox_address)
    assert lockbox.token == token_address
    assert lockbox.base_asset == ZERO_ADDRESS
    assert lockbox.is_native

    logs = chain.get_logs(block_number=chain.block_number)
    assert [(log.event, log.log_index) for log in logs] == [("XERC20Deployed", 0), ("LockboxDeployed", 1)]
    assert logs[0].args["_xerc20"] == token_address
    assert logs[1].args["_lockbox"] == lockbox_address


def test_deploy_token_with_lockbox_validates_first(chain: SimulatedChain, factory, user_1):
    """Bad lockbox config fails before the token is created."""
    predicted = factory.compute_token_address("Cat", "CAT", user_1)

    with pytest.raises(BadTokenAddress):
        chain.transact(factory.deploy_token_with_lockbox, "Cat", "CAT", [], [], BASE_ASSET, True, sender=user_1)

    assert not chain.is_occupied(predicted)


def test_deploy_token_with_lockbox_atomic(chain: SimulatedChain, factory, user_1, user_2):
    """Lockbox collision rolls back the token created earlier in the same transaction."""
    predicted_token = factory.compute_token_address("Cat", "CAT", user_1)

    # Squat the lockbox address before the token exists
    squatted = chain.transact(factory.deploy_lockbox, predicted_token, BASE_ASSET, False, sender=user_2)
    assert squatted == factory.compute_lockbox_address(predicted_token, BASE_ASSET, False)
    block_number = chain.block_number

    with pytest.raises(DeploymentCollision) as exc_info:
        chain.transact(factory.deploy_token_with_lockbox, "Cat", "CAT", [100], [BRIDGE_1], BASE_ASSET, False, sender=user_1)

    assert exc_info.value.address == squatted
    assert not chain.is_occupied(predicted_token)
    assert chain.block_number == block_number
    assert [log.event for log in chain.get_logs()] == ["LockboxDeployed"]

    # The token alone can still be deployed
    chain.transact(factory.deploy_token_with_limits, "Cat", "CAT", [100], [BRIDGE_1], sender=user_1)
    assert chain.is_occupied(predicted_token)


def test_handed_over_token_rejects_factory(chain: SimulatedChain, factory, user_1):
    """After the workflow the factory has no rights left on the token."""
    token_address = chain.transact(factory.deploy_token_with_limits, "A", "A", [1], [BRIDGE_1], sender=user_1)
    token = chain.get_contract(token_address)

    with pytest.raises(OwnableUnauthorizedAccount):
        chain.transact(lambda tx: token.set_limits(BRIDGE_1, 5, 0, sender=factory.address), sender=user_1)

    chain.transact(lambda tx: token.set_limits(BRIDGE_1, 5, 0, sender=tx.sender), sender=user_1)
    assert token.minting_max_limit_of(BRIDGE_1) == 5


def test_length_mismatch_reported_before_collision(chain: SimulatedChain, factory, user_1):
    """Bad limits are reported as such even when the canonical token already exists."""
    chain.transact(factory.deploy_token_with_limits, "A", "A", [], [], sender=user_1)

    with pytest.raises(InvalidLength):
        chain.transact(factory.deploy_token_with_limits, "A", "A", [1, 2], [BRIDGE_1], sender=user_1)

    with pytest.raises(InvalidLength):
        chain.transact(factory.deploy_token_with_lockbox, "A", "A", [1, 2], [BRIDGE_1], ZERO_ADDRESS, True, sender=user_1)


def test_deploy_token_with_lockbox_length_mismatch(chain: SimulatedChain, factory, user_1):
    """Nothing is left behind when limits and bridges differ in length."""
    predicted_token = factory.compute_token_address("Cat", "CAT", user_1)
    predicted_lockbox = factory.compute_lockbox_address(predicted_token, ZERO_ADDRESS, True)

    with pytest.raises(InvalidLength):
        chain.transact(factory.deploy_token_with_lockbox, "Cat", "CAT", [100, 200], [BRIDGE_1], ZERO_ADDRESS, True, sender=user_1)

    assert not chain.is_occupied(predicted_token)
    assert not chain.is_occupied(predicted_lockbox)
    assert chain.get_logs() == []
