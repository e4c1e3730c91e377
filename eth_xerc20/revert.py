"""Transaction revert signals.

Everything that makes a factory transaction fail is raised as a :py:class:`TransactionReverted`
subclass. The execution environment discards all state changes of the transaction
and the exception is passed to the caller as is.
"""


class TransactionReverted(Exception):
    """Python exception to signal a transaction error with a Solidity style revert reason."""

    #: Solidity custom error name
    reason = "Reverted"

    def __init__(self, msg: str | None = None):
        super().__init__(msg or self.reason)

    def get_solidity_reason_message(self) -> str:
        return self.reason


class DeploymentCollision(TransactionReverted):
    """CREATE2 target address already has a contract.

    Deterministic: retrying with the same salt fails the same way.
    Pick a new salt discriminator.
    """

    reason = "DEPLOYMENT_FAILED"

    def __init__(self, address: str, msg: str | None = None):
        super().__init__(msg or f"Contract already deployed at {address}")
        self.address = address


class InvalidLength(TransactionReverted):
    """Bridge and minter limit arrays do not match."""

    reason = "IXERC20Factory_InvalidLength"


class BadTokenAddress(TransactionReverted):
    """Lockbox must be either native, or have a non-zero ERC-20 base asset, but not both."""

    reason = "IXERC20Factory_BadTokenAddress"


class OwnableUnauthorizedAccount(TransactionReverted):
    """Owner-only function called by someone else."""

    reason = "OwnableUnauthorizedAccount"

    def __init__(self, account: str):
        super().__init__(f"OwnableUnauthorizedAccount({account})")
        self.account = account


class OwnableInvalidOwner(TransactionReverted):
    """Ownership cannot be handed to the zero address."""

    reason = "OwnableInvalidOwner"
