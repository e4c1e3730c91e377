"""In-process chain with EVM transaction semantics.

Enough of an EVM to run the factory workflows in Python:

- Contracts are Python objects living at CREATE2 addresses

- A transaction is all-or-nothing: if anything raises, every account
  change made within it is rolled back and no event is committed

- Transactions are serialised, one at a time

Example:

.. code-block:: python

    chain = SimulatedChain(chain_id=8453)
    factory = deploy_factory(chain, deployer)
    token_address = chain.transact(factory.deploy_token, "Cat", "CAT", owner, 1, sender=owner)

"""

import copy
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, TypeVar

from eth_typing import HexAddress
from web3 import Web3

from eth_xerc20.chain import get_chain_name
from eth_xerc20.create2 import get_create2_address
from eth_xerc20.revert import DeploymentCollision

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True, frozen=True)
class LogEntry:
    """One emitted event."""

    chain_id: int

    block_number: int

    #: Index within the block
    log_index: int

    #: Emitting contract
    address: HexAddress

    #: Event name, e.g. ``XERC20Deployed``
    event: str

    args: dict[str, Any] = field(default_factory=dict)


class Transaction:
    """Execution context passed to contract functions.

    Collects events until the transaction is committed.
    """

    def __init__(self, chain: "SimulatedChain", sender: HexAddress | str, block_number: int):
        self.chain = chain
        #: ``msg.sender`` of the outermost call
        self.sender = Web3.to_checksum_address(sender)
        self.block_number = block_number
        self.logs: list[LogEntry] = []

    def emit(self, address: HexAddress, event: str, **args) -> LogEntry:
        entry = LogEntry(
            chain_id=self.chain.chain_id,
            block_number=self.block_number,
            log_index=len(self.logs),
            address=address,
            event=event,
            args=args,
        )
        self.logs.append(entry)
        return entry


class SimulatedChain:
    """One independent EVM chain.

    Stores contracts by their address. Externally owned accounts are not tracked,
    any address can be a ``sender``.
    """

    def __init__(self, chain_id: int = 1):
        self.chain_id = chain_id
        self.block_number = 0
        self.accounts: dict[HexAddress, Any] = {}
        self.logs: list[LogEntry] = []
        self._lock = threading.RLock()
        self._in_transaction = False

    def __repr__(self):
        return f"<SimulatedChain {get_chain_name(self.chain_id)} ({self.chain_id}) at block {self.block_number}>"

    def get_contract(self, address: HexAddress | str) -> Any | None:
        """Get a contract deployed at an address, or ``None``."""
        return self.accounts.get(Web3.to_checksum_address(address))

    def is_occupied(self, address: HexAddress | str) -> bool:
        """Does the address have code."""
        return Web3.to_checksum_address(address) in self.accounts

    def get_logs(self, event: str | None = None, block_number: int | None = None) -> list[LogEntry]:
        """Committed events, in emission order."""
        return [
            log
            for log in self.logs
            if (event is None or log.event == event) and (block_number is None or log.block_number == block_number)
        ]

    def create2(
        self,
        tx: Transaction,
        deployer: HexAddress | str,
        salt: bytes,
        init_code: bytes,
        constructor: Callable[[HexAddress], T],
    ) -> T:
        """Execute CREATE2 on behalf of a deployer contract.

        :param tx:
            Currently running transaction

        :param deployer:
            Contract executing the CREATE2 opcode

        :param constructor:
            Called with the derived address to construct the contract object

        :raise DeploymentCollision:
            If the address is already taken
        """
        assert tx.chain is self, "Transaction belongs to another chain"
        address = get_create2_address(deployer, salt, init_code)
        if self.is_occupied(address):
            raise DeploymentCollision(address)
        contract = constructor(address)
        self.accounts[address] = contract
        logger.info("Created %s at %s on %s", type(contract).__name__, address, get_chain_name(self.chain_id))
        return contract

    def transact(self, func: Callable[..., T], *args, sender: HexAddress | str, **kwargs) -> T:
        """Run a state changing contract function as a transaction.

        ``func`` is called as ``func(tx, *args, **kwargs)``.

        :raise RuntimeError:
            Called from within a running transaction

        :raise Exception:
            Whatever ``func`` raised, including ``KeyboardInterrupt`` and other ``BaseException``.
            The chain state is as it was before the call.

        :return:
            What ``func`` returned
        """
        with self._lock:
            self._enter_transaction()
            try:
                tx = Transaction(self, sender, self.block_number + 1)
                snapshot = self._snapshot()
                try:
                    result = func(tx, *args, **kwargs)
                except BaseException as e:
                    self._restore(snapshot)
                    logger.info("Transaction from %s reverted: %r", tx.sender, e)
                    raise
                self.block_number = tx.block_number
                self.logs.extend(tx.logs)
                return result
            finally:
                self._in_transaction = False

    def call(self, func: Callable[..., T], *args, sender: HexAddress | str, **kwargs) -> T:
        """Dry-run a contract function.

        Like ``eth_call``: the result is returned, but any state changes
        and events are discarded.
        """
        with self._lock:
            self._enter_transaction()
            try:
                tx = Transaction(self, sender, self.block_number + 1)
                snapshot = self._snapshot()
                try:
                    return func(tx, *args, **kwargs)
                finally:
                    self._restore(snapshot)
            finally:
                self._in_transaction = False

    def _enter_transaction(self):
        # The lock is reentrant, so the same thread could get here from inside a running transaction
        if self._in_transaction:
            raise RuntimeError("Nested transactions are not supported, call contract functions directly with the running tx")
        self._in_transaction = True

    def _snapshot(self) -> dict[HexAddress, tuple[Any, dict]]:
        return {address: (contract, copy.deepcopy(contract.__dict__)) for address, contract in self.accounts.items()}

    def _restore(self, snapshot: dict[HexAddress, tuple[Any, dict]]):
        # Restore in place, so references held by the callers stay valid
        self.accounts = {address: contract for address, (contract, _) in snapshot.items()}
        for contract, state in snapshot.values():
            contract.__dict__.clear()
            contract.__dict__.update(state)
