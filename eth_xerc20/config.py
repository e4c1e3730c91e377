"""Factory configuration.

Read from environment variables in deployment scripts:

- ``XERC20_FACTORY_SALT``: hex salt for deploying the factory through the deterministic deployment proxy

- ``XERC20_TOKEN_ARTIFACT``: path to the compiled ``XERC20`` artifact JSON

- ``XERC20_LOCKBOX_ARTIFACT``: path to the compiled ``XERC20Lockbox`` artifact JSON

Without artifacts, the simulated contracts use placeholder creation code.
The predicted addresses then only match the simulation, not a real chain.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping

from hexbytes import HexBytes

from eth_xerc20.abi import get_creation_code, get_placeholder_creation_code


def _pad_salt(value: bytes) -> HexBytes:
    if len(value) > 32:
        raise ValueError(f"Factory salt longer than 32 bytes: {value.hex()}")
    return HexBytes(value.rjust(32, b"\x00"))


@dataclass(slots=True, frozen=True)
class FactoryConfig:
    """How the factory and the contracts it creates are built."""

    #: CREATE2 salt of the factory itself.
    #: Use the same value on every chain to get the same factory address.
    factory_salt: HexBytes = field(default_factory=lambda: HexBytes(b"\x00" * 32))

    #: Compiled token artifact, if predicting real chain addresses
    token_artifact: Path | None = None

    #: Compiled lockbox artifact, if predicting real chain addresses
    lockbox_artifact: Path | None = None

    def __post_init__(self):
        object.__setattr__(self, "factory_salt", _pad_salt(bytes(HexBytes(self.factory_salt))))

    @classmethod
    def from_env(cls, environ: Mapping[str, str] = os.environ) -> "FactoryConfig":
        """Read configuration from environment variables."""
        salt = environ.get("XERC20_FACTORY_SALT")
        token_artifact = environ.get("XERC20_TOKEN_ARTIFACT")
        lockbox_artifact = environ.get("XERC20_LOCKBOX_ARTIFACT")
        return cls(
            factory_salt=HexBytes(salt) if salt else HexBytes(b"\x00" * 32),
            token_artifact=Path(token_artifact) if token_artifact else None,
            lockbox_artifact=Path(lockbox_artifact) if lockbox_artifact else None,
        )

    def get_token_creation_code(self) -> HexBytes:
        if self.token_artifact:
            return get_creation_code(self.token_artifact)
        return get_placeholder_creation_code("XERC20")

    def get_lockbox_creation_code(self) -> HexBytes:
        if self.lockbox_artifact:
            return get_creation_code(self.lockbox_artifact)
        return get_placeholder_creation_code("XERC20Lockbox")
