"""
CipherDAO TOML Configuration Loader

Loads all sections of cipherdao.toml with environment variable overrides.

Environment variable mapping:
    [protocol] voting_duration    → CIPHERDAO_VOTING_DURATION
    [protocol] decryption_timeout → CIPHERDAO_DECRYPTION_TIMEOUT
    [oracle]   signers            → CIPHERDAO_ORACLE_SIGNERS (comma separated)
    [contract] address            → CIPHERDAO_CONTRACT_ADDRESS
    ...
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, List, Optional

try:
    import tomllib as tomli  # Python 3.11+
except ImportError:
    try:
        import tomli  # type: ignore[no-redef]
    except ImportError:
        tomli = None  # type: ignore[assignment]

from ..constants import (
    DECRYPTION_CALLBACK_ID,
    DECRYPTION_TIMEOUT,
    DEFAULT_ATTESTATION_THRESHOLD,
    DEFAULT_CHAIN_ID,
    MAX_DESCRIPTION_LENGTH,
    MAX_STAKE,
    MAX_TITLE_LENGTH,
    MIN_STAKE,
    MIN_VOTING_POWER,
    REVEAL_PERIOD,
    VOTING_DURATION,
)
from ..crypto import is_valid_address, to_checksum_address
from ..exceptions import ConfigurationError

logger = logging.getLogger(__name__)


def _decimal(value: Any, name: str) -> Decimal:
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise ConfigurationError(f"{name} is not a valid amount: {value!r}")


def _int_env(name: str) -> Optional[int]:
    v = os.environ.get(name)
    if not v:
        return None
    try:
        return int(v)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {v!r}")


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


@dataclass
class ProtocolConfig:
    """[protocol] section: lifecycle timing, stake bounds, metadata limits."""
    voting_duration: int = VOTING_DURATION
    reveal_period: int = REVEAL_PERIOD
    decryption_timeout: int = DECRYPTION_TIMEOUT
    min_stake: Decimal = MIN_STAKE
    max_stake: Decimal = MAX_STAKE
    min_voting_power: int = MIN_VOTING_POWER
    max_title_length: int = MAX_TITLE_LENGTH
    max_description_length: int = MAX_DESCRIPTION_LENGTH

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProtocolConfig":
        return cls(
            voting_duration=int(data.get("voting_duration", VOTING_DURATION)),
            reveal_period=int(data.get("reveal_period", REVEAL_PERIOD)),
            decryption_timeout=int(data.get("decryption_timeout", DECRYPTION_TIMEOUT)),
            min_stake=_decimal(data.get("min_stake", MIN_STAKE), "min_stake"),
            max_stake=_decimal(data.get("max_stake", MAX_STAKE), "max_stake"),
            min_voting_power=int(data.get("min_voting_power", MIN_VOTING_POWER)),
            max_title_length=int(data.get("max_title_length", MAX_TITLE_LENGTH)),
            max_description_length=int(
                data.get("max_description_length", MAX_DESCRIPTION_LENGTH)
            ),
        )

    def apply_env(self) -> None:
        """Override from environment variables."""
        if (v := _int_env("CIPHERDAO_VOTING_DURATION")) is not None:
            self.voting_duration = v
        if (v := _int_env("CIPHERDAO_REVEAL_PERIOD")) is not None:
            self.reveal_period = v
        if (v := _int_env("CIPHERDAO_DECRYPTION_TIMEOUT")) is not None:
            self.decryption_timeout = v
        if v := os.environ.get("CIPHERDAO_MIN_STAKE"):
            self.min_stake = _decimal(v, "CIPHERDAO_MIN_STAKE")
        if v := os.environ.get("CIPHERDAO_MAX_STAKE"):
            self.max_stake = _decimal(v, "CIPHERDAO_MAX_STAKE")

    def validate(self) -> None:
        for name in ("voting_duration", "reveal_period", "decryption_timeout"):
            if getattr(self, name) <= 0:
                raise ConfigurationError(f"{name} must be > 0")
        if self.min_stake <= 0:
            raise ConfigurationError("min_stake must be > 0")
        if self.max_stake < self.min_stake:
            raise ConfigurationError(
                f"max_stake {self.max_stake} < min_stake {self.min_stake}"
            )
        if self.min_voting_power < 0:
            raise ConfigurationError("min_voting_power must be >= 0")
        if self.max_title_length < 1 or self.max_description_length < 0:
            raise ConfigurationError("Invalid metadata length limits")


@dataclass
class OracleConfig:
    """[oracle] section: who may attest decryption results."""
    signers: List[str] = field(default_factory=list)
    threshold: int = DEFAULT_ATTESTATION_THRESHOLD
    chain_id: int = DEFAULT_CHAIN_ID
    callback_id: str = DECRYPTION_CALLBACK_ID

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OracleConfig":
        return cls(
            signers=list(data.get("signers", [])),
            threshold=int(data.get("threshold", DEFAULT_ATTESTATION_THRESHOLD)),
            chain_id=int(data.get("chain_id", DEFAULT_CHAIN_ID)),
            callback_id=data.get("callback_id", DECRYPTION_CALLBACK_ID),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("CIPHERDAO_ORACLE_SIGNERS"):
            self.signers = [s.strip() for s in v.split(",") if s.strip()]
        if (v := _int_env("CIPHERDAO_ORACLE_THRESHOLD")) is not None:
            self.threshold = v
        if (v := _int_env("CIPHERDAO_CHAIN_ID")) is not None:
            self.chain_id = v

    def validate(self) -> None:
        if not self.signers:
            raise ConfigurationError("At least one oracle signer is required")
        for signer in self.signers:
            if not is_valid_address(signer):
                raise ConfigurationError(f"Invalid oracle signer address: {signer!r}")
        distinct = {to_checksum_address(s) for s in self.signers}
        if self.threshold < 1 or self.threshold > len(distinct):
            raise ConfigurationError(
                f"threshold must be between 1 and {len(distinct)}, got {self.threshold}"
            )
        if self.chain_id < 1:
            raise ConfigurationError("chain_id must be >= 1")


@dataclass
class ContractConfig:
    """[contract] section."""
    address: str = ""
    owner: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContractConfig":
        return cls(
            address=data.get("address", ""),
            owner=data.get("owner", ""),
        )

    def apply_env(self) -> None:
        if v := os.environ.get("CIPHERDAO_CONTRACT_ADDRESS"):
            self.address = v
        if v := os.environ.get("CIPHERDAO_OWNER"):
            self.owner = v

    def validate(self) -> None:
        if not is_valid_address(self.address):
            raise ConfigurationError(f"Invalid contract address: {self.address!r}")
        if not is_valid_address(self.owner):
            raise ConfigurationError(f"Invalid owner address: {self.owner!r}")


# -----------------------------------------------------------------------
# Top-level config
# -----------------------------------------------------------------------

@dataclass
class DAOConfig:
    """
    Unified configuration: every section of cipherdao.toml plus
    environment overrides.
    """
    protocol: ProtocolConfig = field(default_factory=ProtocolConfig)
    oracle: OracleConfig = field(default_factory=OracleConfig)
    contract: ContractConfig = field(default_factory=ContractConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DAOConfig":
        return cls(
            protocol=ProtocolConfig.from_dict(data.get("protocol", {})),
            oracle=OracleConfig.from_dict(data.get("oracle", {})),
            contract=ContractConfig.from_dict(data.get("contract", {})),
        )

    @classmethod
    def from_file(cls, config_path: str) -> "DAOConfig":
        """
        Load configuration from a TOML file. A missing file yields defaults
        with environment overrides.
        """
        if tomli is None:
            raise ImportError(
                "tomli is required for TOML config loading. "
                "Install it: pip install tomli"
            )

        path = Path(config_path)
        if not path.exists():
            logger.warning("Config file not found: %s, using defaults", config_path)
            cfg = cls()
            cfg.apply_env()
            return cfg

        with open(path, "rb") as f:
            raw = tomli.load(f)

        cfg = cls.from_dict(raw)
        cfg.apply_env()
        return cfg

    def apply_env(self) -> None:
        self.protocol.apply_env()
        self.oracle.apply_env()
        self.contract.apply_env()

    def validate(self) -> bool:
        """
        Raises:
            ConfigurationError: on invalid config
        """
        self.protocol.validate()
        self.oracle.validate()
        self.contract.validate()
        return True

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to dict (for diagnostics, NOT for re-creating TOML)."""
        return {
            "protocol": {
                "voting_duration": self.protocol.voting_duration,
                "reveal_period": self.protocol.reveal_period,
                "decryption_timeout": self.protocol.decryption_timeout,
                "min_stake": str(self.protocol.min_stake),
                "max_stake": str(self.protocol.max_stake),
                "min_voting_power": self.protocol.min_voting_power,
                "max_title_length": self.protocol.max_title_length,
                "max_description_length": self.protocol.max_description_length,
            },
            "oracle": {
                "signers": list(self.oracle.signers),
                "threshold": self.oracle.threshold,
                "chain_id": self.oracle.chain_id,
                "callback_id": self.oracle.callback_id,
            },
            "contract": {
                "address": self.contract.address,
                "owner": self.contract.owner,
            },
        }


def load_config(path: Optional[str] = None) -> DAOConfig:
    """
    Load configuration.

    Resolution order:
        1. Explicit *path* argument
        2. CIPHERDAO_CONFIG env var
        3. ./cipherdao.toml in current directory
        4. Defaults (with env overrides)
    """
    if path is None:
        path = os.environ.get("CIPHERDAO_CONFIG", "cipherdao.toml")

    return DAOConfig.from_file(path)
